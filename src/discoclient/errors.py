from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .models.common import ErrorEnvelope
    from .models.operations import Operation


class DiscoClientError(Exception):
    pass


class RequestValidationError(DiscoClientError, ValueError):
    """A request failed local validation; nothing was sent."""

    def __init__(self, message: str, *, parameter: str | None = None) -> None:
        self.parameter = parameter
        super().__init__(message)


class DiscoveryDocumentError(DiscoClientError, ValueError):
    def __init__(self, message: str, *, errors: list[str] | None = None) -> None:
        self.errors = list(errors or [])
        super().__init__(message)

    def __str__(self) -> str:
        base = super().__str__()
        if not self.errors:
            return base
        return base + "\n" + "\n".join(f"  - {e}" for e in self.errors)


class TransportError(DiscoClientError):
    def __init__(self, message: str, *, method: str | None = None, url: str | None = None) -> None:
        self.method = method
        self.url = url
        super().__init__(message)


class ApiError(DiscoClientError):
    def __init__(
        self,
        status_code: int,
        *,
        message: str | None = None,
        details: list[dict[str, Any]] | None = None,
        error: ErrorEnvelope | None = None,
        response_body: Any | None = None,
    ) -> None:
        self.status_code = status_code
        self.message = message
        self.details = list(details or [])
        self.error = error
        self.response_body = response_body

        super().__init__(str(self))

    def __str__(self) -> str:
        if self.error is not None and self.error.error.message:
            return f"API error {self.status_code}: {self.error.error.message}"
        if self.message:
            return f"API error {self.status_code}: {self.message}"
        return f"API error {self.status_code}"


class ResponseDecodeError(ApiError):
    """A 2xx response whose body does not match the declared record."""


class OperationError(DiscoClientError):
    def __init__(self, operation: Operation) -> None:
        self.operation = operation
        super().__init__(str(self))

    def __str__(self) -> str:
        status = self.operation.error
        name = self.operation.name or "<unnamed>"
        if status is None:
            return f"Operation {name} failed"
        return f"Operation {name} failed with code {status.code}: {status.message}"


class OperationTimeoutError(DiscoClientError):
    def __init__(self, operation: Operation | None, *, timeout_s: float) -> None:
        self.operation = operation
        self.timeout_s = timeout_s
        name = operation.name if operation is not None and operation.name else "<unknown>"
        super().__init__(f"Operation {name} did not complete within {timeout_s}s")
