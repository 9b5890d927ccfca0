from __future__ import annotations

from typing import Any

from pydantic import ConfigDict, model_validator

from ..errors import OperationError
from .common import ApiRecord, JsonObject, Status


class Operation(ApiRecord):
    """A long-running operation as returned by ``operations.get``.

    While ``done`` is false neither ``error`` nor ``response`` may be present.
    Once ``done`` is true exactly one of them is. Instances are frozen so the
    rule holds for as long as the record lives.
    """

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    done: bool | None = None
    error: Status | None = None
    metadata: JsonObject | None = None
    response: JsonObject | None = None

    @model_validator(mode="after")
    def _check_outcome(self) -> "Operation":
        has_error = self.error is not None
        has_response = self.response is not None
        if self.done:
            if has_error and has_response:
                raise ValueError("completed operation carries both error and response")
            if not has_error and not has_response:
                raise ValueError("completed operation carries neither error nor response")
        elif has_error or has_response:
            raise ValueError("operation in progress must not carry error or response")
        return self

    @property
    def is_terminal(self) -> bool:
        return bool(self.done)

    def result(self) -> dict[str, Any]:
        if not self.done:
            raise RuntimeError(f"Operation {self.name or '<unnamed>'} is still in progress")
        if self.error is not None:
            raise OperationError(self)
        return dict(self.response or {})
