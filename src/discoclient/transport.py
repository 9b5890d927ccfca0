from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

import httpx

from .errors import TransportError


@dataclass(frozen=True, slots=True)
class HttpRequest:
    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    content: bytes | None = None


@dataclass(frozen=True, slots=True)
class HttpResponse:
    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    content: bytes = b""

    def header(self, name: str, default: str | None = None) -> str | None:
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return default

    def content_type(self) -> str:
        return self.header("Content-Type", "") or ""

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code <= 299


@runtime_checkable
class Transport(Protocol):
    def send(self, request: HttpRequest) -> HttpResponse: ...


@runtime_checkable
class AsyncTransport(Protocol):
    async def send(self, request: HttpRequest) -> HttpResponse: ...


def _to_response(response: httpx.Response) -> HttpResponse:
    return HttpResponse(
        status_code=response.status_code,
        headers=dict(response.headers.items()),
        content=response.content,
    )


def _transport_error(request: HttpRequest, exc: httpx.TransportError) -> TransportError:
    return TransportError(
        f"{exc.__class__.__name__}: {exc}",
        method=request.method,
        url=request.url,
    )


class HttpxTransport:
    def __init__(
        self,
        client: httpx.Client | None = None,
        *,
        timeout_s: float = 30.0,
        httpx_args: dict[str, Any] | None = None,
    ) -> None:
        self._owns_client = client is None
        if client is None:
            client = httpx.Client(timeout=timeout_s, **dict(httpx_args or {}))
        self._client = client

    @property
    def raw_client(self) -> httpx.Client:
        return self._client

    def send(self, request: HttpRequest) -> HttpResponse:
        try:
            response = self._client.request(
                request.method,
                request.url,
                headers=request.headers,
                content=request.content,
            )
        except httpx.TransportError as exc:
            raise _transport_error(request, exc) from exc
        return _to_response(response)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HttpxTransport":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class AsyncHttpxTransport:
    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        timeout_s: float = 30.0,
        httpx_args: dict[str, Any] | None = None,
    ) -> None:
        self._owns_client = client is None
        if client is None:
            client = httpx.AsyncClient(timeout=timeout_s, **dict(httpx_args or {}))
        self._client = client

    @property
    def raw_client(self) -> httpx.AsyncClient:
        return self._client

    async def send(self, request: HttpRequest) -> HttpResponse:
        try:
            response = await self._client.request(
                request.method,
                request.url,
                headers=request.headers,
                content=request.content,
            )
        except httpx.TransportError as exc:
            raise _transport_error(request, exc) from exc
        return _to_response(response)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "AsyncHttpxTransport":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
