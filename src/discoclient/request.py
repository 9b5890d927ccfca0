from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Mapping
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import structlog
from pydantic import ValidationError

from .errors import ApiError, RequestValidationError, ResponseDecodeError, TransportError
from .models.common import ApiRecord, Empty, ErrorEnvelope
from .parameters import CREDENTIAL_PARAMETERS, Parameter, ParameterKind
from .paths import check_template, expand, placeholders
from .transport import HttpRequest, HttpResponse

if TYPE_CHECKING:
    from .service import Service

log = structlog.get_logger(__name__)

BODY_PARAMETER = Parameter("body", ParameterKind.BODY, required=True, description="The body of the request.")


@dataclass(frozen=True, slots=True)
class MethodSpec:
    """Static description of one API method.

    ``path`` is relative to the service base URI and may only contain
    placeholders for the declared path parameters.
    """

    id: str
    name: str
    http_method: str
    path: str
    parameters: tuple[Parameter, ...] = ()
    request_model: type[ApiRecord] | None = None
    response_model: type[ApiRecord] = Empty
    description: str | None = None
    scopes: tuple[str, ...] = ()
    path_order: tuple[str, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "http_method", self.http_method.upper())
        names = [p.name for p in self.parameters]
        if len(names) != len(set(names)):
            raise ValueError(f"Method {self.id} declares a parameter twice")
        if any(p.kind is ParameterKind.BODY for p in self.parameters):
            raise ValueError(f"Method {self.id} declares its body as a parameter; use request_model")
        check_template(
            self.path,
            [(p.name, p.required) for p in self.parameters if p.kind is ParameterKind.PATH],
        )
        object.__setattr__(self, "path_order", tuple(placeholders(self.path)))

    def descriptors(self) -> tuple[Parameter, ...]:
        if self.request_model is None:
            return self.parameters
        return self.parameters + (BODY_PARAMETER,)


def _redact(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url
    query = [
        (key, "***" if key in CREDENTIAL_PARAMETERS else value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
    ]
    return urlunsplit(parts._replace(query=urlencode(query)))


def _looks_like_json(content_type: str) -> bool:
    if not content_type:
        return False
    mime = content_type.split(";", 1)[0].strip().lower()
    return mime == "application/json" or mime.endswith("+json") or mime == "text/json"


def error_from_response(response: HttpResponse) -> ApiError:
    """Decode a non-2xx response into an :class:`ApiError`.

    The status code is always the transport's status code, even when the
    error envelope carries a different ``code``.
    """

    status = response.status_code
    text = response.text
    payload: Any | None = None
    if _looks_like_json(response.content_type()) or text.lstrip().startswith("{"):
        try:
            payload = json.loads(text) if text else None
        except json.JSONDecodeError:
            payload = None

    if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
        try:
            envelope = ErrorEnvelope.from_wire(payload)
        except ValidationError:
            envelope = None
        if envelope is not None:
            return ApiError(
                status,
                message=envelope.error.message,
                details=envelope.error.details,
                error=envelope,
                response_body=payload,
            )

    return ApiError(
        status,
        message=text or None,
        response_body=payload if payload is not None else text,
    )


class ApiRequest:
    """A single invocation of a method.

    Parameters are validated as they are bound, and again in :meth:`build`.
    A request is executed at most once.
    """

    def __init__(self, service: Service, method: MethodSpec, *args: Any, body: Any = None, **params: Any) -> None:
        self._service = service
        self._method = method
        self._executed = False
        self._params: dict[str, Any] = {}

        self._descriptors: dict[str, Parameter] = {}
        for param in service.spec.parameters:
            self._descriptors[param.name] = param
        for param in method.parameters:
            self._descriptors[param.name] = param
        self._by_attr: dict[str, str] = {p.attr: p.name for p in self._descriptors.values()}

        slots = list(method.path_order)
        if method.request_model is not None:
            slots.append("body")
        if len(args) > len(slots):
            raise TypeError(f"{method.id}() takes {len(slots)} positional arguments but {len(args)} were given")
        for slot, value in zip(slots, args):
            if slot == "body":
                if body is not None:
                    raise TypeError(f"{method.id}() got multiple values for 'body'")
                body = value
                continue
            attr = self._descriptors[slot].attr
            if slot in params or attr in params:
                raise TypeError(f"{method.id}() got multiple values for {slot!r}")
            params[slot] = value

        self._body = self._coerce_body(body)

        options = service.options
        if options.quota_user is not None:
            self._params["quotaUser"] = options.quota_user
        if options.pretty_print is not None:
            self._params["prettyPrint"] = options.pretty_print

        self.set(**params)
        self.validate()

    @property
    def method(self) -> MethodSpec:
        return self._method

    @property
    def http_method(self) -> str:
        return self._method.http_method

    @property
    def params(self) -> Mapping[str, Any]:
        return dict(self._params)

    @property
    def body(self) -> ApiRecord | None:
        return self._body

    @property
    def executed(self) -> bool:
        return self._executed

    def _resolve(self, key: str) -> Parameter:
        name = key if key in self._descriptors else self._by_attr.get(key)
        if name is None:
            raise RequestValidationError(f"Unknown parameter for {self._method.id}: {key}", parameter=key)
        return self._descriptors[name]

    def _coerce_body(self, body: Any) -> ApiRecord | None:
        model = self._method.request_model
        if model is None:
            if body is not None:
                raise RequestValidationError(f"{self._method.id} does not take a request body", parameter="body")
            return None
        if body is None:
            raise RequestValidationError(f"Missing required request body for {self._method.id}", parameter="body")
        if isinstance(body, model):
            return body
        if isinstance(body, Mapping):
            try:
                return model.model_validate(dict(body))
            except ValidationError as exc:
                raise RequestValidationError(f"Invalid request body: {exc}", parameter="body") from exc
        raise RequestValidationError(
            f"Request body must be {model.__name__} or a mapping, got {type(body).__name__}",
            parameter="body",
        )

    def set(self, **params: Any) -> "ApiRequest":
        if self._executed:
            raise RuntimeError(f"Request {self._method.id} has already been executed")
        for key, value in params.items():
            param = self._resolve(key)
            param.validate(value)
            if value is None:
                self._params.pop(param.name, None)
            else:
                self._params[param.name] = value
        return self

    def validate(self) -> None:
        for param in self._descriptors.values():
            param.validate(self._params.get(param.name))
        if self._method.request_model is not None and self._body is None:
            raise RequestValidationError(f"Missing required request body for {self._method.id}", parameter="body")

    def build(self) -> HttpRequest:
        self.validate()

        path = expand(self._method.path, {name: self._params[name] for name in self._method.path_order})

        query: list[tuple[str, str]] = []
        for param in self._descriptors.values():
            if param.kind is not ParameterKind.QUERY:
                continue
            value = self._params.get(param.name)
            if value is None:
                continue
            query.extend((param.name, item) for item in param.to_query(value))

        headers = {"Accept": "application/json", **self._service.options.default_headers()}
        content: bytes | None = None
        if self._body is not None:
            content = json.dumps(self._body.to_wire()).encode("utf-8")
            headers["Content-Type"] = "application/json; charset=utf-8"

        self._service.credentials.apply(headers, query)

        url = self._service.base_uri.rstrip("/") + "/" + path.lstrip("/")
        if query:
            url = f"{url}?{urlencode(query)}"
        return HttpRequest(method=self._method.http_method, url=url, headers=headers, content=content)

    def _begin(self) -> HttpRequest:
        if self._executed:
            raise RuntimeError(f"Request {self._method.id} has already been executed")
        request = self.build()
        self._executed = True
        log.debug("request.send", method_id=self._method.id, http_method=request.method, url=_redact(request.url))
        return request

    def _decode(self, response: HttpResponse) -> Any:
        log.debug("request.response", method_id=self._method.id, status_code=response.status_code)
        if not response.ok:
            error = error_from_response(response)
            log.debug("request.failed", method_id=self._method.id, status_code=error.status_code, error=error.message)
            raise error

        model = self._method.response_model
        etag = response.header("ETag")
        if not response.content.strip():
            return model.from_wire({}, etag=etag)

        try:
            payload = json.loads(response.content.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ResponseDecodeError(
                response.status_code,
                message=f"Invalid JSON response: {exc}",
                response_body=response.text,
            ) from exc
        if not isinstance(payload, dict):
            raise ResponseDecodeError(
                response.status_code,
                message=f"Expected a JSON object, got {type(payload).__name__}",
                response_body=payload,
            )
        try:
            return model.from_wire(payload, etag=etag)
        except ValidationError as exc:
            raise ResponseDecodeError(
                response.status_code,
                message=f"Response does not match {model.__name__}: {exc}",
                response_body=payload,
            ) from exc

    def execute(self) -> Any:
        request = self._begin()
        try:
            response = self._service.transport.send(request)
        except TransportError as exc:
            log.debug("request.transport_error", method_id=self._method.id, error=str(exc))
            raise
        return self._decode(response)

    async def execute_async(self) -> Any:
        transport = self._service.async_transport
        if transport is None:
            raise RuntimeError(f"Service {self._service.name} has no async transport")
        request = self._begin()
        try:
            response = await transport.send(request)
        except TransportError as exc:
            log.debug("request.transport_error", method_id=self._method.id, error=str(exc))
            raise
        return self._decode(response)

    def __repr__(self) -> str:
        return f"ApiRequest({self._method.id}, params={sorted(self._params)})"
