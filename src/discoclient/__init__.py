from __future__ import annotations

__all__ = [
    "__version__",
    "AccessToken",
    "Anonymous",
    "ApiError",
    "ApiKey",
    "ApiRecord",
    "ApiRequest",
    "AsyncHttpxTransport",
    "ClientOptions",
    "Credentials",
    "DiscoClientError",
    "DiscoveryDocumentError",
    "HttpxTransport",
    "MethodSpec",
    "OAuthToken",
    "Operation",
    "OperationError",
    "OperationPoller",
    "OperationTimeoutError",
    "Parameter",
    "ParameterKind",
    "RequestValidationError",
    "Resource",
    "ResourceSpec",
    "ResponseDecodeError",
    "Service",
    "ServiceSpec",
    "Status",
    "TransportError",
    "build",
]

__version__ = "0.1.0"

from .config import ClientOptions  # noqa: E402
from .credentials import AccessToken, Anonymous, ApiKey, Credentials, OAuthToken  # noqa: E402
from .discovery import build  # noqa: E402
from .errors import (  # noqa: E402
    ApiError,
    DiscoClientError,
    DiscoveryDocumentError,
    OperationError,
    OperationTimeoutError,
    RequestValidationError,
    ResponseDecodeError,
    TransportError,
)
from .models import ApiRecord, Operation, Status  # noqa: E402
from .parameters import Parameter, ParameterKind  # noqa: E402
from .polling import OperationPoller  # noqa: E402
from .request import ApiRequest, MethodSpec  # noqa: E402
from .resource import Resource, ResourceSpec  # noqa: E402
from .service import Service, ServiceSpec  # noqa: E402
from .transport import AsyncHttpxTransport, HttpxTransport  # noqa: E402
