from .common import ApiRecord, Empty, ErrorBody, ErrorEnvelope, JsonObject, Status
from .operations import Operation

__all__ = [
    "ApiRecord",
    "Empty",
    "ErrorBody",
    "ErrorEnvelope",
    "JsonObject",
    "Operation",
    "Status",
]
