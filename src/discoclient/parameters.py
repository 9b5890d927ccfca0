from __future__ import annotations

import keyword
import re
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from typing import Any

from .errors import RequestValidationError


class ParameterKind(str, Enum):
    PATH = "path"
    QUERY = "query"
    BODY = "body"


def python_name(wire_name: str) -> str:
    value = re.sub(r"(?<=[a-z0-9])([A-Z])", r"_\1", wire_name).lower()
    value = re.sub(r"[^0-9a-z_]", "_", value)
    value = re.sub(r"_+", "_", value).strip("_")
    if not value:
        value = "value"
    if value[0].isdigit():
        value = f"_{value}"
    if keyword.iskeyword(value):
        value += "_"
    return value


@dataclass(frozen=True, slots=True)
class Parameter:
    name: str
    kind: ParameterKind
    required: bool = False
    type: str = "string"
    pattern: str | None = None
    enum: tuple[str, ...] | None = None
    repeated: bool = False
    default: str | None = None
    description: str | None = None
    attr: str = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "attr", python_name(self.name))

    def validate(self, value: Any) -> None:
        if value is None:
            if self.required:
                raise RequestValidationError(f"Missing required parameter: {self.name}", parameter=self.name)
            return

        if isinstance(value, (list, tuple)):
            if not self.repeated:
                raise RequestValidationError(
                    f"Parameter {self.name} does not accept multiple values", parameter=self.name
                )
            if self.required and not value:
                raise RequestValidationError(f"Missing required parameter: {self.name}", parameter=self.name)
            for item in value:
                self._validate_one(item)
            return

        self._validate_one(value)

    def _validate_one(self, value: Any) -> None:
        if self.type == "boolean" and not isinstance(value, bool):
            raise RequestValidationError(f"Parameter {self.name} must be a boolean", parameter=self.name)
        if self.type == "integer" and (isinstance(value, bool) or not isinstance(value, int)):
            raise RequestValidationError(f"Parameter {self.name} must be an integer", parameter=self.name)

        text = _format(value)
        if self.enum is not None and text not in self.enum:
            allowed = ", ".join(self.enum)
            raise RequestValidationError(
                f"Parameter {self.name} must be one of [{allowed}], got {text!r}", parameter=self.name
            )
        if self.pattern is not None and not _matches(self.pattern, text):
            raise RequestValidationError(
                f"Parameter {self.name} value {text!r} does not match pattern {self.pattern}",
                parameter=self.name,
            )

    def to_query(self, value: Any) -> list[str]:
        if isinstance(value, (list, tuple)):
            return [_format(item) for item in value]
        return [_format(value)]


@lru_cache(maxsize=256)
def _compile(pattern: str) -> tuple[re.Pattern[str], bool]:
    anchored = pattern.endswith("$") and not pattern.endswith("\\$")
    return re.compile(pattern), anchored


def _matches(pattern: str, text: str) -> bool:
    # Python's `$` also matches before a trailing newline; an anchored
    # pattern has to consume the whole value.
    regex, anchored = _compile(pattern)
    match = regex.search(text)
    if match is None:
        return False
    return not anchored or match.end() == len(text)


def _format(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


STANDARD_PARAMETERS: tuple[Parameter, ...] = (
    Parameter("$.xgafv", ParameterKind.QUERY, enum=("1", "2"), description="V1 error format."),
    Parameter("access_token", ParameterKind.QUERY, description="OAuth access token."),
    Parameter(
        "alt",
        ParameterKind.QUERY,
        enum=("json", "media", "proto"),
        default="json",
        description="Data format for response.",
    ),
    Parameter("callback", ParameterKind.QUERY, description="JSONP"),
    Parameter("fields", ParameterKind.QUERY, description="Selector specifying which fields to include in a partial response."),
    Parameter("key", ParameterKind.QUERY, description="API key."),
    Parameter("oauth_token", ParameterKind.QUERY, description="OAuth 2.0 token for the current user."),
    Parameter(
        "prettyPrint",
        ParameterKind.QUERY,
        type="boolean",
        default="true",
        description="Returns response with indentations and line breaks.",
    ),
    Parameter("quotaUser", ParameterKind.QUERY, description="Quota attribution for server-side applications."),
    Parameter("uploadType", ParameterKind.QUERY, description='Legacy upload protocol for media (e.g. "media", "multipart").'),
    Parameter("upload_protocol", ParameterKind.QUERY, description='Upload protocol for media (e.g. "raw", "multipart").'),
)

CREDENTIAL_PARAMETERS = frozenset({"access_token", "key", "oauth_token"})
