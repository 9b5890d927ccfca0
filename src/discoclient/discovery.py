from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping, Sequence

import structlog
from jsonschema import Draft202012Validator
from ruamel.yaml import YAML

from .config.settings import ClientOptions
from .credentials import Credentials
from .errors import DiscoveryDocumentError
from .models import ApiRecord, Empty
from .parameters import STANDARD_PARAMETERS, Parameter, ParameterKind
from .request import MethodSpec
from .resource import ResourceSpec
from .schemas import materialize
from .service import Service, ServiceSpec
from .transport import AsyncTransport, Transport

log = structlog.get_logger(__name__)

_PARAMETER_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["type", "location"],
    "properties": {
        "type": {"enum": ["string", "integer", "number", "boolean", "any"]},
        "location": {"enum": ["path", "query"]},
        "required": {"type": "boolean"},
        "repeated": {"type": "boolean"},
        "pattern": {"type": "string"},
        "enum": {"type": "array", "items": {"type": "string"}},
        "default": {"type": "string"},
        "description": {"type": "string"},
    },
}

_REF_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["$ref"],
    "properties": {"$ref": {"type": "string"}},
}

DOCUMENT_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["name", "version", "rootUrl"],
    "properties": {
        "discoveryVersion": {"type": "string"},
        "name": {"type": "string", "minLength": 1},
        "version": {"type": "string", "minLength": 1},
        "title": {"type": "string"},
        "description": {"type": "string"},
        "rootUrl": {"type": "string", "pattern": "^https?://"},
        "servicePath": {"type": "string"},
        "batchPath": {"type": "string"},
        "features": {"type": "array", "items": {"type": "string"}},
        "auth": {
            "type": "object",
            "properties": {
                "oauth2": {
                    "type": "object",
                    "properties": {"scopes": {"type": "object"}},
                }
            },
        },
        "parameters": {"type": "object", "additionalProperties": {"$ref": "#/$defs/parameter"}},
        "schemas": {"type": "object", "additionalProperties": {"type": "object"}},
        "methods": {"type": "object", "additionalProperties": {"$ref": "#/$defs/method"}},
        "resources": {"type": "object", "additionalProperties": {"$ref": "#/$defs/resource"}},
    },
    "$defs": {
        "parameter": _PARAMETER_SCHEMA,
        "method": {
            "type": "object",
            "required": ["id", "path", "httpMethod"],
            "properties": {
                "id": {"type": "string"},
                "path": {"type": "string"},
                "httpMethod": {"enum": ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]},
                "description": {"type": "string"},
                "parameters": {"type": "object", "additionalProperties": {"$ref": "#/$defs/parameter"}},
                "parameterOrder": {"type": "array", "items": {"type": "string"}},
                "request": _REF_SCHEMA,
                "response": _REF_SCHEMA,
                "scopes": {"type": "array", "items": {"type": "string"}},
            },
        },
        "resource": {
            "type": "object",
            "properties": {
                "methods": {"type": "object", "additionalProperties": {"$ref": "#/$defs/method"}},
                "resources": {"type": "object", "additionalProperties": {"$ref": "#/$defs/resource"}},
            },
        },
    },
}


def _to_builtin(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {str(k): _to_builtin(v) for k, v in value.items()}
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return [_to_builtin(v) for v in value]
    return value


def load_document(path: str | Path) -> dict[str, Any]:
    path = Path(path)
    with path.open("r", encoding="utf-8") as file:
        if path.suffix.lower() in {".yaml", ".yml"}:
            data = YAML(typ="safe").load(file)
        else:
            data = json.load(file)
    if not isinstance(data, Mapping):
        raise DiscoveryDocumentError(f"Discovery document {path} is not an object")
    return _to_builtin(data)


def _json_path(err: object) -> str:
    path = getattr(err, "absolute_path", None)
    if not path:
        return "$"
    out = "$"
    for part in path:
        if isinstance(part, int):
            out += f"[{part}]"
        else:
            out += f".{part}"
    return out


def validate_document(document: Any) -> None:
    validator = Draft202012Validator(DOCUMENT_SCHEMA)
    errors = sorted(validator.iter_errors(document), key=lambda e: [str(p) for p in e.absolute_path])
    if errors:
        raise DiscoveryDocumentError(
            "Invalid discovery document",
            errors=[f"{_json_path(e)}: {e.message}" for e in errors],
        )


def _parse_parameter(name: str, data: Mapping[str, Any]) -> Parameter:
    kind = ParameterKind(data["location"])
    enum = data.get("enum")
    param_type = data.get("type", "string")
    if param_type not in {"integer", "boolean"}:
        param_type = "string"
    return Parameter(
        name=name,
        kind=kind,
        required=bool(data.get("required", False)),
        type=param_type,
        pattern=data.get("pattern"),
        enum=tuple(enum) if enum else None,
        repeated=bool(data.get("repeated", False)),
        default=data.get("default"),
        description=data.get("description"),
    )


class _Parser:
    def __init__(self, models: Mapping[str, type[ApiRecord]]) -> None:
        self._models = models

    def model(self, ref: Mapping[str, Any] | None, *, method_id: str) -> type[ApiRecord] | None:
        if ref is None:
            return None
        name = ref["$ref"]
        try:
            return self._models[name]
        except KeyError:
            raise DiscoveryDocumentError(f"Method {method_id} references unknown schema {name!r}") from None

    def method(self, name: str, data: Mapping[str, Any]) -> MethodSpec:
        method_id = data["id"]
        declared = data.get("parameters") or {}
        order = list(data.get("parameterOrder") or [])
        names = order + [n for n in declared if n not in order]
        try:
            parameters = tuple(_parse_parameter(n, declared[n]) for n in names)
            return MethodSpec(
                id=method_id,
                name=name,
                http_method=data["httpMethod"],
                path=data["path"],
                parameters=parameters,
                request_model=self.model(data.get("request"), method_id=method_id),
                response_model=self.model(data.get("response"), method_id=method_id) or Empty,
                description=data.get("description"),
                scopes=tuple(data.get("scopes") or ()),
            )
        except KeyError as exc:
            raise DiscoveryDocumentError(f"Method {method_id} lists undeclared parameter {exc}") from exc
        except ValueError as exc:
            if isinstance(exc, DiscoveryDocumentError):
                raise
            raise DiscoveryDocumentError(f"Method {method_id}: {exc}") from exc

    def resource(self, name: str, data: Mapping[str, Any]) -> ResourceSpec:
        return ResourceSpec(
            name=name,
            methods=tuple(self.method(n, m) for n, m in (data.get("methods") or {}).items()),
            resources=tuple(self.resource(n, r) for n, r in (data.get("resources") or {}).items()),
        )


def parse(
    document: Mapping[str, Any],
    *,
    models: Mapping[str, type[ApiRecord]] | None = None,
) -> ServiceSpec:
    """Turn a discovery document into a :class:`ServiceSpec`.

    Schemas not covered by ``models`` become record classes generated from the
    document's property declarations.
    """

    validate_document(document)
    name = document["name"]
    version = document["version"]

    schemas = document.get("schemas") or {}
    try:
        namespace = materialize(schemas)
    except KeyError as exc:
        raise DiscoveryDocumentError(f"Invalid schema reference: {exc}") from exc
    namespace.update(models or {})

    parser = _Parser(namespace)
    declared_params = document.get("parameters")
    parameters = (
        tuple(_parse_parameter(n, p) for n, p in declared_params.items()) if declared_params else STANDARD_PARAMETERS
    )
    scopes = ((document.get("auth") or {}).get("oauth2") or {}).get("scopes") or {}

    spec = ServiceSpec(
        name=name,
        version=version,
        root_url=document["rootUrl"],
        service_path=document.get("servicePath", ""),
        batch_path=document.get("batchPath"),
        title=document.get("title"),
        description=document.get("description"),
        scopes=frozenset(scopes),
        discovery_version=document.get("discoveryVersion", "v1"),
        features=tuple(document.get("features") or ()),
        parameters=parameters,
        resources=tuple(parser.resource(n, r) for n, r in (document.get("resources") or {}).items()),
        methods=tuple(parser.method(n, m) for n, m in (document.get("methods") or {}).items()),
        schemas=namespace,
    )
    log.debug("discovery.parsed", service=name, version=version, methods=sum(1 for _ in spec.walk()))
    return spec


def build(
    source: Mapping[str, Any] | str | Path,
    *,
    transport: Transport | None = None,
    async_transport: AsyncTransport | None = None,
    credentials: Credentials | None = None,
    options: ClientOptions | None = None,
    models: Mapping[str, type[ApiRecord]] | None = None,
) -> Service:
    document = source if isinstance(source, Mapping) else load_document(source)
    return Service(
        parse(document, models=models),
        transport=transport,
        async_transport=async_transport,
        credentials=credentials,
        options=options,
    )
