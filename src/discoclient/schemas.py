"""Turn discovery ``schemas`` into pydantic record classes.

One plan per class feeds both outputs: source lines for the code generator
and classes built in memory when a service comes straight from a discovery
document. Both carry the same field names, aliases and annotations.
"""

from __future__ import annotations

import json
import keyword
import re
import textwrap
from dataclasses import dataclass, field
from typing import Any, Mapping

from pydantic import Field, create_model
from pydantic.alias_generators import to_camel

from .models import ApiRecord, Empty, Operation, Status
from .parameters import python_name

WELL_KNOWN: dict[str, type[ApiRecord]] = {
    "Empty": Empty,
    "Operation": Operation,
    "Status": Status,
}

_RESERVED_NAMES = {
    "Any",
    "ApiRecord",
    "AsyncTransport",
    "ClientOptions",
    "Credentials",
    "Field",
    "MethodSpec",
    "Parameter",
    "ParameterKind",
    "ResourceSpec",
    "Service",
    "ServiceSpec",
    "Transport",
    "SERVICE",
    "STANDARD_PARAMETERS",
}
_BASE_ATTRS = {name for name in dir(ApiRecord) if not name.startswith("_")} - {"etag"}


def literal(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def class_name(schema_name: str) -> str:
    value = re.sub(r"[^0-9A-Za-z_]", "_", schema_name)
    value = re.sub(r"_+", "_", value).strip("_")
    if not value:
        value = "Record"
    value = value[:1].upper() + value[1:]
    if value[0].isdigit():
        value = f"_{value}"
    if keyword.iskeyword(value) or value in _RESERVED_NAMES:
        value += "_"
    return value


def field_name(wire_name: str) -> str:
    attr = python_name(wire_name)
    if attr in _BASE_ATTRS:
        attr += "_"
    return attr


def reusable(schema_name: str, schema: Mapping[str, Any]) -> type[ApiRecord] | None:
    """Return the built-in record for a well-known schema with compatible properties."""

    cls = WELL_KNOWN.get(schema_name)
    if cls is None:
        return None
    known = {info.alias or attr for attr, info in cls.model_fields.items()}
    if set((schema.get("properties") or {}).keys()) <= known:
        return cls
    return None


def _docstring(text: str | None, indent: str) -> list[str]:
    if not text:
        return []
    text = " ".join(text.split())
    if '"""' in text or "\\" in text or text.endswith('"'):
        return [f"{indent}{literal(text)}"]
    wrapped = textwrap.wrap(text, width=88 - len(indent) - 3)
    if len(wrapped) == 1:
        return [f'{indent}"""{wrapped[0]}"""']
    return [f'{indent}"""{wrapped[0]}', *[f"{indent}{line}" for line in wrapped[1:]], f'{indent}"""']


@dataclass(frozen=True)
class _FieldPlan:
    attr: str
    annotation: str
    alias: str | None = None
    description: str | None = None


@dataclass
class _ClassPlan:
    name: str
    description: str | None
    has_properties: bool
    fields: list[_FieldPlan] = field(default_factory=list)


class _Planner:
    def __init__(self, schemas: Mapping[str, Any]) -> None:
        self._schemas = schemas
        self.names: dict[str, str] = {}
        for name, schema in schemas.items():
            if reusable(name, schema) is not None:
                self.names[name] = name
            else:
                self.names[name] = class_name(name)
        self.classes: list[_ClassPlan] = []

    def annotation(self, schema: Any, *, owner: str, prop: str) -> str:
        if not isinstance(schema, Mapping):
            return "Any"
        ref = schema.get("$ref")
        if isinstance(ref, str):
            if ref not in self.names:
                raise KeyError(f"Unknown schema reference {ref!r} in {owner}.{prop}")
            return self.names[ref]

        kind = schema.get("type")
        if kind == "string":
            fmt = schema.get("format")
            if fmt in {"int64", "uint64"}:
                return "int"
            return "str"
        if kind == "integer":
            return "int"
        if kind == "number":
            return "float"
        if kind == "boolean":
            return "bool"
        if kind == "array":
            inner = self.annotation(schema.get("items"), owner=owner, prop=prop)
            return f"list[{inner}]"
        if kind == "object":
            if schema.get("properties"):
                nested = class_name(owner + prop[:1].upper() + prop[1:])
                self.plan_class(nested, schema)
                return nested
            additional = schema.get("additionalProperties")
            if isinstance(additional, Mapping):
                inner = self.annotation(additional, owner=owner, prop=prop)
                return f"dict[str, {inner}]"
            return "dict[str, Any]"
        return "Any"

    def plan_class(self, name: str, schema: Mapping[str, Any]) -> None:
        properties = schema.get("properties") or {}
        plan = _ClassPlan(name=name, description=schema.get("description"), has_properties=bool(properties))
        for wire, prop in properties.items():
            attr = field_name(wire)
            annotation = self.annotation(prop, owner=name, prop=wire)
            description = prop.get("description") if isinstance(prop, Mapping) else None
            plan.fields.append(
                _FieldPlan(
                    attr=attr,
                    annotation=f"{annotation} | None",
                    alias=wire if to_camel(attr) != wire else None,
                    description=" ".join(description.split()) if description else None,
                )
            )
        self.classes.append(plan)

    def plan(self) -> list[_ClassPlan]:
        for name in sorted(self._schemas):
            schema = self._schemas[name]
            if reusable(name, schema) is not None:
                continue
            self.plan_class(self.names[name], schema)
        return self.classes


def _class_source(plan: _ClassPlan) -> list[str]:
    lines = [f"class {plan.name}(ApiRecord):"]
    lines.extend(_docstring(plan.description, "    "))
    if plan.has_properties and len(lines) > 1:
        lines.append("")
    for item in plan.fields:
        args = ["default=None"]
        if item.alias is not None:
            args.append(f"alias={literal(item.alias)}")
        if item.description:
            args.append(f"description={literal(item.description)}")
        if len(args) == 1:
            lines.append(f"    {item.attr}: {item.annotation} = None")
        else:
            lines.append(f"    {item.attr}: {item.annotation} = Field({', '.join(args)})")
    if len(lines) == 1:
        lines.append("    pass")
    return lines


def render_models(schemas: Mapping[str, Any]) -> tuple[list[str], dict[str, str]]:
    """Return source lines for ``schemas`` and the schema name to class name map."""

    planner = _Planner(schemas)
    plans = planner.plan()

    out: list[str] = []
    for plan in plans:
        out.extend(["", "", *_class_source(plan)])
    if plans:
        out.extend(["", ""])
        out.append("_MODELS: tuple[type[ApiRecord], ...] = (")
        out.extend(f"    {plan.name}," for plan in plans)
        out.append(")")
        out.append("for _model in _MODELS:")
        out.append("    _model.model_rebuild()")
    return out, dict(planner.names)


def materialize(schemas: Mapping[str, Any]) -> dict[str, type[ApiRecord]]:
    """Build record classes for ``schemas`` with :func:`pydantic.create_model`.

    Annotations stay strings until every class exists; ``model_rebuild`` then
    resolves them against the new classes and the built-in records, which
    take precedence over names in this module.
    """

    planner = _Planner(schemas)
    types_namespace: dict[str, Any] = {"Any": Any, **WELL_KNOWN}
    built: list[type[ApiRecord]] = []
    for plan in planner.plan():
        fields: dict[str, Any] = {}
        for item in plan.fields:
            options: dict[str, Any] = {"default": None}
            if item.alias is not None:
                options["alias"] = item.alias
            if item.description:
                options["description"] = item.description
            fields[item.attr] = (item.annotation, Field(**options))
        doc = " ".join(plan.description.split()) if plan.description else None
        model = create_model(plan.name, __base__=ApiRecord, __doc__=doc, **fields)
        types_namespace[plan.name] = model
        built.append(model)

    for model in built:
        model.model_rebuild(force=True, _types_namespace=types_namespace)
    return {schema: types_namespace[cls] for schema, cls in planner.names.items()}
