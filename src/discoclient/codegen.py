"""Generate a client module from a discovery document.

The generated module declares a record class per schema, a ``SERVICE``
:class:`~discoclient.service.ServiceSpec` mirroring the resource tree, and a
``build()`` helper returning a ready :class:`~discoclient.service.Service`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from .discovery import parse
from .parameters import STANDARD_PARAMETERS, Parameter, python_name
from .request import MethodSpec
from .resource import ResourceSpec
from .schemas import literal, render_models

BANNER = [
    "# Generated code. DO NOT EDIT!",
    "# Regenerate with tools/codegen/generate.py from the discovery document.",
]

IMPORTS = [
    "from __future__ import annotations",
    "",
    "from typing import Any",
    "",
    "from pydantic import Field",
    "",
    "from discoclient.config.settings import ClientOptions",
    "from discoclient.credentials import Credentials",
    "from discoclient.models import ApiRecord, Empty, Operation, Status",
    "from discoclient.parameters import STANDARD_PARAMETERS, Parameter, ParameterKind",
    "from discoclient.request import MethodSpec",
    "from discoclient.resource import ResourceSpec",
    "from discoclient.service import Service, ServiceSpec",
    "from discoclient.transport import AsyncTransport, Transport",
]


def module_name(document: Mapping[str, Any]) -> str:
    return f"{python_name(document['name'])}_{python_name(document['version'])}"


def _tuple(items: list[str]) -> str:
    if not items:
        return "()"
    return "(" + ", ".join(items) + ",)"


def _render_parameter(param: Parameter) -> str:
    args = [literal(param.name), f"ParameterKind.{param.kind.name}"]
    if param.required:
        args.append("required=True")
    if param.type != "string":
        args.append(f"type={literal(param.type)}")
    if param.pattern is not None:
        args.append(f"pattern={literal(param.pattern)}")
    if param.enum is not None:
        args.append(f"enum={_tuple([literal(v) for v in param.enum])}")
    if param.repeated:
        args.append("repeated=True")
    if param.default is not None:
        args.append(f"default={literal(param.default)}")
    if param.description:
        args.append(f"description={literal(' '.join(param.description.split()))}")
    return f"Parameter({', '.join(args)})"


def _render_method(method: MethodSpec, indent: str) -> list[str]:
    inner = indent + "    "
    lines = [f"{indent}MethodSpec("]
    lines.append(f"{inner}id={literal(method.id)},")
    lines.append(f"{inner}name={literal(method.name)},")
    lines.append(f"{inner}http_method={literal(method.http_method)},")
    lines.append(f"{inner}path={literal(method.path)},")
    if method.parameters:
        lines.append(f"{inner}parameters=(")
        lines.extend(f"{inner}    {_render_parameter(p)}," for p in method.parameters)
        lines.append(f"{inner}),")
    if method.request_model is not None:
        lines.append(f"{inner}request_model={method.request_model.__name__},")
    lines.append(f"{inner}response_model={method.response_model.__name__},")
    if method.description:
        lines.append(f"{inner}description={literal(' '.join(method.description.split()))},")
    if method.scopes:
        lines.append(f"{inner}scopes={_tuple([literal(s) for s in method.scopes])},")
    lines.append(f"{indent}),")
    return lines


def _render_resource(resource: ResourceSpec, indent: str) -> list[str]:
    inner = indent + "    "
    lines = [f"{indent}ResourceSpec(", f"{inner}name={literal(resource.name)},"]
    if resource.methods:
        lines.append(f"{inner}methods=(")
        for method in resource.methods:
            lines.extend(_render_method(method, inner + "    "))
        lines.append(f"{inner}),")
    if resource.resources:
        lines.append(f"{inner}resources=(")
        for child in resource.resources:
            lines.extend(_render_resource(child, inner + "    "))
        lines.append(f"{inner}),")
    lines.append(f"{indent}),")
    return lines


def generate_module(document: Mapping[str, Any]) -> str:
    spec = parse(document)
    model_lines, class_names = render_models(document.get("schemas") or {})

    title = spec.title or spec.name
    lines = [*BANNER, f'"""{title} {spec.version} client."""', "", *IMPORTS, *model_lines, "", ""]

    lines.append("SERVICE = ServiceSpec(")
    lines.append(f"    name={literal(spec.name)},")
    lines.append(f"    version={literal(spec.version)},")
    lines.append(f"    root_url={literal(spec.root_url)},")
    lines.append(f"    service_path={literal(spec.service_path)},")
    batch = "None" if spec.batch_path is None else literal(spec.batch_path)
    lines.append(f"    batch_path={batch},")
    if spec.title:
        lines.append(f"    title={literal(spec.title)},")
    if spec.description:
        lines.append(f"    description={literal(' '.join(spec.description.split()))},")
    if spec.scopes:
        lines.append("    scopes=frozenset({" + ", ".join(literal(s) for s in sorted(spec.scopes)) + "}),")
    lines.append(f"    discovery_version={literal(spec.discovery_version)},")
    if spec.features:
        lines.append(f"    features={_tuple([literal(f) for f in spec.features])},")
    if {p.name for p in spec.parameters} == {p.name for p in STANDARD_PARAMETERS}:
        lines.append("    parameters=STANDARD_PARAMETERS,")
    else:
        lines.append("    parameters=(")
        lines.extend(f"        {_render_parameter(p)}," for p in spec.parameters)
        lines.append("    ),")
    if spec.resources:
        lines.append("    resources=(")
        for resource in spec.resources:
            lines.extend(_render_resource(resource, "        "))
        lines.append("    ),")
    if spec.methods:
        lines.append("    methods=(")
        for method in spec.methods:
            lines.extend(_render_method(method, "        "))
        lines.append("    ),")
    if class_names:
        lines.append("    schemas={")
        lines.extend(f"        {literal(schema)}: {cls}," for schema, cls in sorted(class_names.items()))
        lines.append("    },")
    lines.append(")")
    lines.extend(
        [
            "",
            "",
            "def build(",
            "    *,",
            "    transport: Transport | None = None,",
            "    async_transport: AsyncTransport | None = None,",
            "    credentials: Credentials | None = None,",
            "    options: ClientOptions | None = None,",
            ") -> Service:",
            "    return Service(",
            "        SERVICE,",
            "        transport=transport,",
            "        async_transport=async_transport,",
            "        credentials=credentials,",
            "        options=options,",
            "    )",
        ]
    )
    return "\n".join(lines) + "\n"


def write_module(document: Mapping[str, Any], output_dir: Path) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    target = output_dir / f"{module_name(document)}.py"
    target.write_text(generate_module(document), encoding="utf-8")
    return target
