from __future__ import annotations

import argparse
import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Sequence

import structlog

from . import __version__
from .codegen import generate_module
from .config import ClientOptions, configure_logging
from .credentials import AccessToken, ApiKey, Credentials
from .discovery import load_document, parse
from .errors import ApiError, DiscoveryDocumentError, RequestValidationError, TransportError
from .models import ApiRecord
from .parameters import Parameter
from .request import MethodSpec
from .resource import ResourceSpec
from .service import Service, ServiceSpec
from .transport import Transport

log = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_REMOTE = 1
EXIT_USAGE = 2


def _signature(method: MethodSpec) -> str:
    required = [p.attr for p in method.parameters if p.required]
    if method.request_model is not None:
        required.append("body")
    optional = [f"[{p.attr}]" for p in method.parameters if not p.required]
    return f"{method.name}({', '.join(required + optional)})"


def _describe_method(method: MethodSpec, indent: str) -> list[str]:
    line = f"{indent}{_signature(method)}  {method.http_method} {method.path} -> {method.response_model.__name__}"
    lines = [line]
    if method.request_model is not None:
        lines.append(f"{indent}    body: {method.request_model.__name__}")
    return lines


def _describe_resource(resource: ResourceSpec, indent: str) -> list[str]:
    lines = [f"{indent}{resource.name}"]
    for method in resource.methods:
        lines.extend(_describe_method(method, indent + "  "))
    for child in resource.resources:
        lines.extend(_describe_resource(child, indent + "  "))
    return lines


def describe(spec: ServiceSpec) -> str:
    header = f"{spec.name} {spec.version}"
    if spec.title:
        header += f" ({spec.title})"
    lines = [header, f"  base URI: {spec.base_uri}"]
    if spec.batch_uri:
        lines.append(f"  batch URI: {spec.batch_uri}")
    for scope in sorted(spec.scopes):
        lines.append(f"  scope: {scope}")
    for method in spec.methods:
        lines.extend(_describe_method(method, "  "))
    for resource in spec.resources:
        lines.extend(_describe_resource(resource, "  "))
    return "\n".join(lines)


def _coerce(param: Parameter, raw: str) -> Any:
    if param.type == "boolean":
        lowered = raw.lower()
        if lowered not in {"true", "false"}:
            raise RequestValidationError(f"Parameter {param.name} must be true or false", parameter=param.name)
        return lowered == "true"
    if param.type == "integer":
        try:
            return int(raw)
        except ValueError:
            raise RequestValidationError(f"Parameter {param.name} must be an integer", parameter=param.name) from None
    return raw


def parse_params(spec: ServiceSpec, method: MethodSpec, pairs: Sequence[str]) -> dict[str, Any]:
    """Turn ``KEY=VALUE`` pairs into request keyword arguments.

    Keys may be wire names or python attribute names. A key given more than
    once becomes a list, for repeated parameters.
    """

    descriptors: dict[str, Parameter] = {}
    for param in (*spec.parameters, *method.parameters):
        descriptors[param.name] = param
        descriptors.setdefault(param.attr, param)

    params: dict[str, Any] = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        if not sep or not key:
            raise RequestValidationError(f"Expected KEY=VALUE, got {pair!r}")
        param = descriptors.get(key)
        if param is None:
            raise RequestValidationError(f"Unknown parameter for {method.id}: {key}", parameter=key)
        value = _coerce(param, raw)
        if param.name in params:
            previous = params[param.name]
            params[param.name] = [*previous, value] if isinstance(previous, list) else [previous, value]
        else:
            params[param.name] = value
    return params


def _read_body(path: str) -> Any:
    if path == "-":
        return json.load(sys.stdin)
    with Path(path).open("r", encoding="utf-8") as file:
        return json.load(file)


def _credentials(args: argparse.Namespace) -> Credentials | None:
    if args.api_key:
        return ApiKey(args.api_key)
    if args.access_token:
        return AccessToken(args.access_token)
    return None


def _options(args: argparse.Namespace) -> ClientOptions:
    options = ClientOptions.from_env()
    if args.base_uri:
        options = replace(options, base_uri=args.base_uri)
    if args.timeout is not None:
        options = replace(options, timeout_s=args.timeout)
    return options


def _render(result: ApiRecord, fmt: str) -> str:
    data = result.to_wire()
    if fmt == "json":
        return json.dumps(data, indent=2, sort_keys=True)
    lines = []
    for key in sorted(data):
        value = data[key]
        text = value if isinstance(value, str) else json.dumps(value, sort_keys=True)
        lines.append(f"{key}: {text}")
    if result.etag:
        lines.append(f"etag: {result.etag}")
    return "\n".join(lines)


def _cmd_describe(args: argparse.Namespace, transport: Transport | None) -> int:
    spec = parse(load_document(args.discovery))
    print(describe(spec))
    return EXIT_OK


def _cmd_generate(args: argparse.Namespace, transport: Transport | None) -> int:
    source = generate_module(load_document(args.discovery))
    if args.out:
        out = Path(args.out)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(source, encoding="utf-8")
        print(f"[generate] {args.discovery} -> {out}", file=sys.stderr)
    else:
        sys.stdout.write(source)
    return EXIT_OK


def _cmd_call(args: argparse.Namespace, transport: Transport | None) -> int:
    spec = parse(load_document(args.discovery))
    with Service(spec, transport=transport, credentials=_credentials(args), options=_options(args)) as service:
        try:
            method = service.method(args.method_id)
        except KeyError:
            print(f"Unknown method: {args.method_id}", file=sys.stderr)
            return EXIT_USAGE

        params = parse_params(spec, method, args.param)
        body = _read_body(args.body) if args.body else None
        request = service.request(args.method_id, body=body, **params)
        result = request.execute()

    print(_render(result, args.format))
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="discoclient", description="Discovery-driven REST client.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--log-json", action="store_true", help="Emit logs as JSON lines")
    sub = parser.add_subparsers(dest="command", required=True)

    p_describe = sub.add_parser("describe", help="Print the resource tree and method signatures")
    p_describe.add_argument("discovery", help="Path to a discovery document (JSON or YAML)")
    p_describe.set_defaults(handler=_cmd_describe)

    p_call = sub.add_parser("call", help="Execute one method")
    p_call.add_argument("discovery", help="Path to a discovery document (JSON or YAML)")
    p_call.add_argument("method_id", help="Method id, e.g. checks.accounts.apps.operations.get")
    p_call.add_argument("--param", action="append", default=[], metavar="KEY=VALUE", help="Request parameter")
    p_call.add_argument("--body", help="JSON request body file ('-' for stdin)")
    auth = p_call.add_mutually_exclusive_group()
    auth.add_argument("--api-key", help="API key sent in the 'key' query parameter")
    auth.add_argument("--access-token", help="OAuth access token sent as a bearer header")
    p_call.add_argument("--base-uri", help="Override the service base URI")
    p_call.add_argument("--timeout", type=float, help="Request timeout in seconds")
    p_call.add_argument("--format", choices=["json", "text"], default="json")
    p_call.set_defaults(handler=_cmd_call)

    p_generate = sub.add_parser("generate", help="Generate a client module from a discovery document")
    p_generate.add_argument("discovery", help="Path to a discovery document (JSON or YAML)")
    p_generate.add_argument("--out", help="Output file (default: stdout)")
    p_generate.set_defaults(handler=_cmd_generate)

    return parser


def main(argv: Sequence[str] | None = None, *, transport: Transport | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(verbose=args.verbose, log_json=args.log_json)

    try:
        return args.handler(args, transport)
    except (RequestValidationError, DiscoveryDocumentError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_USAGE
    except (OSError, json.JSONDecodeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_USAGE
    except (ApiError, TransportError) as exc:
        log.debug("cli.call_failed", command=args.command, error=str(exc))
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_REMOTE


if __name__ == "__main__":
    raise SystemExit(main())
