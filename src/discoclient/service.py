from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterator, Mapping

import structlog

from .config.settings import ClientOptions
from .credentials import Anonymous, Credentials
from .models.common import ApiRecord
from .parameters import STANDARD_PARAMETERS, Parameter
from .request import ApiRequest, MethodSpec
from .resource import MethodFactory, Resource, ResourceSpec, attribute_index
from .transport import AsyncTransport, HttpxTransport, Transport

log = structlog.get_logger(__name__)


def _join(root: str, path: str) -> str:
    root = root if root.endswith("/") else root + "/"
    return root + path.lstrip("/")


@dataclass(frozen=True, slots=True)
class ServiceSpec:
    name: str
    version: str
    root_url: str
    service_path: str = ""
    batch_path: str | None = "batch"
    title: str | None = None
    description: str | None = None
    scopes: frozenset[str] = frozenset()
    discovery_version: str = "v1"
    features: tuple[str, ...] = ()
    parameters: tuple[Parameter, ...] = STANDARD_PARAMETERS
    resources: tuple[ResourceSpec, ...] = ()
    methods: tuple[MethodSpec, ...] = ()
    schemas: Mapping[str, type[ApiRecord]] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "scopes", frozenset(self.scopes))
        object.__setattr__(self, "schemas", MappingProxyType(dict(self.schemas)))

    @property
    def base_uri(self) -> str:
        return _join(self.root_url, self.service_path)

    @property
    def batch_uri(self) -> str | None:
        if self.batch_path is None:
            return None
        return _join(self.root_url, self.batch_path)

    def walk(self) -> Iterator[MethodSpec]:
        yield from self.methods

        def _walk(resource: ResourceSpec) -> Iterator[MethodSpec]:
            yield from resource.methods
            for child in resource.resources:
                yield from _walk(child)

        for resource in self.resources:
            yield from _walk(resource)


class Service:
    """A client for one API, built from a :class:`ServiceSpec`.

    The service and its resource tree are immutable and may be shared across
    threads and tasks. Each call on a method factory returns a fresh
    :class:`ApiRequest`. Top-level resources and methods are attributes;
    one named like a property here (``request``, ``name``) gets a trailing
    underscore.
    """

    def __init__(
        self,
        spec: ServiceSpec,
        *,
        transport: Transport | None = None,
        async_transport: AsyncTransport | None = None,
        credentials: Credentials | None = None,
        options: ClientOptions | None = None,
    ) -> None:
        options = options or ClientOptions()
        owns_transport = transport is None
        if transport is None:
            transport = HttpxTransport(timeout_s=options.timeout_s)

        base_uri = options.base_uri or spec.base_uri
        if not base_uri.endswith("/"):
            base_uri += "/"

        setattr_ = object.__setattr__
        setattr_(self, "_spec", spec)
        setattr_(self, "_options", options)
        setattr_(self, "_transport", transport)
        setattr_(self, "_owns_transport", owns_transport)
        setattr_(self, "_async_transport", async_transport)
        setattr_(self, "_credentials", credentials or Anonymous())
        setattr_(self, "_base_uri", base_uri)

        resources = {r.name: Resource(r, self) for r in spec.resources}
        methods = {m.name: MethodFactory(self, m) for m in spec.methods}
        lookup = attribute_index({**methods, **resources}, _SERVICE_ATTRS)

        setattr_(self, "_resources", MappingProxyType(resources))
        setattr_(self, "_methods", MappingProxyType(methods))
        setattr_(self, "_lookup", MappingProxyType(lookup))
        setattr_(self, "_by_id", MappingProxyType({m.id: m for m in spec.walk()}))

        log.debug("service.built", service=spec.name, version=spec.version, base_uri=base_uri)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._lookup[name]
        except KeyError:
            raise AttributeError(f"Service {self._spec.name!r} has no resource or method {name!r}") from None

    def __dir__(self) -> list[str]:
        return sorted(set(super().__dir__()) | set(self._lookup))

    @property
    def spec(self) -> ServiceSpec:
        return self._spec

    @property
    def name(self) -> str:
        return self._spec.name

    @property
    def version(self) -> str:
        return self._spec.version

    @property
    def title(self) -> str | None:
        return self._spec.title

    @property
    def base_uri(self) -> str:
        return self._base_uri

    @property
    def batch_uri(self) -> str | None:
        return self._spec.batch_uri

    @property
    def scopes(self) -> frozenset[str]:
        return self._spec.scopes

    @property
    def discovery_version(self) -> str:
        return self._spec.discovery_version

    @property
    def features(self) -> tuple[str, ...]:
        return self._spec.features

    @property
    def resources(self) -> Mapping[str, Resource]:
        return self._resources

    @property
    def methods(self) -> Mapping[str, MethodFactory]:
        return self._methods

    @property
    def options(self) -> ClientOptions:
        return self._options

    @property
    def credentials(self) -> Credentials:
        return self._credentials

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def async_transport(self) -> AsyncTransport | None:
        return self._async_transport

    def method(self, method_id: str) -> MethodSpec:
        try:
            return self._by_id[method_id]
        except KeyError:
            raise KeyError(f"Unknown method: {method_id}") from None

    def request(self, method_id: str, *args: Any, **kwargs: Any) -> ApiRequest:
        return ApiRequest(self, self.method(method_id), *args, **kwargs)

    def close(self) -> None:
        if self._owns_transport:
            close = getattr(self._transport, "close", None)
            if close is not None:
                close()

    def __enter__(self) -> "Service":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<Service {self._spec.name} {self._spec.version} {self._base_uri}>"


_SERVICE_ATTRS = frozenset(name for name in dir(Service) if not name.startswith("_"))
