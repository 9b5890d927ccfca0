from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Iterator, Mapping

from .parameters import python_name
from .request import ApiRequest, MethodSpec

if TYPE_CHECKING:
    from .service import Service


@dataclass(frozen=True, slots=True)
class ResourceSpec:
    name: str
    methods: tuple[MethodSpec, ...] = ()
    resources: tuple["ResourceSpec", ...] = ()


class MethodFactory:
    """Callable returned for a method name; each call builds a new request."""

    def __init__(self, service: Service, spec: MethodSpec) -> None:
        self._service = service
        self.spec = spec
        self.__doc__ = spec.description

    def __call__(self, *args: Any, **kwargs: Any) -> ApiRequest:
        return ApiRequest(self._service, self.spec, *args, **kwargs)

    def __repr__(self) -> str:
        return f"<method {self.spec.id} {self.spec.http_method} {self.spec.path}>"


def attribute_index(members: Mapping[str, Any], reserved: frozenset[str]) -> dict[str, Any]:
    """Map wire names and their Python spellings to ``members``.

    A spelling that collides with one of the node's own attributes in
    ``reserved`` gets a trailing underscore, so ``path`` becomes ``path_``.
    """

    index: dict[str, Any] = {}
    for name, value in members.items():
        index[name] = value
        attr = python_name(name)
        if attr in reserved:
            attr += "_"
        index.setdefault(attr, value)
    return index


class Resource:
    """A node in the service's resource tree.

    Child resources and methods are reachable as attributes. A child whose
    name matches one of the attributes below is exposed with a trailing
    underscore. The node keeps a reference to its service but does not own
    it, and has no mutable state.
    """

    __slots__ = ("_spec", "_service", "_path", "_resources", "_methods", "_lookup")

    def __init__(self, spec: ResourceSpec, service: Service, *, parent: str | None = None) -> None:
        self._spec = spec
        self._service = service
        self._path = spec.name if not parent else f"{parent}.{spec.name}"
        self._resources = MappingProxyType(
            {child.name: Resource(child, service, parent=self._path) for child in spec.resources}
        )
        self._methods = MappingProxyType({m.name: MethodFactory(service, m) for m in spec.methods})
        lookup = attribute_index({**self._methods, **self._resources}, _RESOURCE_ATTRS)
        self._lookup = MappingProxyType(lookup)

    @property
    def name(self) -> str:
        return self._spec.name

    @property
    def path(self) -> str:
        return self._path

    @property
    def service(self) -> Service:
        return self._service

    @property
    def resources(self) -> Mapping[str, "Resource"]:
        return self._resources

    @property
    def methods(self) -> Mapping[str, MethodFactory]:
        return self._methods

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._lookup[name]
        except KeyError:
            raise AttributeError(f"Resource {self._path!r} has no resource or method {name!r}") from None

    def __dir__(self) -> list[str]:
        return sorted(set(super().__dir__()) | set(self._lookup))

    def walk(self) -> Iterator[MethodSpec]:
        for factory in self._methods.values():
            yield factory.spec
        for child in self._resources.values():
            yield from child.walk()

    def __repr__(self) -> str:
        return f"<resource {self._path} methods={sorted(self._methods)} resources={sorted(self._resources)}>"


_RESOURCE_ATTRS = frozenset(name for name in dir(Resource) if not name.startswith("_"))
