from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

JsonObject = dict[str, Any]


class ApiRecord(BaseModel):
    """Base for every wire payload.

    Attributes use snake_case and map to camelCase wire names. Fields that
    were never set are omitted on the wire; an explicit ``None`` is sent as
    ``null``. Fields the server sends that are not declared here are kept in
    :attr:`overflow`.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        protected_namespaces=(),
    )

    etag: str | None = Field(default=None, exclude=True)

    @property
    def overflow(self) -> JsonObject:
        return dict(self.model_extra or {})

    def is_set(self, field: str) -> bool:
        if field in self.model_fields_set:
            return True
        for attr, info in type(self).model_fields.items():
            if info.alias == field:
                return attr in self.model_fields_set
        return False

    def same_version(self, other: ApiRecord) -> bool:
        return self.etag is not None and self.etag == other.etag

    def to_wire(self) -> JsonObject:
        data = self.model_dump(mode="json", by_alias=True, exclude_unset=True)
        for key, value in (self.model_extra or {}).items():
            data.setdefault(key, value)
        return data

    @classmethod
    def from_wire(cls, data: JsonObject, *, etag: str | None = None) -> Any:
        record = cls.model_validate(data)
        if etag is not None:
            record = record.model_copy(update={"etag": etag})
        return record


class Empty(ApiRecord):
    pass


class Status(ApiRecord):
    code: int | None = None
    message: str | None = None
    details: list[JsonObject] | None = None


class ErrorBody(ApiRecord):
    code: int | None = None
    message: str | None = None
    status: str | None = None
    details: list[JsonObject] | None = None


class ErrorEnvelope(ApiRecord):
    error: ErrorBody
