"""Credential slots for outgoing requests.

Tokens are obtained elsewhere; these classes only place them on the wire.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Protocol


class Credentials(Protocol):
    def apply(self, headers: dict[str, str], query: list[tuple[str, str]]) -> None: ...


@dataclass(frozen=True, slots=True)
class Anonymous:
    def apply(self, headers: dict[str, str], query: list[tuple[str, str]]) -> None:
        return None


@dataclass(frozen=True, slots=True)
class ApiKey:
    key: str

    def apply(self, headers: dict[str, str], query: list[tuple[str, str]]) -> None:
        query.append(("key", self.key))

    def __repr__(self) -> str:
        return "ApiKey(key=***)"


@dataclass(frozen=True, slots=True)
class AccessToken:
    token: str
    placement: Literal["header", "query"] = "header"

    def apply(self, headers: dict[str, str], query: list[tuple[str, str]]) -> None:
        if self.placement == "query":
            query.append(("access_token", self.token))
            return
        headers["Authorization"] = f"Bearer {self.token}"

    def __repr__(self) -> str:
        return f"AccessToken(token=***, placement={self.placement!r})"


@dataclass(frozen=True, slots=True)
class OAuthToken:
    token: str

    def apply(self, headers: dict[str, str], query: list[tuple[str, str]]) -> None:
        query.append(("oauth_token", self.token))

    def __repr__(self) -> str:
        return "OAuthToken(token=***)"
