from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Mapping

from .. import __version__

DEFAULT_USER_AGENT = f"discoclient/{__version__}"


@dataclass(frozen=True)
class ClientOptions:
    timeout_s: float = 30.0
    base_uri: str | None = None
    headers: dict[str, str] = field(default_factory=dict)
    user_agent: str = DEFAULT_USER_AGENT
    quota_user: str | None = None
    pretty_print: bool | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ClientOptions":
        env = os.environ if environ is None else environ
        options = cls()
        timeout = env.get("DISCOCLIENT_TIMEOUT")
        if timeout:
            try:
                options = replace(options, timeout_s=float(timeout))
            except ValueError as exc:
                raise ValueError(f"Invalid DISCOCLIENT_TIMEOUT: {timeout!r}") from exc
        if env.get("DISCOCLIENT_BASE_URI"):
            options = replace(options, base_uri=env["DISCOCLIENT_BASE_URI"])
        if env.get("DISCOCLIENT_USER_AGENT"):
            options = replace(options, user_agent=env["DISCOCLIENT_USER_AGENT"])
        if env.get("DISCOCLIENT_QUOTA_USER"):
            options = replace(options, quota_user=env["DISCOCLIENT_QUOTA_USER"])
        return options

    def default_headers(self) -> dict[str, str]:
        return {"User-Agent": self.user_agent, **self.headers}
