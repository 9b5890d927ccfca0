from .logging import configure_logging
from .settings import DEFAULT_USER_AGENT, ClientOptions

__all__ = ["ClientOptions", "DEFAULT_USER_AGENT", "configure_logging"]
