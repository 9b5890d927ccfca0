"""Logging setup for discoclient.

Library modules only call ``structlog.get_logger(__name__)``; records flow
through stdlib logging under the ``discoclient`` logger. :func:`configure_logging`
gives that logger a stderr handler of its own and leaves the root logger, and
any handlers the host application installed there, untouched.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, MutableMapping

import structlog

from ..parameters import CREDENTIAL_PARAMETERS

LOGGER_NAME = "discoclient"

_SECRET_KEYS = CREDENTIAL_PARAMETERS | {"authorization", "token"}


class _StderrHandler(logging.StreamHandler):
    """Handler installed by :func:`configure_logging`; replaced on reconfigure."""

    def __init__(self) -> None:
        super().__init__(sys.stderr)


def redact_secrets(logger: Any, method_name: str, event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    for key in event_dict.keys() & _SECRET_KEYS:
        event_dict[key] = "***"
    return event_dict


def _pre_chain() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        redact_secrets,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]


def _renderer(log_json: bool) -> structlog.types.Processor:
    if log_json:
        return structlog.processors.JSONRenderer(sort_keys=True)
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> logging.Logger:
    """Send discoclient events to stderr.

    Args:
        verbose: DEBUG (request and poll events) instead of WARNING.
        log_json: Render JSON lines instead of console output.

    Returns:
        The ``discoclient`` stdlib logger. It stops propagating to the root
        logger so events are not printed twice.
    """
    pre_chain = _pre_chain()
    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = _StderrHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, _renderer(log_json)],
        )
    )

    logger = logging.getLogger(LOGGER_NAME)
    for existing in [h for h in logger.handlers if isinstance(h, _StderrHandler)]:
        logger.removeHandler(existing)
        existing.close()
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False
    return logger
