import logging
from collections.abc import MutableMapping
from typing import Any

import structlog

# Event keys that must never reach the log output
SECRET_KEYS = frozenset({"code", "password", "auth_token", "session_ref", "ref"})


def redact_secrets(_: Any, __: str, event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    """Mask one-time codes, credentials and vault session references."""
    for key in SECRET_KEYS.intersection(event_dict):
        event_dict[key] = "***"
    return event_dict


def setup_logging(debug: bool) -> None:
    """Route structlog through stdlib logging: console output in debug, JSON otherwise."""
    log_level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(level=log_level, format="%(message)s")

    # Suppress verbose MongoDB and SMTP client logs
    for name in ("pymongo", "pymongo.topology", "pymongo.connection", "pymongo.command", "mail"):
        logging.getLogger(name).setLevel(logging.WARNING)

    processors: list[structlog.types.Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    if debug:
        # Unredacted: without an SMTP relay, codes are delivered through this log
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors.insert(4, redact_secrets)
        processors.append(structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
