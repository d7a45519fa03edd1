"""Structured logging setup and header redaction."""

from __future__ import annotations

import logging
import re
import sys
from typing import Mapping, TextIO

import structlog

SENSITIVE_HEADERS = frozenset(
    {
        "authorization",
        "cookie",
        "proxy-authorization",
        "set-cookie",
    }
)

REDACTED_VALUE = "[REDACTED]"


def configure_logging(
    level: int = logging.INFO,
    output: TextIO = sys.stderr,
    json_format: bool = True,
) -> None:
    """Configure structlog for applications embedding the networking layer.

    Args:
        level: Minimum level that is emitted.
        output: Stream the renderer writes to.
        json_format: Render JSON lines instead of the colored console format.
    """
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if json_format:
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", stream=output, level=level)


def is_sensitive_header(header_name: str) -> bool:
    return header_name.lower() in SENSITIVE_HEADERS


def redact_headers(
    headers: Mapping[str, str], *, debug_private_data: bool = False
) -> dict[str, str]:
    """Copy ``headers`` with credential-bearing values replaced.

    With ``debug_private_data`` the values are returned untouched.
    """
    if debug_private_data:
        return dict(headers)
    return {
        key: REDACTED_VALUE if is_sensitive_header(key) else value
        for key, value in headers.items()
    }


def redact_url_credentials(url: str) -> str:
    """Hide ``user:password@`` userinfo in a URL."""
    return re.sub(
        r"(https?://)([^:/@]+):([^@/]+)@",
        rf"\1{REDACTED_VALUE}:{REDACTED_VALUE}@",
        url,
    )
