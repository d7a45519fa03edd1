"""Configuration models for the networking layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Mapping, Sequence
from urllib.parse import urlparse

if TYPE_CHECKING:
    from .chain import Interceptor

DEFAULT_REFRESH_TOKEN_TIMEOUT_SECONDS = 30.0
UNAUTHORIZED = 401


def _empty_headers() -> Mapping[str, str]:
    """Return immutable empty default headers mapping."""

    return MappingProxyType({})


class LoggingLevel(Enum):
    """How much of each exchange the HTTP logger records."""

    NONE = "none"
    BASIC = "basic"
    BODY = "body"
    HEADERS = "headers"


@dataclass(frozen=True)
class RetryConfiguration:
    """Retry policy for the innermost retry interceptor.

    ``final_statuses`` are handed back upstream untouched instead of being
    retried, so outer interceptors (auth refresh) still see them.
    """

    max_retries: int
    initial_delay_seconds: float
    final_statuses: frozenset[int] = frozenset({UNAUTHORIZED})

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.initial_delay_seconds < 0:
            raise ValueError("initial_delay_seconds must be >= 0")
        object.__setattr__(
            self, "final_statuses", frozenset(self.final_statuses)
        )


@dataclass(frozen=True)
class LoggingConfiguration:
    level: LoggingLevel = LoggingLevel.BASIC
    debug_private_data: bool = False


@dataclass(frozen=True)
class HeaderMapConfiguration:
    """Static headers added to requests whose host matches ``pattern``.

    When ``pattern`` is None the host of the configured base URL is used.
    """

    headers: Mapping[str, str] = field(default_factory=_empty_headers)
    pattern: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "headers", MappingProxyType(dict(self.headers))
        )


@dataclass(frozen=True)
class NetworkConfiguration:
    """Process-wide configuration shared by every networking component.

    Created once before any service exists and never mutated afterwards.
    """

    base_url: str
    interceptors: Sequence[Interceptor] = ()
    connect_timeout_seconds: float | None = None
    read_timeout_seconds: float | None = None
    write_timeout_seconds: float | None = None
    refresh_token_timeout_seconds: float = (
        DEFAULT_REFRESH_TOKEN_TIMEOUT_SECONDS
    )
    retry: RetryConfiguration | None = None
    logging: LoggingConfiguration = field(default_factory=LoggingConfiguration)
    header_map: HeaderMapConfiguration = field(
        default_factory=HeaderMapConfiguration
    )
    verify_tls: bool = True
    user_agent: str | None = None

    def __post_init__(self) -> None:
        parsed = urlparse(self.base_url)
        if parsed.scheme not in {"http", "https"} or not parsed.hostname:
            raise ValueError("base_url must be an absolute http(s) URL")
        for name in (
            "connect_timeout_seconds",
            "read_timeout_seconds",
            "write_timeout_seconds",
        ):
            value = getattr(self, name)
            if value is not None and value <= 0:
                raise ValueError(f"{name} must be > 0 when provided")
        if self.refresh_token_timeout_seconds <= 0:
            raise ValueError("refresh_token_timeout_seconds must be > 0")

        object.__setattr__(self, "interceptors", tuple(self.interceptors))

    @property
    def host(self) -> str:
        """Host component of the base URL."""
        return urlparse(self.base_url).hostname or ""
