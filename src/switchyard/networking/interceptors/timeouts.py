"""Per-request timeout overrides carried as directive headers.

A request may carry ``CONNECT_TIMEOUT``, ``READ_TIMEOUT`` or
``WRITE_TIMEOUT`` headers holding a value in milliseconds. The
:class:`TimeoutOverrideInterceptor` applies them to that request only and
strips them before the request leaves the process.
"""

from __future__ import annotations

import requests

from ..chain import Chain, Interceptor

CONNECT_TIMEOUT = "CONNECT_TIMEOUT"
READ_TIMEOUT = "READ_TIMEOUT"
WRITE_TIMEOUT = "WRITE_TIMEOUT"

TIMEOUT_DIRECTIVES = (CONNECT_TIMEOUT, READ_TIMEOUT, WRITE_TIMEOUT)


def timeout_directives(
    connect: float | None = None,
    read: float | None = None,
    write: float | None = None,
) -> dict[str, str]:
    """Build directive headers from timeouts given in seconds."""
    directives: dict[str, str] = {}
    for name, seconds in (
        (CONNECT_TIMEOUT, connect),
        (READ_TIMEOUT, read),
        (WRITE_TIMEOUT, write),
    ):
        if seconds is None:
            continue
        if seconds <= 0:
            raise ValueError(f"{name} must be > 0 when provided")
        directives[name] = str(int(seconds * 1000))
    return directives


def _parse_millis(
    request: requests.PreparedRequest, name: str
) -> float | None:
    raw = request.headers.get(name)
    if raw is None:
        return None
    try:
        millis = int(raw)
    except ValueError:
        raise ValueError(
            f"{name} must be an integer in milliseconds"
        ) from None
    if millis <= 0:
        raise ValueError(f"{name} must be > 0")
    return millis / 1000


class TimeoutOverrideInterceptor(Interceptor):
    def intercept(self, chain: Chain) -> requests.Response:
        request = chain.request
        if not any(name in request.headers for name in TIMEOUT_DIRECTIVES):
            return chain.proceed(request)

        timeouts = chain.timeouts.override(
            connect=_parse_millis(request, CONNECT_TIMEOUT),
            read=_parse_millis(request, READ_TIMEOUT),
            write=_parse_millis(request, WRITE_TIMEOUT),
        )
        request = request.copy()
        for name in TIMEOUT_DIRECTIVES:
            request.headers.pop(name, None)
        return chain.with_timeouts(timeouts).proceed(request)
