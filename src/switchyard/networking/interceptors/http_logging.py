"""Request/response logging interceptors."""

from __future__ import annotations

import json
import shlex
import time
from typing import Any

import requests
import structlog

from ..chain import Chain, Interceptor
from ..config import LoggingLevel
from ..logging import redact_headers, redact_url_credentials

logger = structlog.get_logger()

JSON_INDENT = 2


def format_json_body(body: str) -> str:
    """Pretty-print ``body`` when it holds a JSON object or array."""
    stripped = body.lstrip()
    if not stripped.startswith(("{", "[")):
        return body
    try:
        return json.dumps(json.loads(stripped), indent=JSON_INDENT)
    except ValueError:
        return body


def _request_body_text(request: requests.PreparedRequest) -> str | None:
    body = request.body
    if body is None:
        return None
    if isinstance(body, bytes):
        try:
            return body.decode("utf-8")
        except UnicodeDecodeError:
            return f"<{len(body)}-byte binary body>"
    if isinstance(body, str):
        return body
    return "<streamed body>"


class HttpLoggingInterceptor(Interceptor):
    """Logs each exchange at the configured :class:`LoggingLevel`.

    ``BASIC`` records method, URL, status and duration; ``HEADERS`` adds the
    headers and ``BODY`` adds headers and bodies. Streamed response bodies
    are never read. Credential headers are redacted unless
    ``debug_private_data`` is set.
    """

    def __init__(
        self,
        level: LoggingLevel = LoggingLevel.BASIC,
        debug_private_data: bool = False,
    ) -> None:
        self._level = level
        self._debug_private_data = debug_private_data
        self._log = logger.bind(component="http")

    @property
    def _logs_headers(self) -> bool:
        return self._level in (LoggingLevel.HEADERS, LoggingLevel.BODY)

    def _headers(self, headers: Any) -> dict[str, str]:
        return redact_headers(
            dict(headers or {}), debug_private_data=self._debug_private_data
        )

    def _url(self, url: str | None) -> str:
        if self._debug_private_data:
            return url or ""
        return redact_url_credentials(url or "")

    def intercept(self, chain: Chain) -> requests.Response:
        request = chain.request
        if self._level is LoggingLevel.NONE:
            return chain.proceed(request)

        fields: dict[str, Any] = {
            "method": request.method,
            "url": self._url(request.url),
        }
        if self._logs_headers:
            fields["headers"] = self._headers(request.headers)
        if self._level is LoggingLevel.BODY:
            body = _request_body_text(request)
            if body is not None:
                fields["body"] = format_json_body(body)
        self._log.info("http_request", **fields)

        started = time.perf_counter_ns()
        try:
            response = chain.proceed(request)
        except Exception as exc:
            self._log.warning(
                "http_failed",
                method=request.method,
                url=self._url(request.url),
                error=type(exc).__name__,
            )
            raise
        duration_ms = (time.perf_counter_ns() - started) / 1_000_000

        fields = {
            "status_code": response.status_code,
            "url": self._url(response.url or request.url),
            "duration_ms": round(duration_ms, 2),
        }
        if self._logs_headers:
            fields["headers"] = self._headers(response.headers)
        if self._level is LoggingLevel.BODY and not chain.stream:
            fields["body"] = format_json_body(response.text)
        self._log.info("http_response", **fields)
        return response


class CurlLoggingInterceptor(Interceptor):
    """Logs every request as a replayable ``curl`` command.

    The command contains credentials verbatim, so it is only installed when
    private data logging is enabled.
    """

    def __init__(self) -> None:
        self._log = logger.bind(component="curl")

    @staticmethod
    def to_curl(request: requests.PreparedRequest) -> str:
        parts = ["curl", "-X", request.method or "GET"]
        for name, value in (request.headers or {}).items():
            parts.extend(["-H", f"{name}: {value}"])
        body = _request_body_text(request)
        if body is not None:
            parts.extend(["--data", body])
        parts.append(request.url or "")
        return " ".join(shlex.quote(part) for part in parts)

    def intercept(self, chain: Chain) -> requests.Response:
        self._log.debug("curl", command=self.to_curl(chain.request))
        return chain.proceed(chain.request)
