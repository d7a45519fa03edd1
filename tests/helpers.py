"""Shared test doubles for the networking tests."""

from __future__ import annotations

import io
import threading
from typing import Any, Callable, Mapping

import requests

from switchyard.networking.chain import HttpPipeline, Interceptor, Timeouts

BASE_URL = "https://api.example.com/"


def prepare(
    method: str = "GET",
    url: str = f"{BASE_URL}users/42",
    headers: Mapping[str, str] | None = None,
    **kwargs: Any,
) -> requests.PreparedRequest:
    return requests.Request(
        method=method, url=url, headers=dict(headers or {}), **kwargs
    ).prepare()


def make_response(
    status: int = 200,
    body: bytes | str = b"",
    *,
    request: requests.PreparedRequest | None = None,
    headers: Mapping[str, str] | None = None,
    reason: str = "OK",
) -> requests.Response:
    if isinstance(body, str):
        body = body.encode("utf-8")
    response = requests.Response()
    response.status_code = status
    response.reason = reason
    response.raw = io.BytesIO(body)
    response.encoding = "utf-8"
    response.headers.update(headers or {})
    response.request = request
    response.url = (request.url if request is not None else None) or BASE_URL
    return response


class ScriptedTransport:
    """Replays outcomes in order; the last one repeats.

    An outcome is a status code, a ``(status, body)`` tuple, an exception
    to raise, or a callable receiving the request.
    """

    def __init__(self, *outcomes: Any) -> None:
        self._outcomes = list(outcomes) or [200]
        self._lock = threading.Lock()
        self.sent: list[requests.PreparedRequest] = []
        self.timeouts: list[Timeouts] = []
        self.streams: list[bool] = []
        self.closed = False

    def _next(self) -> Any:
        with self._lock:
            if len(self._outcomes) > 1:
                return self._outcomes.pop(0)
            return self._outcomes[0]

    def send(
        self,
        request: requests.PreparedRequest,
        timeouts: Timeouts,
        *,
        stream: bool = False,
    ) -> requests.Response:
        with self._lock:
            self.sent.append(request)
            self.timeouts.append(timeouts)
            self.streams.append(stream)
        outcome = self._next()
        if isinstance(outcome, BaseException):
            raise outcome
        if callable(outcome):
            return outcome(request)
        if isinstance(outcome, tuple):
            status, body = outcome
            return make_response(status, body, request=request)
        return make_response(outcome, request=request)

    def close(self) -> None:
        self.closed = True

    @property
    def calls(self) -> int:
        return len(self.sent)


class RecordingInterceptor(Interceptor):
    """Appends its name to a shared journal on the way in and out."""

    def __init__(self, name: str, journal: list[str]) -> None:
        self.name = name
        self.journal = journal

    def intercept(self, chain):
        self.journal.append(f"{self.name}:in")
        response = chain.proceed(chain.request)
        self.journal.append(f"{self.name}:out")
        return response


def run(
    interceptors: list[Interceptor],
    transport: ScriptedTransport,
    request: requests.PreparedRequest | None = None,
    timeouts: Timeouts | None = None,
    cancel_event: threading.Event | None = None,
) -> requests.Response:
    pipeline = HttpPipeline(interceptors, transport, timeouts)
    return pipeline.execute(request or prepare(), cancel_event)


class StaticTokenProvider:
    """Token provider whose refresh answers through ``on_refresh``."""

    def __init__(
        self,
        token: str | None = "old-token",
        on_refresh: Callable[[Callable[[str | None, int], None]], None]
        | None = None,
    ) -> None:
        self.token = token
        self.on_refresh = on_refresh
        self.refresh_calls = 0
        self._lock = threading.Lock()

    def get_token(self) -> str | None:
        return self.token

    def refresh_token(self, callback: Callable[[str | None, int], None]) -> None:
        with self._lock:
            self.refresh_calls += 1
        if self.on_refresh is not None:
            self.on_refresh(callback)
