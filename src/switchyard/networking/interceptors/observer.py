"""Response observation for registered API paths.

Listeners subscribe to an :class:`ApiPath` such as ``ApiPath("/users/{id}",
"GET")`` and receive the body text of every matching response. The
response handed back up the chain is never altered.

Example:
    registry = ListenerRegistry()
    registry.add_listener(
        ApiPath("/users/{id}", "GET"),
        lambda api_path, body: print(api_path, body),
    )
    interceptor = ResponseObserverInterceptor(registry)
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Callable
from urllib.parse import urlparse

import requests
import structlog

from ..chain import Chain, Interceptor
from ..errors import ListenerError

logger = structlog.get_logger()


@dataclass(frozen=True)
class ApiPath:
    """A ``(path template, HTTP method)`` pair.

    Template segments are literals or ``{name}`` placeholders. A leading
    slash is ignored and the method is compared upper-cased.
    """

    path: str
    method: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", self.path.removeprefix("/"))
        object.__setattr__(self, "method", self.method.upper())

    @property
    def segments(self) -> list[str]:
        return self.path.split("/")

    def matches(self, path: str, method: str) -> bool:
        if method.upper() != self.method:
            return False
        template = self.segments
        candidate = path.split("/")
        if len(template) != len(candidate):
            return False
        return all(
            expected == actual or _is_placeholder(expected)
            for expected, actual in zip(template, candidate)
        )


def _is_placeholder(segment: str) -> bool:
    return segment.startswith("{") and segment.endswith("}")


ResponseListener = Callable[[ApiPath, str], None]


class ListenerRegistry:
    """Thread-safe mapping from :class:`ApiPath` to ordered listeners.

    Every structural change happens under one lock. Readers get snapshots,
    so a listener may add or remove listeners while being notified.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._listeners: dict[ApiPath, list[ResponseListener]] = {}

    def add_listener(
        self, api_path: ApiPath, listener: ResponseListener
    ) -> None:
        with self._lock:
            listeners = self._listeners.setdefault(api_path, [])
            if listener not in listeners:
                listeners.append(listener)

    def remove_listener(
        self, api_path: ApiPath, listener: ResponseListener
    ) -> None:
        """Remove ``listener``; the path entry goes with its last listener."""
        with self._lock:
            listeners = self._listeners.get(api_path)
            if listeners is None:
                return
            if listener in listeners:
                listeners.remove(listener)
            if not listeners:
                del self._listeners[api_path]

    def listeners_for(self, api_path: ApiPath) -> tuple[ResponseListener, ...]:
        with self._lock:
            return tuple(self._listeners.get(api_path, ()))

    def match(
        self, path: str, method: str
    ) -> tuple[ApiPath, tuple[ResponseListener, ...]] | None:
        """Return the first matching path and a snapshot of its listeners."""
        with self._lock:
            for api_path, listeners in self._listeners.items():
                if api_path.matches(path, method):
                    return api_path, tuple(listeners)
        return None

    def __contains__(self, api_path: object) -> bool:
        with self._lock:
            return api_path in self._listeners

    def __len__(self) -> int:
        with self._lock:
            return len(self._listeners)


class ResponseObserverInterceptor(Interceptor):
    def __init__(self, registry: ListenerRegistry) -> None:
        self._registry = registry
        self._log = logger.bind(component="response_observer")

    def intercept(self, chain: Chain) -> requests.Response:
        request = chain.request
        path = urlparse(request.url or "").path.removeprefix("/")
        method = request.method or ""

        response = chain.proceed(request)

        found = self._registry.match(path, method)
        if found is None:
            return response
        api_path, listeners = found
        if not listeners:
            return response

        # .text caches the body on the response, later readers still see it
        body = response.text
        for listener in listeners:
            try:
                listener(api_path, body)
            except Exception as exc:
                self._log.error(
                    "listener_failed",
                    api_path=api_path.path,
                    method=api_path.method,
                    error=str(ListenerError(api_path, exc)),
                    exc_info=exc,
                )
        return response
