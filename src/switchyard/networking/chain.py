"""Interceptor chain that every request travels through.

Interceptors run in list order on the way out and unwind in reverse on the
way back. Each one receives a :class:`Chain`, may rewrite the request, and
either calls :meth:`Chain.proceed` or short-circuits with its own response
or exception. Proceeding past the last interceptor hands the request to
the transport.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Protocol, Sequence

import requests

if TYPE_CHECKING:
    from .config import NetworkConfiguration


@dataclass(frozen=True)
class Timeouts:
    """Connect/read/write timeouts in seconds; None means transport default."""

    connect: float | None = None
    read: float | None = None
    write: float | None = None

    @classmethod
    def from_configuration(
        cls, configuration: NetworkConfiguration
    ) -> Timeouts:
        return cls(
            connect=configuration.connect_timeout_seconds,
            read=configuration.read_timeout_seconds,
            write=configuration.write_timeout_seconds,
        )

    def override(
        self,
        connect: float | None = None,
        read: float | None = None,
        write: float | None = None,
    ) -> Timeouts:
        """Return a copy with the given non-None values replaced."""
        return replace(
            self,
            connect=self.connect if connect is None else connect,
            read=self.read if read is None else read,
            write=self.write if write is None else write,
        )


class Transport(Protocol):
    """Sends one prepared request and returns the raw response."""

    def send(
        self,
        request: requests.PreparedRequest,
        timeouts: Timeouts,
        *,
        stream: bool = False,
    ) -> requests.Response: ...

    def close(self) -> None: ...


class Interceptor(ABC):
    """A unit of request/response middleware."""

    @abstractmethod
    def intercept(self, chain: Chain) -> requests.Response:
        """Handle the chain's request and return a response."""


class Chain:
    """Position of a request inside the interceptor list."""

    def __init__(
        self,
        interceptors: Sequence[Interceptor],
        transport: Transport,
        request: requests.PreparedRequest,
        timeouts: Timeouts,
        cancel_event: threading.Event | None = None,
        index: int = 0,
        stream: bool = False,
    ) -> None:
        self._interceptors = interceptors
        self._transport = transport
        self._request = request
        self._timeouts = timeouts
        self._cancel_event = cancel_event
        self._index = index
        self._stream = stream

    @property
    def request(self) -> requests.PreparedRequest:
        return self._request

    @property
    def timeouts(self) -> Timeouts:
        return self._timeouts

    @property
    def cancel_event(self) -> threading.Event | None:
        return self._cancel_event

    @property
    def stream(self) -> bool:
        """Whether the response body is left unread for the caller."""
        return self._stream

    def with_timeouts(self, timeouts: Timeouts) -> Chain:
        """Return this position with new timeouts for the rest of the chain."""
        return Chain(
            self._interceptors,
            self._transport,
            self._request,
            timeouts,
            self._cancel_event,
            self._index,
            self._stream,
        )

    def proceed(self, request: requests.PreparedRequest) -> requests.Response:
        """Pass ``request`` to the next interceptor, or to the transport."""
        if self._index >= len(self._interceptors):
            return self._transport.send(
                request, self._timeouts, stream=self._stream
            )

        following = Chain(
            self._interceptors,
            self._transport,
            request,
            self._timeouts,
            self._cancel_event,
            self._index + 1,
            self._stream,
        )
        return self._interceptors[self._index].intercept(following)


class HttpPipeline:
    """Transport bound to a fixed, ordered interceptor list.

    One pipeline is built per network context and shared by every service
    client; it holds no per-request state.
    """

    def __init__(
        self,
        interceptors: Sequence[Interceptor],
        transport: Transport,
        default_timeouts: Timeouts | None = None,
    ) -> None:
        self.interceptors = tuple(interceptors)
        self.transport = transport
        self.default_timeouts = default_timeouts or Timeouts()

    def execute(
        self,
        request: requests.PreparedRequest,
        cancel_event: threading.Event | None = None,
        stream: bool = False,
    ) -> requests.Response:
        chain = Chain(
            self.interceptors,
            self.transport,
            request,
            self.default_timeouts,
            cancel_event,
            stream=stream,
        )
        return chain.proceed(request)

    def close(self) -> None:
        self.transport.close()
