"""Error types raised by the switchyard networking layer."""

from __future__ import annotations


class NetworkError(Exception):
    """Base class for every error raised by the networking layer."""


class ConfigurationError(NetworkError):
    """The networking layer was set up or used incorrectly.

    Raised for a service requested before initialization, an inconsistent
    second initialization, or a service type that is not a contract.
    Never retried.
    """


class HttpClientError(NetworkError):
    """A request failed for a reason not covered by a narrower type."""


class TransportError(HttpClientError):
    """Network or I/O failure during a single attempt."""


class RequestTimeoutError(TransportError):
    """The transport gave up waiting for the remote peer."""


class RetryableHttpError(TransportError):
    """Connection-level failure that is safe to retry."""


class RequestCancelledError(TransportError):
    """The caller cancelled the request before it completed."""


class RetryExhaustedError(TransportError):
    """The attempts ran out without a successful response."""

    def __init__(self, attempts: int, last_status: int | None = None) -> None:
        self.attempts = attempts
        self.last_status = last_status
        message = f"Failed to execute request after {attempts} attempts"
        if last_status is not None:
            message = f"{message} (last status {last_status})"
        super().__init__(message)


class ListenerError(NetworkError):
    """A response listener raised while being notified.

    Only ever logged; it never reaches the caller of the request.
    """

    def __init__(self, api_path: object, cause: BaseException) -> None:
        self.api_path = api_path
        self.cause = cause
        super().__init__(f"listener for {api_path} failed: {cause!r}")
