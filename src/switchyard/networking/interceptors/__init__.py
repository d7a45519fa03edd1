"""Built-in interceptors, listed in pipeline order."""

from .auth import AuthRefreshInterceptor, TokenProvider
from .headers import HeaderInjector
from .http_logging import CurlLoggingInterceptor, HttpLoggingInterceptor
from .observer import (
    ApiPath,
    ListenerRegistry,
    ResponseListener,
    ResponseObserverInterceptor,
)
from .retry import RetryInterceptor
from .timeouts import (
    CONNECT_TIMEOUT,
    READ_TIMEOUT,
    WRITE_TIMEOUT,
    TimeoutOverrideInterceptor,
    timeout_directives,
)

__all__ = [
    "CONNECT_TIMEOUT",
    "READ_TIMEOUT",
    "WRITE_TIMEOUT",
    "ApiPath",
    "AuthRefreshInterceptor",
    "CurlLoggingInterceptor",
    "HeaderInjector",
    "HttpLoggingInterceptor",
    "ListenerRegistry",
    "ResponseListener",
    "ResponseObserverInterceptor",
    "RetryInterceptor",
    "TimeoutOverrideInterceptor",
    "TokenProvider",
    "timeout_directives",
]
