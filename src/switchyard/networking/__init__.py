"""Interceptor-based HTTP client layer."""

from .chain import Chain, HttpPipeline, Interceptor, Timeouts, Transport
from .client import ServiceClient
from .config import (
    HeaderMapConfiguration,
    LoggingConfiguration,
    LoggingLevel,
    NetworkConfiguration,
    RetryConfiguration,
)
from .context import NetworkContext, Service, build_interceptors
from .errors import (
    ConfigurationError,
    HttpClientError,
    ListenerError,
    NetworkError,
    RequestCancelledError,
    RequestTimeoutError,
    RetryableHttpError,
    RetryExhaustedError,
    TransportError,
)
from .factory import ClientFactory, ensure_trailing_slash
from .interceptors import (
    CONNECT_TIMEOUT,
    READ_TIMEOUT,
    WRITE_TIMEOUT,
    ApiPath,
    TokenProvider,
    timeout_directives,
)
from .transport import SessionTransport
from .types import Err, Ok, Result

__all__ = [
    "CONNECT_TIMEOUT",
    "READ_TIMEOUT",
    "WRITE_TIMEOUT",
    "ApiPath",
    "Chain",
    "ClientFactory",
    "ConfigurationError",
    "Err",
    "HeaderMapConfiguration",
    "HttpClientError",
    "HttpPipeline",
    "Interceptor",
    "ListenerError",
    "LoggingConfiguration",
    "LoggingLevel",
    "NetworkConfiguration",
    "NetworkContext",
    "NetworkError",
    "Ok",
    "RequestCancelledError",
    "RequestTimeoutError",
    "Result",
    "RetryConfiguration",
    "RetryExhaustedError",
    "RetryableHttpError",
    "Service",
    "ServiceClient",
    "SessionTransport",
    "Timeouts",
    "TokenProvider",
    "Transport",
    "TransportError",
    "build_interceptors",
    "ensure_trailing_slash",
    "timeout_directives",
]
