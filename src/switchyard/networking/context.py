"""Network context: the explicit owner of all networking state.

A context is created by the application, initialized once with a
:class:`NetworkConfiguration` and a token provider, and then hands out
service instances bound to cached clients. Separate contexts share
nothing, which keeps tests and multi-tenant setups independent.

Example:
    class UserService(Service):
        def get_user(self, user_id):
            return self.client.get(f"users/{user_id}", returns=dict)

    context = NetworkContext()
    config = NetworkConfiguration("https://api.example.com/")
    context.initialize(config, tokens)
    users = context.create_service(UserService)
"""

from __future__ import annotations

import threading
from typing import Sequence, TypeVar

import structlog

from .chain import HttpPipeline, Interceptor, Timeouts, Transport
from .client import ServiceClient
from .config import NetworkConfiguration
from .converters import DEFAULT_CONVERTERS, ConverterFactory
from .errors import ConfigurationError
from .factory import ClientFactory, ensure_trailing_slash
from .interceptors import (
    ApiPath,
    AuthRefreshInterceptor,
    CurlLoggingInterceptor,
    HeaderInjector,
    HttpLoggingInterceptor,
    ListenerRegistry,
    ResponseListener,
    ResponseObserverInterceptor,
    RetryInterceptor,
    TimeoutOverrideInterceptor,
    TokenProvider,
)
from .transport import SessionTransport

logger = structlog.get_logger()

ServiceT = TypeVar("ServiceT", bound="Service")


class Service:
    """Base class for service contracts.

    Subclasses declare the calls of one remote API and issue them through
    ``self.client``.
    """

    def __init__(self, client: ServiceClient) -> None:
        self.client = client


def build_interceptors(
    configuration: NetworkConfiguration,
    token_provider: TokenProvider,
    registry: ListenerRegistry,
) -> list[Interceptor]:
    """Assemble the interceptor list in pipeline order.

    Header injection runs first and retry last, right before the
    transport, so every retry carries the current token and headers.
    """
    header_map = configuration.header_map
    interceptors: list[Interceptor] = [
        HeaderInjector.for_base_url(
            header_map.headers, configuration.base_url, header_map.pattern
        ),
        AuthRefreshInterceptor(
            token_provider, configuration.refresh_token_timeout_seconds
        ),
        ResponseObserverInterceptor(registry),
        HttpLoggingInterceptor(
            configuration.logging.level,
            configuration.logging.debug_private_data,
        ),
    ]
    if configuration.logging.debug_private_data:
        interceptors.append(CurlLoggingInterceptor())
    interceptors.append(TimeoutOverrideInterceptor())
    interceptors.extend(configuration.interceptors)
    interceptors.append(RetryInterceptor(configuration.retry))
    return interceptors


class NetworkContext:
    """Owns configuration, pipeline, listener registry and client cache."""

    def __init__(
        self,
        transport: Transport | None = None,
        converters: Sequence[ConverterFactory] = DEFAULT_CONVERTERS,
    ) -> None:
        self._transport = transport
        self._converters = tuple(converters)
        self._lock = threading.Lock()
        self._registry = ListenerRegistry()
        self._factory = ClientFactory()
        self._configuration: NetworkConfiguration | None = None
        self._token_provider: TokenProvider | None = None
        self._pipeline: HttpPipeline | None = None

    @property
    def configuration(self) -> NetworkConfiguration:
        return self._require_pipeline_and_configuration()[1]

    @property
    def is_initialized(self) -> bool:
        return self._pipeline is not None

    @property
    def registry(self) -> ListenerRegistry:
        return self._registry

    def initialize(
        self,
        configuration: NetworkConfiguration,
        token_provider: TokenProvider,
    ) -> None:
        """Set up the pipeline; repeating the same setup is a no-op."""
        with self._lock:
            if self._pipeline is not None:
                if (
                    configuration == self._configuration
                    and token_provider is self._token_provider
                ):
                    return
                raise ConfigurationError(
                    "NetworkContext is already initialized with a different "
                    "configuration"
                )

            transport = self._transport or self._default_transport(
                configuration
            )
            interceptors = build_interceptors(
                configuration, token_provider, self._registry
            )
            self._pipeline = HttpPipeline(
                interceptors,
                transport,
                Timeouts.from_configuration(configuration),
            )
            self._configuration = configuration
            self._token_provider = token_provider
            logger.info(
                "network_initialized",
                base_url=configuration.base_url,
                retry=configuration.retry is not None,
                logging_level=configuration.logging.level.value,
            )

    @staticmethod
    def _default_transport(configuration: NetworkConfiguration) -> Transport:
        transport = SessionTransport(verify_tls=configuration.verify_tls)
        if configuration.user_agent:
            transport.session.headers["User-Agent"] = configuration.user_agent
        return transport

    def _require_pipeline_and_configuration(
        self,
    ) -> tuple[HttpPipeline, NetworkConfiguration]:
        with self._lock:
            if self._pipeline is None or self._configuration is None:
                raise ConfigurationError(
                    "NetworkContext must be initialized first"
                )
            return self._pipeline, self._configuration

    def create_service(
        self, service: type[ServiceT], base_url: str | None = None
    ) -> ServiceT:
        """Instantiate ``service`` bound to the cached client for ``base_url``.

        Raises:
            ConfigurationError: ``service`` is not a :class:`Service` subclass
                or the context has not been initialized.
        """
        if not (isinstance(service, type) and issubclass(service, Service)):
            raise ConfigurationError(
                f"{service!r} is not a Service subclass; API declarations "
                "must derive from Service"
            )
        pipeline, configuration = self._require_pipeline_and_configuration()
        client = self._factory.get_instance(
            pipeline,
            ensure_trailing_slash(base_url or configuration.base_url),
            self._converters,
        )
        return service(client)

    def add_listener(
        self, api_path: ApiPath, listener: ResponseListener
    ) -> None:
        self._registry.add_listener(api_path, listener)

    def remove_listener(
        self, api_path: ApiPath, listener: ResponseListener
    ) -> None:
        self._registry.remove_listener(api_path, listener)

    def close(self) -> None:
        """Close the transport and forget the configuration."""
        with self._lock:
            pipeline, self._pipeline = self._pipeline, None
            self._configuration = None
            self._token_provider = None
            self._factory = ClientFactory()
        if pipeline is not None:
            pipeline.close()

    def __enter__(self) -> NetworkContext:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
