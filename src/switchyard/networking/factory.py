"""Per-base-URL cache of service clients."""

from __future__ import annotations

import threading
from typing import Sequence

import structlog

from .chain import HttpPipeline
from .client import ServiceClient
from .converters import ConverterFactory

logger = structlog.get_logger()


def ensure_trailing_slash(url: str) -> str:
    return url if url.endswith("/") else f"{url}/"


class ClientFactory:
    """Creates at most one :class:`ServiceClient` per base URL string.

    Keys are compared as given; callers canonicalize them with
    :func:`ensure_trailing_slash` first. Clients are never evicted.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._clients: dict[str, ServiceClient] = {}

    def get_instance(
        self,
        pipeline: HttpPipeline,
        base_url: str,
        body_converters: Sequence[ConverterFactory],
    ) -> ServiceClient:
        with self._lock:
            client = self._clients.get(base_url)
            if client is None:
                client = ServiceClient(pipeline, base_url, body_converters)
                self._clients[base_url] = client
                logger.debug("client_created", base_url=base_url)
            return client

    def clients(self) -> dict[str, ServiceClient]:
        with self._lock:
            return dict(self._clients)

    def __len__(self) -> int:
        with self._lock:
            return len(self._clients)
