"""Service client bound to one base URL.

Service contracts call these methods to issue requests. Every request is
built against the client's base URL and sent through the shared
interceptor pipeline; the outcome comes back as a Result holding the
decoded value or the error, plus request metadata.
"""

from __future__ import annotations

import threading
from typing import Any, Mapping, Sequence
from urllib.parse import urljoin

import requests

from .chain import HttpPipeline
from .converters import DEFAULT_CONVERTERS, ConverterFactory, resolve_decoder
from .errors import HttpClientError, TransportError
from .types import Err, Ok, Result


class ServiceClient:
    """Issues requests relative to ``base_url`` through ``pipeline``.

    Non-2xx statuses, including a 401 that survived token refresh, are
    regular ``Ok`` results carrying the status. Only transport failures
    and exhausted retries become ``Err`` results.
    """

    def __init__(
        self,
        pipeline: HttpPipeline,
        base_url: str,
        converters: Sequence[ConverterFactory] = DEFAULT_CONVERTERS,
    ) -> None:
        """Create a new ServiceClient.

        Args:
            pipeline: Interceptor pipeline shared by all clients of a context.
            base_url: Root address, expected to end with a slash.
            converters: Body converter factories, consulted in order.
        """
        self._pipeline = pipeline
        self._base_url = base_url
        self._converters = tuple(converters)

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def pipeline(self) -> HttpPipeline:
        return self._pipeline

    def _build_meta(
        self,
        method: str,
        request_url: str,
        response: requests.Response | None,
        context: Mapping[str, Any] | None,
        final_error: str | None = None,
    ) -> dict[str, Any]:
        """Construct metadata dictionary from response and context."""
        meta: dict[str, Any] = {}
        meta["method"] = method
        meta["url"] = request_url
        if context:
            context_dict = dict(context)
            meta["context"] = context_dict
            for key, value in context_dict.items():
                meta.setdefault(key, value)

        if response is not None:
            meta["status"] = response.status_code
            meta["status_code"] = response.status_code
            meta["url"] = response.url or request_url
            meta["reason"] = response.reason
            try:
                meta["elapsed_s"] = response.elapsed.total_seconds()
            except AttributeError:
                pass
        if final_error is not None:
            meta["final_error"] = final_error

        return meta

    def request(
        self,
        method: str,
        path: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, Any] | None = None,
        data: Any | None = None,
        json: Any | None = None,
        returns: object = bytes,
        cancel_event: threading.Event | None = None,
        context: Mapping[str, Any] | None = None,
        stream: bool = False,
    ) -> Result[Any, Exception]:
        """Send a request and decode the response into ``returns``.

        Args:
            method: HTTP method.
            path: Path resolved against the base URL.
            headers: Extra headers, including timeout directives.
            params: Optional query parameters.
            data: Optional form/body payload.
            json: Optional JSON payload (mutually exclusive with data).
            returns: Type the body is decoded into; None discards it.
            cancel_event: Setting it aborts the attempt in flight, pending
                backoff and further retries.
            context: Optional caller context for logging/tracing.
            stream: Leave the response body unread on the wire.

        Returns:
            Result containing the decoded body, or an error on failure.
        """
        decoder = resolve_decoder(self._converters, returns)
        url = urljoin(self._base_url, path)
        prepared = requests.Request(
            method=method.upper(),
            url=url,
            headers=dict(headers or {}),
            params=dict(params or {}),
            data=data,
            json=json,
        ).prepare()

        try:
            response = self._pipeline.execute(
                prepared, cancel_event, stream=stream
            )
        except TransportError as exc:
            meta = self._build_meta(
                method.upper(), url, None, context, type(exc).__name__
            )
            attempts = getattr(exc, "attempts", None)
            if attempts is not None:
                meta["attempts"] = attempts
            return Err(exc, meta=meta)

        meta = self._build_meta(method.upper(), url, response, context)
        try:
            value = decoder(response)
        except ValueError as exc:
            meta["final_error"] = type(exc).__name__
            return Err(
                HttpClientError(f"could not decode response body: {exc}"),
                meta=meta,
            )
        return Ok(value, meta=meta)

    def get(self, path: str, **kwargs: Any) -> Result[Any, Exception]:
        return self.request("GET", path, **kwargs)

    def head(self, path: str, **kwargs: Any) -> Result[Any, Exception]:
        kwargs.setdefault("returns", None)
        return self.request("HEAD", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> Result[Any, Exception]:
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs: Any) -> Result[Any, Exception]:
        return self.request("PUT", path, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> Result[Any, Exception]:
        return self.request("DELETE", path, **kwargs)

    def download(
        self, path: str, **kwargs: Any
    ) -> Result[requests.Response, Exception]:
        """Stream a GET request.

        The value is the ``requests.Response`` with its body still unread;
        the caller consumes it with ``iter_content`` and closes it.
        """
        kwargs["returns"] = requests.Response
        kwargs["stream"] = True
        return self.request("GET", path, **kwargs)
