"""Bearer token injection with refresh on 401 responses."""

from __future__ import annotations

import threading
from concurrent.futures import Future, InvalidStateError
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Callable, Protocol

import requests
import structlog

from ..chain import Chain, Interceptor
from ..config import DEFAULT_REFRESH_TOKEN_TIMEOUT_SECONDS, UNAUTHORIZED

logger = structlog.get_logger()

AUTHORIZATION = "Authorization"

RefreshCallback = Callable[[str | None, int], None]


class TokenProvider(Protocol):
    """Source of access tokens supplied by the embedding application."""

    def get_token(self) -> str | None:
        """Return the current token, or None when there is none."""

    def refresh_token(self, callback: RefreshCallback) -> None:
        """Start a refresh and report ``(new_token, status_code)`` to callback.

        The callback may be invoked from any thread, before or after this
        method returns.
        """


class AuthRefreshInterceptor(Interceptor):
    """Attaches ``Authorization: Bearer`` and recovers once from a 401.

    Refreshes are serialized per interceptor instance: concurrent requests
    that hit a 401 queue on the lock and each run their own refresh once
    the previous one settles. Requests that never see a 401 never touch
    the lock.
    """

    def __init__(
        self,
        token_provider: TokenProvider,
        refresh_timeout_seconds: float = DEFAULT_REFRESH_TOKEN_TIMEOUT_SECONDS,
    ) -> None:
        self._token_provider = token_provider
        self._refresh_timeout_seconds = refresh_timeout_seconds
        self._lock = threading.Lock()
        self._log = logger.bind(component="auth_refresh")

    def intercept(self, chain: Chain) -> requests.Response:
        request = chain.request
        response = chain.proceed(self._with_token(request))
        if response.status_code != UNAUTHORIZED:
            return response

        with self._lock:
            token = self._refresh()
            if not token:
                return response
            response.close()
            return chain.proceed(self._with_token(request, token))

    def _with_token(
        self,
        request: requests.PreparedRequest,
        token: str | None = None,
    ) -> requests.PreparedRequest:
        if token is None:
            token = self._token_provider.get_token()
        if not token or AUTHORIZATION in request.headers:
            return request
        request = request.copy()
        request.headers[AUTHORIZATION] = f"Bearer {token}"
        return request

    def _refresh(self) -> str | None:
        """Run one refresh and wait, bounded, for its callback."""
        future: Future[tuple[str | None, int]] = Future()

        def on_refreshed(token: str | None, status_code: int) -> None:
            try:
                future.set_result((token, status_code))
            except InvalidStateError:
                # Already settled or abandoned after a timeout.
                pass

        try:
            self._token_provider.refresh_token(on_refreshed)
            token, status_code = future.result(
                timeout=self._refresh_timeout_seconds
            )
        except FutureTimeoutError:
            future.cancel()
            self._log.warning(
                "token_refresh_timed_out",
                timeout_s=self._refresh_timeout_seconds,
            )
            return None
        except Exception:
            self._log.exception("token_refresh_failed")
            return None

        if not token:
            self._log.warning("token_refresh_empty", status_code=status_code)
            return None
        self._log.info("token_refreshed", status_code=status_code)
        return token
