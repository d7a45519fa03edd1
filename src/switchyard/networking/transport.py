"""Default transport backed by ``requests.Session``."""

from __future__ import annotations

import requests

from .chain import Timeouts
from .errors import (
    RequestTimeoutError,
    RetryableHttpError,
    TransportError,
)


class SessionTransport:
    """Sends prepared requests through a shared ``requests.Session``.

    The session owns connection pooling. Its default headers, cookies and
    environment settings (proxies, CA bundle) are applied to every request
    the way ``Session.request`` would. ``requests`` has no write timeout,
    so ``Timeouts.write`` is not applied here.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        *,
        verify_tls: bool = True,
        allow_redirects: bool = True,
    ) -> None:
        self._session = session or requests.Session()
        self._verify_tls = verify_tls
        self._allow_redirects = allow_redirects

    @property
    def session(self) -> requests.Session:
        return self._session

    @staticmethod
    def _resolve_timeout(
        timeouts: Timeouts,
    ) -> float | tuple[float | None, float | None] | None:
        """Resolve timeout preference."""
        if timeouts.connect is None and timeouts.read is None:
            return None
        if timeouts.connect == timeouts.read:
            return timeouts.connect
        return (timeouts.connect, timeouts.read)

    def _merge_session_defaults(
        self, request: requests.PreparedRequest
    ) -> requests.PreparedRequest:
        """Apply session headers and cookies the request does not set."""
        merged = request.copy()
        for name, value in self._session.headers.items():
            if value is not None and name not in merged.headers:
                merged.headers[name] = value
        merged.prepare_cookies(self._session.cookies)
        return merged

    def send(
        self,
        request: requests.PreparedRequest,
        timeouts: Timeouts,
        *,
        stream: bool = False,
    ) -> requests.Response:
        request = self._merge_session_defaults(request)
        settings = self._session.merge_environment_settings(
            request.url, {}, stream, self._verify_tls, None
        )
        try:
            return self._session.send(
                request,
                timeout=self._resolve_timeout(timeouts),
                allow_redirects=self._allow_redirects,
                **settings,
            )
        except requests.exceptions.Timeout as exc:
            raise RequestTimeoutError(str(exc)) from exc
        except requests.exceptions.ConnectionError as exc:
            raise RetryableHttpError(str(exc)) from exc
        except requests.exceptions.RequestException as exc:
            raise TransportError(str(exc)) from exc

    def close(self) -> None:
        self._session.close()
