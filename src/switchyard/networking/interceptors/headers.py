"""Static header injection for requests to matching hosts."""

from __future__ import annotations

import re
from typing import Mapping
from urllib.parse import urlparse

import requests

from ..chain import Chain, Interceptor


class HeaderInjector(Interceptor):
    """Adds configured headers to requests whose host matches ``pattern``.

    Headers already present on the request are never overwritten.
    """

    def __init__(self, headers: Mapping[str, str], pattern: str) -> None:
        self._headers = dict(headers)
        self._pattern = re.compile(pattern)

    @classmethod
    def for_base_url(
        cls,
        headers: Mapping[str, str],
        base_url: str,
        pattern: str | None = None,
    ) -> HeaderInjector:
        """Build an injector matching only the base URL host by default."""
        if pattern is None:
            pattern = re.escape(urlparse(base_url).hostname or "")
        return cls(headers, pattern)

    def _applies_to(self, request: requests.PreparedRequest) -> bool:
        host = urlparse(request.url or "").hostname or ""
        return self._pattern.fullmatch(host) is not None

    def intercept(self, chain: Chain) -> requests.Response:
        request = chain.request
        if not self._headers or not self._applies_to(request):
            return chain.proceed(request)

        missing = {
            name: value
            for name, value in self._headers.items()
            if name not in request.headers
        }
        if missing:
            request = request.copy()
            request.headers.update(missing)
        return chain.proceed(request)
