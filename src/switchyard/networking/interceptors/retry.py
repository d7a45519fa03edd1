"""Retry with exponential backoff for the innermost pipeline position."""

from __future__ import annotations

import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Callable

import requests
import structlog

from ..chain import Chain, Interceptor
from ..config import RetryConfiguration
from ..errors import RequestCancelledError, RetryExhaustedError, TransportError

logger = structlog.get_logger()

# How often a cancellable attempt checks its cancel event.
CANCEL_POLL_SECONDS = 0.05


def _is_successful(status_code: int) -> bool:
    return 200 <= status_code < 300


def _discard_response(future: Future[requests.Response]) -> None:
    if future.cancelled() or future.exception() is not None:
        return
    future.result().close()


class RetryInterceptor(Interceptor):
    """Makes up to ``max_retries`` attempts at a request.

    Unsuccessful responses are discarded and retried straight away.
    Transport failures back off ``initial_delay * 2**n`` between attempts.
    With ``max_retries`` of zero nothing is sent and the request fails
    with :class:`RetryExhaustedError` after 0 attempts.

    When the chain carries a cancel event, each attempt runs on a worker
    thread so that setting the event abandons it at once. The abandoned
    response is closed when it arrives. When no policy is configured the
    interceptor is a pass-through.
    """

    def __init__(
        self,
        policy: RetryConfiguration | None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._policy = policy
        self._sleep = sleep
        self._log = logger.bind(component="retry")
        self._executor: ThreadPoolExecutor | None = None
        self._executor_lock = threading.Lock()

    def intercept(self, chain: Chain) -> requests.Response:
        if self._policy is None:
            return chain.proceed(chain.request)

        max_attempts = self._policy.max_retries
        delay = self._policy.initial_delay_seconds
        last_error: TransportError | None = None
        last_status: int | None = None

        for attempt in range(max_attempts):
            self._check_cancelled(chain)
            try:
                response = self._attempt(chain)
            except TransportError as exc:
                last_error = exc
                self._log.warning(
                    "attempt_failed",
                    attempt=attempt + 1,
                    max_attempts=max_attempts,
                    error=type(exc).__name__,
                )
                if attempt < max_attempts - 1:
                    self._backoff(chain, delay)
                    delay *= 2
                continue

            if self._is_cancelled(chain):
                response.close()
                raise RequestCancelledError("request cancelled")
            if (
                _is_successful(response.status_code)
                or response.status_code in self._policy.final_statuses
            ):
                return response

            last_error = None
            last_status = response.status_code
            self._log.info(
                "attempt_unsuccessful",
                attempt=attempt + 1,
                max_attempts=max_attempts,
                status_code=response.status_code,
            )
            response.close()

        if last_error is not None:
            raise last_error
        raise RetryExhaustedError(max_attempts, last_status)

    def _attempt(self, chain: Chain) -> requests.Response:
        event = chain.cancel_event
        if event is None:
            return chain.proceed(chain.request)

        future = self._worker().submit(chain.proceed, chain.request)
        while True:
            try:
                return future.result(timeout=CANCEL_POLL_SECONDS)
            except FutureTimeoutError:
                if event.is_set():
                    break
        future.add_done_callback(_discard_response)
        self._log.info("attempt_abandoned")
        raise RequestCancelledError("request cancelled during attempt")

    def _worker(self) -> ThreadPoolExecutor:
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    thread_name_prefix="switchyard-attempt"
                )
            return self._executor

    @staticmethod
    def _is_cancelled(chain: Chain) -> bool:
        return chain.cancel_event is not None and chain.cancel_event.is_set()

    def _check_cancelled(self, chain: Chain) -> None:
        if self._is_cancelled(chain):
            raise RequestCancelledError("request cancelled")

    def _backoff(self, chain: Chain, delay: float) -> None:
        if delay <= 0:
            return
        if chain.cancel_event is None:
            self._sleep(delay)
        elif chain.cancel_event.wait(delay):
            raise RequestCancelledError("request cancelled during backoff")
