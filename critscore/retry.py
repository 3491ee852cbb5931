"""Retrying of HTTP requests according to pluggable retry strategies."""

from __future__ import annotations

import enum
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import httpx

DEFAULT_MAX_RETRIES = 5
DEFAULT_INITIAL_DELAY = 120.0


class NoMoreAttemptsError(Exception):
    """Raised when a request is attempted again after it is done."""

    def __init__(self, message: str = "request cannot be retried") -> None:
        super().__init__(message)


class RetryStrategy(enum.Enum):
    """What a strategy decided to do about a failed response."""

    NO_RETRY = "NoRetry"
    RETRY_IMMEDIATE = "RetryImmediate"
    RETRY_WITH_INITIAL_DELAY = "RetryWithInitialDelay"

    def __str__(self) -> str:
        return self.value


StrategyFn = Callable[[Any], RetryStrategy]
RetryAfterFn = Callable[[Any], float]
BackoffFn = Callable[[float], float]


def default_backoff(delay: float) -> float:
    """Double a positive delay; a delay of zero or less becomes one minute."""
    if delay <= 0:
        return 60.0
    return delay * 2


@dataclass
class Options:
    """Settings shared by all retried requests.

    Delays are in seconds. ``retry_after`` returns the delay requested by the
    server, or 0 when there is none. Each strategy may raise to abort.
    """

    max_retries: int = DEFAULT_MAX_RETRIES
    initial_delay: float = DEFAULT_INITIAL_DELAY
    backoff: BackoffFn = default_backoff
    retry_after: Optional[RetryAfterFn] = None
    strategies: list[StrategyFn] = field(default_factory=list)
    sleep: Callable[[float], None] = time.sleep


class Request:
    """A single request that may be attempted several times."""

    def __init__(
        self,
        request: Any,
        send: Callable[[Any], Any],
        options: Optional[Options] = None,
    ) -> None:
        self._request = request
        self._send = send
        self._options = options if options is not None else Options()
        self._attempts = 0
        self._finished = False
        self._delay = 0.0

    def done(self) -> bool:
        """Whether the request may not be attempted any more."""
        return self._finished or self._attempts > self._options.max_retries

    def do(self) -> Any:
        """Make one attempt and return its response.

        Raises NoMoreAttemptsError if the request is already done. Errors from
        sending or from a strategy end the request and propagate.
        """
        if self.done():
            raise NoMoreAttemptsError()
        opts = self._options
        if self._attempts > 0:
            if self._delay > 0:
                opts.sleep(self._delay)
            self._delay = opts.backoff(self._delay)
        self._attempts += 1

        try:
            response = self._send(self._request)
        except Exception:
            self._finished = True
            raise

        if 200 <= response.status_code < 400:
            self._finished = True
            return response

        if opts.retry_after is not None:
            delay = opts.retry_after(response)
            if delay:
                self._delay = delay
                return response

        strategy = RetryStrategy.NO_RETRY
        for strategy_fn in opts.strategies:
            try:
                strategy = strategy_fn(response)
            except Exception:
                self._finished = True
                raise
            if strategy is not RetryStrategy.NO_RETRY:
                break

        if strategy is RetryStrategy.NO_RETRY:
            self._finished = True
            return response

        if self._attempts == 1 and strategy is RetryStrategy.RETRY_WITH_INITIAL_DELAY:
            self._delay = opts.initial_delay
        return response


class RetryTransport(httpx.BaseTransport):
    """An httpx transport that retries requests sent through an inner transport."""

    def __init__(
        self, inner: httpx.BaseTransport, options: Optional[Options] = None
    ) -> None:
        self._inner = inner
        self._options = options if options is not None else Options()

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        attempt = Request(request, self._inner.handle_request, self._options)
        response: Optional[httpx.Response] = None
        while not attempt.done():
            if response is not None:
                response.close()
            response = attempt.do()
        if response is None:
            raise NoMoreAttemptsError()
        return response

    def close(self) -> None:
        self._inner.close()