"""Retry strategies for GitHub and a transport exposing GraphQL errors."""

from __future__ import annotations

import json
import logging
import re

import httpx

from ..retry import Options, RetryStrategy, RetryTransport
from .errors import ErrorResponse, GraphQLError, GraphQLErrors

GITHUB_ERROR_ID_SEARCH = b'"error_500"'

_ISSUES_RE = re.compile(r"^repos/[^/]+/[^/]+/issues$")
_ISSUE_COMMENTS_RE = re.compile(r"^repos/[^/]+/[^/]+/issues/comments$")
_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


class Strategies:
    """Retry strategies for responses from GitHub's API."""

    def __init__(self, logger: logging.Logger) -> None:
        self.logger = logger

    def server_error(self, response: httpx.Response) -> RetryStrategy:
        """Retry 5xx responses, except for issue listing URLs."""
        if not 500 <= response.status_code < 600:
            return RetryStrategy.NO_RETRY
        self.logger.warning("5xx: detected (status %s)", response.status_code)
        path = response.request.url.path.strip("/")
        if _ISSUES_RE.match(path):
            self.logger.warning("Ignoring /repos/X/Y/issues url.")
            return RetryStrategy.NO_RETRY
        if _ISSUE_COMMENTS_RE.match(path):
            self.logger.warning("Ignoring /repos/X/Y/issues/comments url.")
            return RetryStrategy.NO_RETRY
        return RetryStrategy.RETRY_IMMEDIATE

    def server_error_400(self, response: httpx.Response) -> RetryStrategy:
        """Retry 400 HTML pages that are really GitHub server errors."""
        if response.status_code != 400:
            return RetryStrategy.NO_RETRY
        self.logger.warning("400: bad request detected")
        if response.headers.get("Content-Type") != "text/html":
            return RetryStrategy.NO_RETRY
        self.logger.debug("It's a text/html doc")
        if GITHUB_ERROR_ID_SEARCH in response.read():
            self.logger.debug("Found target string - assuming 500.")
            return RetryStrategy.RETRY_IMMEDIATE
        return RetryStrategy.NO_RETRY

    def secondary_rate_limit(self, response: httpx.Response) -> RetryStrategy:
        """Retry with a delay when a secondary rate limit was hit."""
        if response.status_code != 403:
            return RetryStrategy.NO_RETRY
        self.logger.warning("403: forbidden detected")
        response.read()
        err = ErrorResponse.from_response(response)
        self.logger.warning(
            "Error response data: url=%s message=%s", err.documentation_url, err.message
        )
        if err.documentation_url.endswith(("#abuse-rate-limits", "#secondary-rate-limits")):
            self.logger.warning("Secondary rate limit hit.")
            return RetryStrategy.RETRY_WITH_INITIAL_DELAY
        self.logger.warning("Not an abuse rate limit error.")
        return RetryStrategy.NO_RETRY

    def retry_after(self, response: httpx.Response) -> float:
        """Return the seconds asked for by a Retry-After header, or 0."""
        value = response.headers.get("Retry-After")
        if value is None:
            return 0.0
        self.logger.warning("Detected Retry-After header.")
        if not _INTEGER_RE.fullmatch(value):
            return 0.0
        return float(int(value))


def new_retry_transport(inner: httpx.BaseTransport, logger: logging.Logger) -> RetryTransport:
    """Return a transport retrying requests to GitHub through inner."""
    s = Strategies(logger)
    options = Options(
        initial_delay=120.0,
        retry_after=s.retry_after,
        strategies=[s.secondary_rate_limit, s.server_error_400, s.server_error],
    )
    return RetryTransport(inner, options)


def _parse_error(raw: object) -> GraphQLError:
    if not isinstance(raw, dict):
        raise ValueError("GraphQL error is not an object")
    locations = []
    for loc in raw.get("locations") or []:
        if isinstance(loc, dict):
            locations.append((int(loc.get("line", 0)), int(loc.get("column", 0))))
    return GraphQLError(
        message=str(raw.get("message") or ""),
        type=str(raw.get("type") or ""),
        locations=locations,
    )


class GraphQLTransport(httpx.BaseTransport):
    """Raises GraphQLErrors for successful responses that carry GraphQL errors."""

    def __init__(self, inner: httpx.BaseTransport) -> None:
        self._inner = inner

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        response = self._inner.handle_request(request)
        if response.status_code != 200:
            return response
        body = response.read()
        payload = json.loads(body)
        if not isinstance(payload, dict):
            raise ValueError("GraphQL response is not an object")
        raw_errors = payload.get("errors") or []
        if not isinstance(raw_errors, list):
            raise ValueError("GraphQL errors is not a list")
        if raw_errors:
            raise GraphQLErrors([_parse_error(e) for e in raw_errors])
        return response

    def close(self) -> None:
        self._inner.close()