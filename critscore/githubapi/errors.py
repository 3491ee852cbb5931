"""Errors returned by GitHub's REST and GraphQL APIs."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Optional

import httpx

GITHUB_GRAPHQL_NOT_FOUND_TYPE = "NOT_FOUND"


class ErrorResponse(Exception):
    """An error response returned by GitHub's REST API."""

    def __init__(
        self,
        response: httpx.Response,
        message: str = "",
        documentation_url: str = "",
    ) -> None:
        super().__init__(message)
        self.response = response
        self.message = message
        self.documentation_url = documentation_url

    @classmethod
    def from_response(cls, response: httpx.Response) -> ErrorResponse:
        """Build an error from a response, reading its JSON body if it has one.

        A body that is not a JSON object leaves the message and URL empty.
        """
        message = ""
        documentation_url = ""
        try:
            payload = json.loads(response.read())
        except ValueError:
            payload = None
        if isinstance(payload, dict):
            if isinstance(payload.get("message"), str):
                message = payload["message"]
            if isinstance(payload.get("documentation_url"), str):
                documentation_url = payload["documentation_url"]
        return cls(response, message, documentation_url)

    def __str__(self) -> str:
        return f"{self.response.status_code}: {self.message}"


def error_response_status_code(err: Optional[BaseException]) -> int:
    """Return the status code of the ErrorResponse in err's chain, or 0."""
    seen: set[int] = set()
    current = err
    while current is not None and id(current) not in seen:
        if isinstance(current, ErrorResponse):
            return current.response.status_code
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return 0


@dataclass
class GraphQLError:
    """A single error from a GitHub GraphQL response."""

    message: str = ""
    type: str = ""
    locations: list[tuple[int, int]] = field(default_factory=list)


class GraphQLErrors(Exception):
    """All the errors returned by a GraphQL response."""

    def __init__(self, errors: list[GraphQLError]) -> None:
        super().__init__()
        self._errors = list(errors)

    @property
    def errors(self) -> list[GraphQLError]:
        """Each error returned by the GraphQL API."""
        return self._errors

    def __str__(self) -> str:
        if not self._errors:
            raise ValueError("no errors found")
        if len(self._errors) == 1:
            return self._errors[0].message
        return f"{len(self._errors)} GraphQL errors"

    def has_type(self, error_type: str) -> bool:
        """Whether one of the errors has the given type."""
        return any(e.type == error_type for e in self._errors)

    def is_not_found(self) -> bool:
        """Whether this is exactly one error of type NOT_FOUND."""
        return len(self._errors) == 1 and self.has_type(GITHUB_GRAPHQL_NOT_FOUND_TYPE)