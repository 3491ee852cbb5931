"""Iteration over paginated GitHub GraphQL queries."""

from __future__ import annotations

import abc
from typing import Any, Iterator, Mapping, Optional, Protocol


class _GraphQLClient(Protocol):
    def graphql(
        self, query: str, variables: Optional[Mapping[str, Any]] = None
    ) -> dict[str, Any]: ...


class PagedQuery(abc.ABC):
    """A GraphQL query whose results come in pages."""

    @abc.abstractmethod
    def graphql_query(self) -> str:
        """Return the GraphQL query text."""

    @abc.abstractmethod
    def load(self, data: dict[str, Any]) -> None:
        """Replace the current page with the one in the query's data."""

    @abc.abstractmethod
    def total(self) -> int:
        """Return the total number of items across all pages."""

    @abc.abstractmethod
    def length(self) -> int:
        """Return the number of items in the current page."""

    @abc.abstractmethod
    def get(self, index: int) -> Any:
        """Return the item at index in the current page."""

    @abc.abstractmethod
    def has_next_page(self) -> bool:
        """Whether another page follows the current one."""

    @abc.abstractmethod
    def next_page_vars(self) -> dict[str, Any]:
        """Return the variables that select the next page."""


class Cursor:
    """Iterates over every item of a paged query, fetching pages as needed."""

    def __init__(
        self,
        client: _GraphQLClient,
        paged_query: PagedQuery,
        variables: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self._client = client
        self._query = paged_query
        self._vars: dict[str, Any] = dict(variables or {})
        self._cur = 0
        self._query_next_page()

    def _query_next_page(self) -> None:
        self._vars.update(self._query.next_page_vars())
        self._cur = 0
        data = self._client.graphql(self._query.graphql_query(), self._vars)
        self._query.load(data)

    def _at_end_of_page(self) -> bool:
        return self._cur >= self._query.length()

    def total(self) -> int:
        """Return the total number of items reported by the query."""
        return self._query.total()

    def __iter__(self) -> Iterator[Any]:
        return self

    def __next__(self) -> Any:
        if self._at_end_of_page():
            if not self._query.has_next_page():
                raise StopIteration
            self._query_next_page()
            if self._at_end_of_page():
                raise StopIteration
        value = self._query.get(self._cur)
        self._cur += 1
        return value


def query(
    client: _GraphQLClient,
    paged_query: PagedQuery,
    variables: Optional[Mapping[str, Any]] = None,
) -> Cursor:
    """Run the first page of paged_query and return a cursor over all items."""
    return Cursor(client, paged_query, variables)