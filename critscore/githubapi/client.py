"""Access to GitHub's REST and GraphQL APIs, and batched GraphQL queries."""

from __future__ import annotations

from typing import Any, Mapping, Optional

import httpx

from .roundtripper import GraphQLTransport

DEFAULT_BASE_URL = "https://api.github.com"


class Client:
    """Simple access to GitHub's REST and GraphQL APIs."""

    def __init__(
        self,
        transport: Optional[httpx.BaseTransport] = None,
        base_url: str = DEFAULT_BASE_URL,
    ) -> None:
        inner = transport if transport is not None else httpx.HTTPTransport()
        self._rest = httpx.Client(transport=inner, base_url=base_url)
        self._graph = httpx.Client(transport=GraphQLTransport(inner), base_url=base_url)

    def rest(self) -> httpx.Client:
        """Return the HTTP client for the REST API."""
        return self._rest

    def graphql(
        self, query: str, variables: Optional[Mapping[str, Any]] = None
    ) -> dict[str, Any]:
        """Run a GraphQL query and return its "data" object.

        Raises GraphQLErrors when the response carries errors and
        httpx.HTTPStatusError for any status other than 200.
        """
        body: dict[str, Any] = {"query": query}
        if variables:
            body["variables"] = dict(variables)
        response = self._graph.post("/graphql", json=body)
        if response.status_code != 200:
            raise httpx.HTTPStatusError(
                f"non-200 OK status code: {response.status_code} body: {response.text!r}",
                request=response.request,
                response=response,
            )
        payload = response.json()
        data = payload.get("data") if isinstance(payload, dict) else None
        return data if isinstance(data, dict) else {}

    def close(self) -> None:
        self._rest.close()
        self._graph.close()

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def _graphql_type(value: Any) -> str:
    if isinstance(value, bool):
        return "Boolean!"
    if isinstance(value, int):
        return "Int!"
    if isinstance(value, float):
        return "Float!"
    if isinstance(value, str):
        return "String!"
    raise TypeError(f"unsupported GraphQL variable type: {type(value).__name__}")


def batch_query(
    client: Client,
    queries: Mapping[str, str],
    variables: Optional[Mapping[str, Any]] = None,
) -> dict[str, Any]:
    """Run several field queries in one GraphQL request.

    Each query is a field selection; the result maps every key of queries to
    the data returned for it. Raises ValueError if there are no queries.
    """
    if not queries:
        raise ValueError("no query to run")
    keys = list(queries)
    fields = " ".join(f"field{index}:{queries[key]}" for index, key in enumerate(keys))
    variables = dict(variables or {})
    declarations = "".join(
        f"${name}:{_graphql_type(value)}" for name, value in sorted(variables.items())
    )
    header = f"query({declarations})" if declarations else "query"
    data = client.graphql(f"{header}{{{fields}}}", variables)
    return {key: data.get(f"field{index}") for index, key in enumerate(keys)}