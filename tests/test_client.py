import json

import httpx
import pytest

from critscore.githubapi.client import Client, batch_query
from critscore.githubapi.errors import GraphQLErrors


def _recording(response_body, status=200):
    sent = []

    def handler(request):
        sent.append(request)
        return httpx.Response(status, content=json.dumps(response_body).encode())

    return sent, httpx.MockTransport(handler)


def test_rest_uses_base_url():
    sent, transport = _recording({})
    client = Client(transport, "https://api.example.com")
    resp = client.rest().get("/repos/a/b")
    assert resp.status_code == 200
    assert sent[0].url == httpx.URL("https://api.example.com/repos/a/b")


def test_graphql_returns_data_and_sends_query():
    sent, transport = _recording({"data": {"viewer": {"login": "someone"}}})
    client = Client(transport, "https://api.example.com")
    data = client.graphql("query{viewer{login}}", {"n": 1})
    assert data == {"viewer": {"login": "someone"}}
    body = json.loads(sent[0].content)
    assert body["query"] == "query{viewer{login}}"
    assert body["variables"] == {"n": 1}
    assert sent[0].url.path == "/graphql"


def test_graphql_raises_graphql_errors():
    _, transport = _recording({"data": None, "errors": [{"message": "gone", "type": "NOT_FOUND"}]})
    client = Client(transport)
    with pytest.raises(GraphQLErrors) as info:
        client.graphql("query{x}")
    assert info.value.is_not_found()


def test_graphql_non_200_raises():
    _, transport = _recording({"message": "bad"}, status=502)
    client = Client(transport)
    with pytest.raises(httpx.HTTPStatusError) as info:
        client.graphql("query{x}")
    assert info.value.response.status_code == 502


def test_batch_query_maps_keys():
    sent, transport = _recording({"data": {"field0": {"a": 1}, "field1": {"b": 2}}})
    client = Client(transport)
    queries = {"x": "repository(name:$name){id}", "y": "viewer{login}"}
    result = batch_query(client, queries, {"name": "demo"})
    assert result == {"x": {"a": 1}, "y": {"b": 2}}
    body = json.loads(sent[0].content)
    assert "field0:" + queries["x"] in body["query"]
    assert "field1:" + queries["y"] in body["query"]
    assert "$name:String!" in body["query"]
    assert body["variables"] == {"name": "demo"}


def test_batch_query_missing_field_is_none():
    _, transport = _recording({"data": {"field0": {"a": 1}}})
    client = Client(transport)
    result = batch_query(client, {"x": "a{id}", "y": "b{id}"})
    assert result["x"] == {"a": 1}
    assert result["y"] is None


def test_batch_query_empty_raises():
    _, transport = _recording({"data": {}})
    with pytest.raises(ValueError):
        batch_query(Client(transport), {})