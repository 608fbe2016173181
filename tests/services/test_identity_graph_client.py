"""Identity Graph HTTP Client - verifies request shapes and error mapping via httpx.MockTransport.

Tests:
    - search/create/assign_tags/seed_relationship/create_context_tag hit the right paths
    - 409 on context-tag creation -> TagConflictError
    - Non-2xx -> ConnectionFailureError(endpoint, status_code)
    - Transport errors -> ConnectionFailureError; timeouts -> OperationTimeoutError
"""

import json

import httpx
import pytest

from event_maker.core.errors import (
    ConnectionFailureError,
    OperationTimeoutError,
    TagConflictError,
)
from event_maker.infrastructure.identity_graph_client import (
    HttpIdentityGraph,
    build_http_client,
)


def _graph(handler) -> HttpIdentityGraph:
    client = httpx.AsyncClient(
        base_url="http://graph.test", transport=httpx.MockTransport(handler),
    )
    return HttpIdentityGraph(client, "owner-1")


async def test_search_sends_owner_and_email():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"people": [{"person_id": "p-1"}]})

    people = await _graph(handler).search("ada@example.com", "owner-1")

    assert people == [{"person_id": "p-1"}]
    assert seen[0].method == "GET"
    assert seen[0].url.path == "/v1/protocol/people"
    assert seen[0].url.params["email"] == "ada@example.com"
    assert seen[0].url.params["owner_id"] == "owner-1"


async def test_search_without_people_key_returns_empty():
    people = await _graph(lambda r: httpx.Response(200, json={})).search("x@y.z", "o")
    assert people == []


async def test_create_adds_owner_id():
    bodies = []

    def handler(request):
        bodies.append(json.loads(request.content))
        return httpx.Response(201, json={"person_id": "p-7", "handle": "ada.bsky"})

    person = await _graph(handler).create({"legal_name": "Ada"})

    assert person["person_id"] == "p-7"
    assert bodies == [{"owner_id": "owner-1", "legal_name": "Ada"}]


async def test_assign_tags_patches_person_and_accepts_204():
    seen = []

    def handler(request):
        seen.append((request.method, request.url.path, json.loads(request.content)))
        return httpx.Response(204)

    assert await _graph(handler).assign_tags("p-7", ["role:attendee"]) is None
    assert seen == [("PATCH", "/v1/protocol/people/p-7", {"tags": ["role:attendee"]})]


async def test_seed_relationship_posts_interaction():
    bodies = []

    def handler(request):
        bodies.append(json.loads(request.content))
        return httpx.Response(201, json={"interaction_id": "i-1"})

    await _graph(handler).seed_relationship("welcome", "p-7", "Welcome to the network")

    body = bodies[0]
    assert body["actor_person_id"] == "welcome"
    assert body["partner_person_id"] == "p-7"
    assert body["summary"] == "Welcome to the network"
    assert "timestamp" in body


async def test_context_tag_conflict():
    graph = _graph(lambda r: httpx.Response(409, json={"detail": "exists"}))
    with pytest.raises(TagConflictError) as exc:
        await graph.create_context_tag("event_x:Keynote")
    assert exc.value.label == "event_x:Keynote"


async def test_error_status_maps_to_connection_failure():
    graph = _graph(lambda r: httpx.Response(500, json={"detail": "db down"}))
    with pytest.raises(ConnectionFailureError) as exc:
        await graph.create({"legal_name": "Ada"})
    assert exc.value.status_code == 500
    assert exc.value.endpoint == "/v1/protocol/people"
    assert "db down" in exc.value.message


async def test_transport_error_maps_to_connection_failure():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ConnectionFailureError) as exc:
        await _graph(handler).search("ada@example.com", "owner-1")
    assert exc.value.status_code is None


async def test_timeout_maps_to_operation_timeout():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(OperationTimeoutError):
        await _graph(handler).search("ada@example.com", "owner-1")


async def test_build_http_client_sets_auth_header():
    client = build_http_client("http://graph.test/", "secret-token")
    try:
        assert client.headers["Authorization"] == "Bearer secret-token"
        assert client.base_url.host == "graph.test"
    finally:
        await client.aclose()


async def test_build_http_client_without_token():
    client = build_http_client("http://graph.test", None)
    try:
        assert "Authorization" not in client.headers
    finally:
        await client.aclose()
