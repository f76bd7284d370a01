"""Tests for the Zep store client."""

import json

import httpx
import pytest
import respx
from httpx import Response

from withvibes.exceptions import StoreError
from withvibes.memory.models import MessageUnit, Role
from withvibes.memory.store import ZepStoreClient

BASE = "https://zep.test/api/v2"


@pytest.fixture
def client():
    return ZepStoreClient(api_key="zep_secret", base_url=BASE)


@pytest.mark.asyncio
@respx.mock
async def test_ensure_subject_created(client):
    route = respx.post(f"{BASE}/users").mock(return_value=Response(201, json={"user_id": "alice"}))

    created = await client.ensure_subject("alice")

    assert created is True
    request = route.calls.last.request
    assert request.headers["Authorization"] == "Api-Key zep_secret"
    assert json.loads(request.content) == {"user_id": "alice", "first_name": "alice"}
    await client.close()


@pytest.mark.asyncio
@respx.mock
async def test_ensure_subject_conflict_is_success(client):
    respx.post(f"{BASE}/users").mock(return_value=Response(409, json={"message": "conflict"}))

    assert await client.ensure_subject("alice") is False
    await client.close()


@pytest.mark.asyncio
@respx.mock
async def test_ensure_conversation_already_exists_message(client):
    respx.post(f"{BASE}/threads").mock(
        return_value=Response(400, json={"message": "thread already exists"})
    )

    assert await client.ensure_conversation("thread-alice", "alice") is False
    await client.close()


@pytest.mark.asyncio
@respx.mock
async def test_ensure_conversation_payload(client):
    route = respx.post(f"{BASE}/threads").mock(return_value=Response(201, json={}))

    assert await client.ensure_conversation("thread-alice-1234abcd", "alice") is True
    assert json.loads(route.calls.last.request.content) == {
        "thread_id": "thread-alice-1234abcd",
        "user_id": "alice",
    }
    await client.close()


@pytest.mark.asyncio
@respx.mock
async def test_ensure_propagates_other_errors(client):
    respx.post(f"{BASE}/users").mock(return_value=Response(401, json={"message": "unauthorized"}))

    with pytest.raises(StoreError) as exc_info:
        await client.ensure_subject("alice")

    assert exc_info.value.status == 401
    assert exc_info.value.classification == "API Error 401"
    assert str(exc_info.value) == "unauthorized"
    await client.close()


@pytest.mark.asyncio
@respx.mock
async def test_append_messages_maps_roles(client):
    route = respx.post(f"{BASE}/threads/thread-alice/messages").mock(
        return_value=Response(200, json={})
    )

    await client.append_messages(
        "thread-alice",
        [MessageUnit(Role.SUBJECT, "hi"), MessageUnit(Role.AGENT, "hello there")],
    )

    assert json.loads(route.calls.last.request.content) == {
        "messages": [
            {"role": "user", "content": "hi"},
            {"role": "assistant", "content": "hello there"},
        ]
    }
    await client.close()


@pytest.mark.asyncio
@respx.mock
async def test_append_fact_payload(client):
    route = respx.post(f"{BASE}/graph").mock(return_value=Response(202))

    await client.append_fact("alice", "a long segment")

    assert json.loads(route.calls.last.request.content) == {
        "user_id": "alice",
        "type": "text",
        "data": "a long segment",
    }
    await client.close()


@pytest.mark.asyncio
@respx.mock
async def test_search_facts(client):
    route = respx.post(f"{BASE}/graph/search").mock(
        return_value=Response(
            200,
            json={
                "edges": [
                    {"fact": "Alice prefers tabs", "valid_at": "2025-01-01T00:00:00Z"},
                    {"fact": None, "valid_at": None, "invalid_at": None},
                ]
            },
        )
    )

    facts = await client.search_facts("alice", "indentation", limit=5)

    assert json.loads(route.calls.last.request.content) == {
        "user_id": "alice",
        "query": "indentation",
        "limit": 5,
        "scope": "edges",
    }
    assert facts[0].fact == "Alice prefers tabs"
    assert facts[0].valid_from == "2025-01-01T00:00:00Z"
    assert facts[0].valid_to is None
    assert facts[1].fact == "Unknown"
    await client.close()


@pytest.mark.asyncio
@respx.mock
async def test_search_facts_no_edges(client):
    respx.post(f"{BASE}/graph/search").mock(return_value=Response(200, json={"edges": None}))

    assert await client.search_facts("alice", "anything", limit=5) == []
    await client.close()


@pytest.mark.asyncio
@respx.mock
async def test_transport_error_is_network_store_error(client):
    respx.post(f"{BASE}/graph").mock(side_effect=httpx.ConnectError("refused"))

    with pytest.raises(StoreError) as exc_info:
        await client.append_fact("alice", "text")

    assert exc_info.value.status is None
    assert exc_info.value.classification == "Network Error"
    await client.close()


@pytest.mark.asyncio
@respx.mock
async def test_error_without_json_body(client):
    respx.post(f"{BASE}/graph").mock(return_value=Response(502, text="Bad Gateway"))

    with pytest.raises(StoreError) as exc_info:
        await client.append_fact("alice", "text")

    assert exc_info.value.status == 502
    assert "Bad Gateway" in str(exc_info.value)
    await client.close()


@pytest.mark.asyncio
@respx.mock
async def test_context_manager_closes_client():
    async with ZepStoreClient(api_key="zep_secret", base_url=BASE) as client:
        respx.post(f"{BASE}/users").mock(return_value=Response(201, json={}))
        await client.ensure_subject("alice")

    assert client._client.is_closed
