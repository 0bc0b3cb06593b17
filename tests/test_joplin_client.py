"""Contract tests for the Joplin Data API client."""

from __future__ import annotations

import json

import httpx
import pytest
import respx

from mcp_joplin_notes.errors import ErrorKind, JoplinApiError
from mcp_joplin_notes.joplin_client import JoplinClient, JoplinClientConfig

BASE_URL = "http://127.0.0.1:41184"


def _paged(items: list[dict], page_size: int):
    """Serve ``items`` in pages of ``page_size`` based on the ``page`` query param."""

    def handler(request: httpx.Request) -> httpx.Response:
        page = int(request.url.params["page"])
        start = (page - 1) * page_size
        chunk = items[start : start + page_size]
        return httpx.Response(
            200, json={"items": chunk, "has_more": start + page_size < len(items)}
        )

    return handler


@pytest.mark.asyncio
async def test_read_injects_token_and_merges_query(config) -> None:
    with respx.mock(assert_all_called=True) as router:
        route = router.get(f"{BASE_URL}/notes/abc").respond(200, json={"id": "abc"})

        async with JoplinClient(config) as client:
            data = await client.read("/notes/abc", {"query": {"fields": "id,title"}})

    assert data == {"id": "abc"}
    params = route.calls[0].request.url.params
    assert params["token"] == "secret-token"
    assert params["fields"] == "id,title"


@pytest.mark.asyncio
async def test_caller_can_override_token(config) -> None:
    with respx.mock(assert_all_called=True) as router:
        route = router.get(f"{BASE_URL}/folders").respond(200, json={"items": []})

        async with JoplinClient(config) as client:
            await client.read("/folders", {"query": {"token": "other"}})

    assert route.calls[0].request.url.params["token"] == "other"


@pytest.mark.asyncio
async def test_create_replace_remove_use_matching_verbs(config) -> None:
    with respx.mock(assert_all_called=True) as router:
        post = router.post(f"{BASE_URL}/notes").respond(200, json={"id": "n1", "title": "T"})
        put = router.put(f"{BASE_URL}/notes/n1").respond(200, json={"id": "n1", "title": "U"})
        delete = router.delete(f"{BASE_URL}/notes/n1").respond(200)

        async with JoplinClient(config) as client:
            created = await client.create("/notes", {"title": "T"})
            replaced = await client.replace("/notes/n1", {"title": "U"})
            removed = await client.remove("/notes/n1")

    assert created == {"id": "n1", "title": "T"}
    assert replaced == {"id": "n1", "title": "U"}
    assert removed is None
    assert json.loads(post.calls[0].request.content) == {"title": "T"}
    assert put.calls[0].request.url.params["token"] == "secret-token"
    assert delete.called


@pytest.mark.asyncio
async def test_read_all_pages_returns_every_item_in_order(config) -> None:
    items = [{"id": str(i)} for i in range(7)]
    with respx.mock(assert_all_called=True) as router:
        route = router.get(f"{BASE_URL}/folders").mock(side_effect=_paged(items, 3))

        async with JoplinClient(config) as client:
            result = await client.read_all_pages("/folders", {"query": {"fields": "id"}})

    assert result == items
    assert route.call_count == 3
    pages = [call.request.url.params["page"] for call in route.calls]
    assert pages == ["1", "2", "3"]
    assert all(call.request.url.params["fields"] == "id" for call in route.calls)


@pytest.mark.asyncio
async def test_read_all_pages_single_page(config) -> None:
    with respx.mock(assert_all_called=True) as router:
        route = router.get(f"{BASE_URL}/tags").respond(200, json={"items": [], "has_more": False})

        async with JoplinClient(config) as client:
            assert await client.read_all_pages("/tags") == []

    assert route.call_count == 1


@pytest.mark.asyncio
async def test_read_all_pages_rejects_response_without_items(config) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params["page"] == "1":
            return httpx.Response(200, json={"items": [{"id": "a"}], "has_more": True})
        return httpx.Response(200, json={"rows": []})

    with respx.mock(assert_all_called=True) as router:
        router.get(f"{BASE_URL}/folders").mock(side_effect=handler)

        async with JoplinClient(config) as client:
            with pytest.raises(JoplinApiError, match="/folders") as excinfo:
                await client.read_all_pages("/folders")

    assert excinfo.value.kind is ErrorKind.UNEXPECTED_SHAPE


@pytest.mark.asyncio
async def test_read_all_pages_stops_at_page_limit() -> None:
    config = JoplinClientConfig(token="t", max_pages=2)
    with respx.mock(assert_all_called=True) as router:
        route = router.get(f"{BASE_URL}/notes").respond(
            200, json={"items": [{"id": "x"}], "has_more": True}
        )

        async with JoplinClient(config) as client:
            with pytest.raises(JoplinApiError) as excinfo:
                await client.read_all_pages("/notes")

    assert excinfo.value.kind is ErrorKind.PAGINATION_LIMIT
    assert route.call_count == 2


@pytest.mark.asyncio
async def test_not_found_is_reported_structurally(config) -> None:
    with respx.mock(assert_all_called=True) as router:
        router.get(f"{BASE_URL}/notes/missing").respond(404, text="Not Found")

        async with JoplinClient(config) as client:
            with pytest.raises(JoplinApiError) as excinfo:
                await client.read("/notes/missing")

    err = excinfo.value
    assert err.not_found
    assert err.status_code == 404
    assert err.path == "/notes/missing"
    assert "secret-token" not in str(err)


@pytest.mark.asyncio
async def test_server_error_is_http_status_kind(config) -> None:
    with respx.mock(assert_all_called=True) as router:
        route = router.get(f"{BASE_URL}/notes/n1").respond(500, text="boom")

        async with JoplinClient(config) as client:
            with pytest.raises(JoplinApiError) as excinfo:
                await client.read("/notes/n1")

    assert excinfo.value.kind is ErrorKind.HTTP_STATUS
    assert not excinfo.value.not_found
    # No retries.
    assert route.call_count == 1


@pytest.mark.asyncio
async def test_connection_failure_is_transport_kind(config) -> None:
    with respx.mock(assert_all_called=True) as router:
        router.get(f"{BASE_URL}/notes/n1").mock(side_effect=httpx.ConnectError("refused"))

        async with JoplinClient(config) as client:
            with pytest.raises(JoplinApiError) as excinfo:
                await client.read("/notes/n1")

    assert excinfo.value.kind is ErrorKind.TRANSPORT
    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)


@pytest.mark.asyncio
async def test_malformed_json_is_decode_kind(config) -> None:
    with respx.mock(assert_all_called=True) as router:
        router.get(f"{BASE_URL}/notes/n1").respond(200, text="{not json")

        async with JoplinClient(config) as client:
            with pytest.raises(JoplinApiError) as excinfo:
                await client.read("/notes/n1")

    assert excinfo.value.kind is ErrorKind.DECODE


@pytest.mark.asyncio
async def test_reads_are_repeatable(config) -> None:
    items = [{"id": str(i), "title": f"t{i}"} for i in range(5)]
    with respx.mock(assert_all_called=True) as router:
        router.get(f"{BASE_URL}/folders").mock(side_effect=_paged(items, 2))
        router.get(f"{BASE_URL}/notes/1").respond(200, json={"id": "1", "body": "x"})

        async with JoplinClient(config) as client:
            assert await client.read_all_pages("/folders") == await client.read_all_pages(
                "/folders"
            )
            assert await client.read("/notes/1") == await client.read("/notes/1")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("response", "expected"),
    [
        (httpx.Response(200, text="JoplinClipperServer"), True),
        (httpx.Response(200, text="SomethingElse"), False),
        (httpx.Response(503, text="JoplinClipperServer"), False),
    ],
)
async def test_service_available(config, response, expected) -> None:
    with respx.mock(assert_all_called=True) as router:
        router.get(f"{BASE_URL}/ping").mock(return_value=response)

        async with JoplinClient(config) as client:
            assert await client.service_available() is expected


@pytest.mark.asyncio
async def test_service_available_swallows_connection_errors(config) -> None:
    with respx.mock(assert_all_called=True) as router:
        router.get(f"{BASE_URL}/ping").mock(side_effect=httpx.ConnectError("refused"))

        async with JoplinClient(config) as client:
            assert await client.service_available() is False


def test_client_requires_token() -> None:
    with pytest.raises(ValueError):
        JoplinClient(JoplinClientConfig(token=""))


def test_config_base_url() -> None:
    assert JoplinClientConfig(token="t", port=1234).base_url == "http://127.0.0.1:1234"
