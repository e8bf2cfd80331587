import httpx
import pytest

from crew_certs.core.errors import ConfigurationError, TransportError, UpstreamError
from crew_certs.models import BoardShape
from crew_certs.services.monday import MondayClient, parse_board
from factories import column, grouped_board


def test_parse_grouped_board():
    payload = grouped_board(
        ("REZA SAPUTRA", [{"id": "1", "name": "SMS", "column_values": [column("Expiry Date", text="2026-05-15")]}]),
        ("IMAM", []),
    )
    snapshot = parse_board(payload["data"])
    assert snapshot.shape == BoardShape.GROUPS
    assert snapshot.name == "Crew Certificates"
    pairs = list(snapshot.owned_items())
    assert [(owner, item.name) for owner, item in pairs] == [("REZA SAPUTRA", "SMS")]
    col = pairs[0][1].columns[0]
    assert (col.title, col.text, col.type) == ("Expiry Date", "2026-05-15", "text")


def test_parse_grouped_board_legacy_items_key():
    data = {"boards": [{"name": "b", "columns": [], "groups": [{"id": "g", "title": "IMAM", "items": [{"id": "1", "name": "CRM"}]}]}]}
    snapshot = parse_board(data)
    assert [(o, i.name) for o, i in snapshot.owned_items()] == [("IMAM", "CRM")]


def test_parse_items_with_subitems():
    data = {
        "boards": [
            {
                "name": "b",
                "columns": [],
                "items_page": {
                    "items": [
                        {
                            "id": "1",
                            "name": "REZA",
                            "column_values": [],
                            "subitems": [
                                {"id": "11", "name": "SMS", "column_values": []},
                                {"id": "12", "name": "TAWS", "column_values": []},
                            ],
                        }
                    ]
                },
            }
        ]
    }
    snapshot = parse_board(data)
    assert snapshot.shape == BoardShape.SUBITEMS
    (owner, item), = list(snapshot.owned_items())
    assert owner == "REZA"
    assert [s.name for s in item.subitems] == ["SMS", "TAWS"]


def test_parse_items_with_group_reference():
    data = {
        "boards": [
            {
                "name": "b",
                "columns": [],
                "items_page": {
                    "items": [
                        {"id": "1", "name": "SMS", "group": {"id": "g1", "title": "REZA"}, "column_values": []},
                        {"id": "2", "name": "LOOSE", "group": None, "column_values": []},
                    ]
                },
            }
        ]
    }
    snapshot = parse_board(data)
    assert snapshot.shape == BoardShape.ITEM_GROUPS
    assert [(o, i.name) for o, i in snapshot.owned_items()] == [("REZA", "SMS"), ("LOOSE", "LOOSE")]


def test_parse_resolves_column_title_from_board_columns():
    data = {
        "boards": [
            {
                "name": "b",
                "columns": [{"id": "date4", "title": "Expiry Date", "type": "date"}],
                "items_page": {"items": [{"id": "1", "name": "SMS", "column_values": [{"id": "date4", "text": "2026-05-15", "value": None}]}]},
            }
        ]
    }
    col = parse_board(data).items[0].columns[0]
    assert (col.title, col.type) == ("Expiry Date", "date")


def test_parse_empty_board():
    assert parse_board({"boards": []}).shape == BoardShape.EMPTY
    assert list(parse_board({}).owned_items()) == []


@pytest.mark.asyncio
async def test_fetch_board_sends_query(board_api):
    board_api.payload = grouped_board(("REZA", []))
    client = board_api.client(api_version="2024-01", page_size=50)
    data = await client.fetch_board()
    assert data["boards"][0]["groups"][0]["title"] == "REZA"

    request = board_api.requests[0]
    assert request.headers["Authorization"] == "test-token"
    assert request.headers["API-Version"] == "2024-01"
    body = board_api.last_body()
    assert body["variables"] == {"boardId": [123456], "limit": 50}
    assert "groups" in body["query"]


@pytest.mark.asyncio
async def test_fetch_snapshot_uses_query_variant(board_api):
    board_api.payload = {"data": {"boards": [{"name": "b", "columns": [], "items_page": {"items": []}}]}}
    snapshot = await board_api.client(query_variant="subitems").fetch_snapshot()
    assert "subitems" in board_api.last_body()["query"]
    assert snapshot.shape == BoardShape.ITEM_GROUPS
    assert len(board_api.requests) == 1


@pytest.mark.asyncio
async def test_upstream_error_list(board_api):
    board_api.payload = {"errors": [{"message": "Not Authenticated"}]}
    with pytest.raises(UpstreamError, match="Not Authenticated"):
        await board_api.client().fetch_board()


@pytest.mark.asyncio
async def test_http_error_status(board_api):
    board_api.status_code = 502
    board_api.payload = {}
    with pytest.raises(TransportError, match="502"):
        await board_api.client().fetch_board()


@pytest.mark.asyncio
async def test_transport_failure():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = MondayClient("https://api.monday.test/v2", "t", "1", transport=httpx.MockTransport(handler))
    with pytest.raises(TransportError, match="upstream unavailable"):
        await client.fetch_board()


@pytest.mark.asyncio
async def test_timeout_is_upstream_unavailable():
    def handler(request):
        raise httpx.ReadTimeout("too slow", request=request)

    client = MondayClient("https://api.monday.test/v2", "t", "1", transport=httpx.MockTransport(handler))
    with pytest.raises(TransportError, match="upstream unavailable"):
        await client.fetch_board()


@pytest.mark.asyncio
async def test_missing_credentials(board_api):
    with pytest.raises(ConfigurationError):
        await board_api.client(token="").fetch_board()
    assert board_api.requests == []


def test_unknown_query_variant():
    with pytest.raises(ConfigurationError):
        MondayClient("https://api.monday.test/v2", "t", "1", query_variant="pulses")
