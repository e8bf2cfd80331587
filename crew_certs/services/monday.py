import logging
import httpx
from crew_certs.core.config import Settings, get_settings
from crew_certs.core.errors import ConfigurationError, TransportError, UpstreamError
from crew_certs.models import BoardGroup, BoardShape, BoardSnapshot, RawColumn, RawItem

logger = logging.getLogger(__name__)

_COLUMN_VALUES = """
              column_values {
                id
                value
                text
                column {
                  id
                  title
                  type
                }
              }"""

GROUPS_QUERY = """
query GetBoardGroupsAndItems($boardId: [ID!], $limit: Int!) {
  boards(ids: $boardId) {
    name
    columns { id title type }
    groups {
      id
      title
      items_page(limit: $limit) {
        items {
          id
          name%s
        }
      }
    }
  }
}
""" % _COLUMN_VALUES

SUBITEMS_QUERY = """
query GetBoardItemsWithSubitems($boardId: [ID!], $limit: Int!) {
  boards(ids: $boardId) {
    name
    columns { id title type }
    items_page(limit: $limit) {
      items {
        id
        name%s
        subitems {
          id
          name%s
        }
      }
    }
  }
}
""" % (_COLUMN_VALUES, _COLUMN_VALUES)

ITEM_GROUPS_QUERY = """
query GetBoardItemsWithGroup($boardId: [ID!], $limit: Int!) {
  boards(ids: $boardId) {
    name
    columns { id title type }
    items_page(limit: $limit) {
      items {
        id
        name
        group { id title }%s
      }
    }
  }
}
""" % _COLUMN_VALUES

QUERIES = {
    BoardShape.GROUPS.value: GROUPS_QUERY,
    BoardShape.SUBITEMS.value: SUBITEMS_QUERY,
    BoardShape.ITEM_GROUPS.value: ITEM_GROUPS_QUERY,
}


def _as_text(raw: object) -> str | None:
    if raw is None:
        return None
    return raw if isinstance(raw, str) else str(raw)


def _extract_column(raw: dict, titles: dict[str, RawColumn]) -> RawColumn:
    column_id = str(raw.get("id") or "")
    meta = raw.get("column") or {}
    known = titles.get(column_id)
    return RawColumn(
        id=column_id,
        title=meta.get("title") or (known.title if known else ""),
        type=meta.get("type") or raw.get("type") or (known.type if known else ""),
        value=_as_text(raw.get("value")),
        text=_as_text(raw.get("text")),
    )


def _extract_item(raw: dict, titles: dict[str, RawColumn], group_title: str | None = None) -> RawItem:
    group = raw.get("group") or {}
    return RawItem(
        id=str(raw.get("id") or ""),
        name=raw.get("name") or "",
        group_title=group.get("title") or group_title,
        columns=[_extract_column(c, titles) for c in raw.get("column_values") or []],
        subitems=[_extract_item(s, titles) for s in raw.get("subitems") or []],
    )


def _group_items(raw_group: dict) -> list[dict]:
    # older boards answered with group.items, newer ones with group.items_page.items
    if raw_group.get("items_page"):
        return raw_group["items_page"].get("items") or []
    return raw_group.get("items") or []


def parse_board(data: dict) -> BoardSnapshot:
    """Resolve a raw ``boards`` payload into a snapshot of whichever shape it has."""
    boards = (data or {}).get("boards") or []
    if not boards:
        return BoardSnapshot(shape=BoardShape.EMPTY)
    board = boards[0] or {}

    columns = [
        RawColumn(id=str(c.get("id") or ""), title=c.get("title") or "", type=c.get("type") or "")
        for c in board.get("columns") or []
    ]
    titles = {c.id: c for c in columns}
    name = board.get("name") or ""

    if board.get("groups") is not None and not board.get("items_page"):
        groups = [
            BoardGroup(
                id=str(g.get("id") or ""),
                title=g.get("title") or "",
                items=[_extract_item(i, titles, g.get("title")) for i in _group_items(g)],
            )
            for g in board["groups"]
        ]
        return BoardSnapshot(shape=BoardShape.GROUPS, name=name, columns=columns, groups=groups)

    raw_items = (board.get("items_page") or {}).get("items") or board.get("items") or []
    items = [_extract_item(i, titles) for i in raw_items]
    shape = BoardShape.ITEM_GROUPS
    if any("subitems" in i for i in raw_items):
        shape = BoardShape.SUBITEMS
    return BoardSnapshot(shape=shape, name=name, columns=columns, items=items)


class MondayClient:
    """Reads the certificate board through the monday.com GraphQL API.

    One HTTP request per call; nothing is cached between calls.
    """

    def __init__(
        self,
        api_url: str,
        token: str,
        board_id: str,
        query_variant: str = BoardShape.GROUPS.value,
        page_size: int = 100,
        timeout: float = 30.0,
        api_version: str = "",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if query_variant not in QUERIES:
            raise ConfigurationError(f"Unknown board query variant: {query_variant}")
        self.api_url = api_url
        self.token = token
        self.board_id = board_id
        self.query_variant = query_variant
        self.page_size = page_size
        self.timeout = timeout
        self.api_version = api_version
        self.transport = transport

    @classmethod
    def from_settings(cls, settings: Settings, transport: httpx.AsyncBaseTransport | None = None) -> "MondayClient":
        return cls(
            api_url=settings.monday_api_url,
            token=settings.monday_api_token.strip(),
            board_id=settings.monday_board_id.strip(),
            query_variant=settings.monday_query_variant,
            page_size=settings.monday_page_size,
            timeout=settings.monday_timeout_seconds,
            api_version=settings.monday_api_version.strip(),
            transport=transport,
        )

    def _headers(self) -> dict[str, str]:
        headers = {
            "Authorization": self.token,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self.api_version:
            headers["API-Version"] = self.api_version
        return headers

    def _variables(self) -> dict:
        try:
            board_id: int | str = int(self.board_id)
        except ValueError:
            board_id = self.board_id
        return {"boardId": [board_id], "limit": self.page_size}

    async def execute(self, query: str, variables: dict) -> dict:
        if not self.token or not self.board_id:
            raise ConfigurationError("Board API token or board id missing")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                resp = await client.post(
                    self.api_url,
                    json={"query": query, "variables": variables},
                    headers=self._headers(),
                )
                resp.raise_for_status()
                payload = resp.json()
        except httpx.TimeoutException as exc:
            logger.error("board request timed out", extra={"timeout": self.timeout})
            raise TransportError("upstream unavailable: request timed out") from exc
        except httpx.HTTPStatusError as exc:
            logger.error("board request failed", extra={"status_code": exc.response.status_code})
            raise TransportError(f"HTTP error! status: {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            logger.exception("board request failed")
            raise TransportError(f"upstream unavailable: {exc}") from exc
        except ValueError as exc:
            raise UpstreamError("Board API returned a non-JSON response") from exc

        if not isinstance(payload, dict):
            raise UpstreamError("Unexpected board API payload")
        if payload.get("errors"):
            logger.error("board API returned errors", extra={"errors": payload["errors"]})
            raise UpstreamError(f"Monday.com API error: {payload['errors']}")
        if payload.get("error_message"):
            raise UpstreamError(f"Monday.com API error: {payload['error_message']}")
        data = payload.get("data")
        if not isinstance(data, dict):
            raise UpstreamError("Board API response has no data")
        return data

    async def fetch_board(self) -> dict:
        data = await self.execute(QUERIES[self.query_variant], self._variables())
        boards = data.get("boards") or []
        logger.info(
            "board fetched",
            extra={
                "board_id": self.board_id,
                "board_name": boards[0].get("name") if boards and boards[0] else None,
                "query_variant": self.query_variant,
            },
        )
        return data

    async def fetch_snapshot(self) -> BoardSnapshot:
        snapshot = parse_board(await self.fetch_board())
        logger.info(
            "board snapshot resolved",
            extra={"shape": snapshot.shape.value, "items": snapshot.item_count()},
        )
        return snapshot


def get_board_client() -> MondayClient:
    return MondayClient.from_settings(get_settings())
