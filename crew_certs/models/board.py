from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator


class BoardShape(str, Enum):
    GROUPS = "groups"
    SUBITEMS = "subitems"
    ITEM_GROUPS = "item_groups"
    EMPTY = "empty"


@dataclass(frozen=True)
class RawColumn:
    id: str
    title: str = ""
    type: str = ""
    value: str | None = None
    text: str | None = None


@dataclass
class RawItem:
    id: str
    name: str
    group_title: str | None = None
    columns: list[RawColumn] = field(default_factory=list)
    subitems: list["RawItem"] = field(default_factory=list)


@dataclass
class BoardGroup:
    id: str
    title: str
    items: list[RawItem] = field(default_factory=list)


@dataclass
class BoardSnapshot:
    """One fetch of the board, resolved to the shape upstream actually returned.

    ``GROUPS`` boards carry their items inside ``groups``; the two
    ``items_page`` shapes carry a flat ``items`` list whose entries may hold
    subitems and/or a group reference.
    """

    shape: BoardShape
    name: str = ""
    columns: list[RawColumn] = field(default_factory=list)
    groups: list[BoardGroup] = field(default_factory=list)
    items: list[RawItem] = field(default_factory=list)

    def owned_items(self) -> Iterator[tuple[str, RawItem]]:
        """Yield ``(group identity, item)`` pairs in board order."""
        if self.shape == BoardShape.GROUPS:
            for group in self.groups:
                for item in group.items:
                    yield group.title, item
            return
        for item in self.items:
            yield item.group_title or item.name, item

    def item_count(self) -> int:
        if self.shape == BoardShape.GROUPS:
            return sum(len(g.items) for g in self.groups)
        return len(self.items)
