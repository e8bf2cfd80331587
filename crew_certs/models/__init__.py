from crew_certs.models.board import (
    BoardShape,
    RawColumn,
    RawItem,
    BoardGroup,
    BoardSnapshot,
)

__all__ = [
    "BoardShape",
    "RawColumn",
    "RawItem",
    "BoardGroup",
    "BoardSnapshot",
]
