from enum import Enum
import json
from crew_certs.models import RawColumn


class ColumnRole(str, Enum):
    EXPIRY_DATE = "expiry_date"
    STATUS = "status"
    CERTIFICATE_LINK = "certificate_link"
    OWNER_NAME = "owner_name"
    GENERIC_DATE = "generic_date"
    UNCLASSIFIED = "unclassified"


EXPIRY_KEYWORDS = ("expiry", "expired", "expire", "due", "end")
STATUS_KEYWORDS = ("status", "state", "condition")
LINK_KEYWORDS = ("certificate", "cert", "link", "url", "file")
OWNER_KEYWORDS = ("crew", "tracking", "mandatory", "name")

# checked in this order, first match wins
_ROLE_KEYWORDS = (
    (ColumnRole.EXPIRY_DATE, EXPIRY_KEYWORDS),
    (ColumnRole.STATUS, STATUS_KEYWORDS),
    (ColumnRole.CERTIFICATE_LINK, LINK_KEYWORDS),
    (ColumnRole.OWNER_NAME, OWNER_KEYWORDS),
)

LINKED_TYPES = {"board-relation", "board_relation", "lookup", "mirror"}
LINKED_VALUE_KEYS = ("linkedPulseIds", "changed_at", "mirrored_value")


def _has_keyword(title: str, keywords: tuple[str, ...]) -> bool:
    return any(keyword in title for keyword in keywords)


def classify(title: str | None) -> ColumnRole:
    lowered = (title or "").lower()
    for role, keywords in _ROLE_KEYWORDS:
        if _has_keyword(lowered, keywords):
            return role
    if "date" in lowered:
        return ColumnRole.GENERIC_DATE
    return ColumnRole.UNCLASSIFIED


def decode_value(value: str | None) -> tuple[bool, object]:
    """Decode a column's JSON ``value``; the flag is False when it is not JSON."""
    if value is None:
        return False, None
    try:
        return True, json.loads(value)
    except (TypeError, ValueError):
        return False, None


def is_linked(column: RawColumn) -> bool:
    if (column.type or "").lower() in LINKED_TYPES:
        return True
    ok, parsed = decode_value(column.value)
    if ok and isinstance(parsed, dict):
        return any(key in parsed for key in LINKED_VALUE_KEYS)
    return False
