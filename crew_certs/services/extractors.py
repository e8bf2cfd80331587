"""Pull normalized values out of raw board columns.

A column carries two views of the same datum: ``text``, pre-rendered by the
board, and ``value``, usually a JSON document but sometimes a bare string.
Either may be missing or hold the ``"-"`` placeholder. Nothing in here raises
on malformed input; a bad column degrades to ``"-"``, ``"UNKNOWN"`` or the
original string.
"""
from datetime import date, datetime
import logging
import re
from crew_certs.models import RawColumn
from crew_certs.services.columns import decode_value, is_linked

logger = logging.getLogger(__name__)

PLACEHOLDER = "-"
NO_LINK = "#"

STATUS_BY_INDEX = {0: "VALID", 1: "EXPIRED", 2: "PENDING", 3: "INVALID"}

DATE_FORMATS = (
    "%a, %b %d, %Y",
    "%a, %B %d, %Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%Y-%m-%d",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d %H:%M:%S",
)

MONTH_NAMES = {
    "id": (
        "Januari", "Februari", "Maret", "April", "Mei", "Juni",
        "Juli", "Agustus", "September", "Oktober", "November", "Desember",
    ),
    "en": (
        "January", "February", "March", "April", "May", "June",
        "July", "August", "September", "October", "November", "December",
    ),
}

HOSTED_DOCUMENT_RE = re.compile(
    r"https://(?:drive\.google\.com|docs\.google\.com|(?:www\.)?dropbox\.com|"
    r"onedrive\.live\.com|1drv\.ms|[\w-]+\.sharepoint\.com)/\S+"
)


def _blank(raw: str | None) -> bool:
    return raw is None or raw.strip() == "" or raw == PLACEHOLDER


def parse_date(raw: str | None) -> date | None:
    if _blank(raw):
        return None
    candidate = raw.strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(candidate, fmt).date()
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(candidate).date()
    except ValueError:
        return None


def format_date(raw: str | None, locale: str = "id") -> str:
    """Render a board date as ``<day> <month name> <year>``.

    Display only. The formatted string is not guaranteed to parse back, so
    callers comparing dates must keep the raw string around.
    """
    if _blank(raw):
        return PLACEHOLDER
    parsed = parse_date(raw)
    if parsed is None:
        return raw
    months = MONTH_NAMES.get(locale, MONTH_NAMES["id"])
    return f"{parsed.day} {months[parsed.month - 1]} {parsed.year}"


def extract_raw_date(column: RawColumn) -> str:
    """Return the unformatted date string a column holds, or ``"-"``."""
    if is_linked(column):
        ok, parsed = decode_value(column.value)
        if ok and isinstance(parsed, dict):
            mirrored = parsed.get("mirrored_value")
            if isinstance(mirrored, str) and mirrored:
                return mirrored
            if "linkedPulseIds" in parsed and not parsed["linkedPulseIds"]:
                return PLACEHOLDER
        elif column.value not in (None, "null"):
            logger.warning(
                "linked column value is not a JSON object",
                extra={"column_id": column.id, "column_title": column.title},
            )
        if _blank(column.text):
            return PLACEHOLDER

    if not _blank(column.text):
        return column.text

    ok, parsed = decode_value(column.value)
    if ok:
        if isinstance(parsed, dict):
            if parsed.get("date"):
                return str(parsed["date"])
            text = parsed.get("text")
            if text and text != PLACEHOLDER:
                return str(text)
        elif isinstance(parsed, str) and not _blank(parsed):
            return parsed
        return PLACEHOLDER

    if not _blank(column.value):
        return column.value
    return PLACEHOLDER


def extract_date(column: RawColumn, locale: str = "id") -> str:
    return format_date(extract_raw_date(column), locale)


def extract_status(column: RawColumn) -> str:
    if not _blank(column.text):
        return column.text.upper()

    ok, parsed = decode_value(column.value)
    if ok:
        if isinstance(parsed, dict):
            label = parsed.get("label") or parsed.get("text")
            if isinstance(label, str) and label.strip():
                return label.upper()
            if parsed.get("index") is not None:
                try:
                    return STATUS_BY_INDEX.get(int(parsed["index"]), "UNKNOWN")
                except (TypeError, ValueError):
                    return "UNKNOWN"
        return "VALID"

    if not _blank(column.value):
        return column.value.upper()
    return "VALID"


def clean_url(raw: str | None) -> str:
    if _blank(raw) or raw == NO_LINK:
        return NO_LINK
    # hosted links sometimes arrive wrapped in a localhost prefix
    match = HOSTED_DOCUMENT_RE.search(raw)
    if match:
        return match.group(0)
    if raw.startswith(("http://", "https://")):
        return raw
    return NO_LINK


def extract_link(column: RawColumn) -> str:
    raw = ""
    if not _blank(column.text):
        raw = column.text
    else:
        ok, parsed = decode_value(column.value)
        if ok:
            if isinstance(parsed, dict) and isinstance(parsed.get("url"), str):
                raw = parsed["url"]
        elif not _blank(column.value):
            raw = column.value
    return clean_url(raw)
