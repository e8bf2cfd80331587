from functools import lru_cache
from pathlib import Path
import json
import logging
from crew_certs.core.config import Settings, get_settings
from crew_certs.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

# Subjects whose expiry lives on a board the API does not resolve for us.
DEFAULT_SUBJECT_EXPIRY_DATES = {
    "SMS": "Wed, Dec 29, 2027",
    "TAWS": "Sun, Aug 3, 2025",
    "WINDSHEAR": "Mon, Dec 15, 2025",
}


def _normalize(mapping: object, source: str) -> dict[str, str]:
    if not isinstance(mapping, dict):
        raise ConfigurationError(f"Subject expiry table from {source} must be a JSON object")
    return {str(k).strip().upper(): str(v) for k, v in mapping.items() if str(k).strip()}


def _load_json(text: str, source: str) -> dict[str, str]:
    try:
        return _normalize(json.loads(text), source)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid subject expiry table in {source}: {exc}") from exc


def load_expiry_table(settings: Settings) -> dict[str, str]:
    table = _normalize(DEFAULT_SUBJECT_EXPIRY_DATES, "defaults")
    if settings.subject_expiry_file:
        path = Path(settings.subject_expiry_file)
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigurationError(f"Cannot read subject expiry file {path}: {exc}") from exc
        table.update(_load_json(content, str(path)))
    if settings.subject_expiry_dates.strip():
        table.update(_load_json(settings.subject_expiry_dates, "SUBJECT_EXPIRY_DATES"))
    logger.info("subject expiry table loaded", extra={"subjects": sorted(table)})
    return table


def lookup_expiry(table: dict[str, str], subject_title: str) -> str | None:
    return table.get(subject_title.strip().upper())


@lru_cache
def get_expiry_table() -> dict[str, str]:
    return load_expiry_table(get_settings())
