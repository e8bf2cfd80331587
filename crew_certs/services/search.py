from datetime import date
import logging
from crew_certs.models import BoardSnapshot
from crew_certs.schemas.api import Certificate
from crew_certs.services.certifications import normalize_item
from crew_certs.services.monday import MondayClient

logger = logging.getLogger(__name__)


def match_certificates(
    snapshot: BoardSnapshot,
    term: str,
    expiry_table: dict[str, str] | None = None,
    today: date | None = None,
    locale: str = "id",
) -> list[Certificate]:
    needle = term.lower()
    results: list[Certificate] = []
    for identity, item in snapshot.owned_items():
        if needle not in identity.lower():
            continue
        targets = item.subitems or [item]
        for target in targets:
            results.append(normalize_item(target, identity, expiry_table, today, locale))
    return results


async def search_certificates(
    client: MondayClient,
    term: str,
    expiry_table: dict[str, str] | None = None,
    today: date | None = None,
    locale: str = "id",
) -> list[Certificate]:
    snapshot = await client.fetch_snapshot()
    results = match_certificates(snapshot, term, expiry_table, today, locale)
    logger.info(
        "certificate search",
        extra={"term": term, "shape": snapshot.shape.value, "count": len(results)},
    )
    return results
