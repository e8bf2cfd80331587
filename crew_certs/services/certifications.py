from datetime import date
import logging
from crew_certs.models import RawItem
from crew_certs.schemas.api import Certificate
from crew_certs.services.columns import ColumnRole, classify
from crew_certs.services.expiry_table import lookup_expiry
from crew_certs.services.extractors import (
    PLACEHOLDER,
    extract_link,
    extract_raw_date,
    extract_status,
    format_date,
    parse_date,
)

logger = logging.getLogger(__name__)

DEFAULT_STATUS = "VALID"


def status_for_expiry(raw_expiry: str, today: date | None = None) -> str:
    """Compare by calendar day: a certificate expiring today is still VALID.

    This counts the expiry day itself as valid, unlike a comparison of the
    expiry midnight against the current time.
    """
    expiry_date = parse_date(raw_expiry)
    if expiry_date is None:
        return "UNKNOWN"
    today = today or date.today()
    if expiry_date < today:
        return "EXPIRED"
    return "VALID"


def is_future_date(raw: str, today: date | None = None) -> bool:
    parsed = parse_date(raw)
    if parsed is None:
        return False
    return parsed > (today or date.today())


def normalize_item(
    item: RawItem,
    owner_name: str,
    expiry_table: dict[str, str] | None = None,
    today: date | None = None,
    locale: str = "id",
) -> Certificate:
    """Turn one board item into a certificate record.

    Columns are mapped by title. When no expiry column yields a date, the
    first future-dated column on the item is taken as the expiry
    (``derived_from="heuristic"``), then the subject table
    (``derived_from="table"``). A status still reading VALID, whether by
    default or from a blank or "Valid" status column, is recomputed from the
    expiry date.
    """
    today = today or date.today()
    name = owner_name
    subject_title = item.name or PLACEHOLDER
    generic_date = PLACEHOLDER
    raw_expiry = PLACEHOLDER
    derived_from = "none"
    status = DEFAULT_STATUS
    link = "#"

    for column in item.columns:
        role = classify(column.title)
        logger.debug(
            "column_processed",
            extra={
                "item_id": item.id,
                "column_id": column.id,
                "column_title": column.title,
                "column_type": column.type,
                "role": role.value,
                "value": column.value,
                "text": column.text,
            },
        )
        if role == ColumnRole.EXPIRY_DATE:
            extracted = extract_raw_date(column)
            if extracted != PLACEHOLDER:
                raw_expiry = extracted
                derived_from = "column"
        elif role == ColumnRole.STATUS:
            status = extract_status(column)
        elif role == ColumnRole.CERTIFICATE_LINK:
            link = extract_link(column)
        elif role == ColumnRole.OWNER_NAME:
            if column.text and column.text.strip():
                name = column.text.strip()
        elif role == ColumnRole.GENERIC_DATE and generic_date == PLACEHOLDER:
            generic_date = format_date(extract_raw_date(column), locale)

    if raw_expiry == PLACEHOLDER:
        for column in item.columns:
            candidate = extract_raw_date(column)
            if candidate != PLACEHOLDER and is_future_date(candidate, today):
                raw_expiry = candidate
                derived_from = "heuristic"
                logger.warning(
                    "expiry date guessed from future-dated column",
                    extra={"item_id": item.id, "column_title": column.title, "date": candidate},
                )
                break

    if raw_expiry == PLACEHOLDER:
        fallback = lookup_expiry(expiry_table or {}, subject_title)
        if fallback:
            raw_expiry = fallback
            derived_from = "table"
            logger.debug(
                "expiry date taken from subject table",
                extra={"item_id": item.id, "subject": subject_title, "date": fallback},
            )

    if status == DEFAULT_STATUS and raw_expiry != PLACEHOLDER:
        status = status_for_expiry(raw_expiry, today)

    return Certificate(
        id=str(item.id),
        name=name,
        subject_title=subject_title,
        date=generic_date,
        expired_date=format_date(raw_expiry, locale),
        status=status,
        certificate_link=link,
        derived_from=derived_from,
    )
