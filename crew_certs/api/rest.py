from fastapi import APIRouter, Depends, Request
from crew_certs.core.config import Settings, get_settings
from crew_certs.core.errors import RequestValidationFailed
from crew_certs.schemas.api import SearchResponse
from crew_certs.services.expiry_table import get_expiry_table
from crew_certs.services.monday import MondayClient, get_board_client
from crew_certs.services.search import search_certificates

router = APIRouter(prefix="/api")


async def _search_payload(
    term: str,
    client: MondayClient,
    expiry_table: dict[str, str],
    settings: Settings,
    name: str | None = None,
) -> dict:
    results = await search_certificates(client, term, expiry_table, locale=settings.date_locale)
    response = SearchResponse(search_term=term, name=name, results=results, count=len(results))
    return {"success": True, "data": response.model_dump(by_alias=True, exclude_none=True)}


@router.get("/certificates")
async def api_certificates(
    name: str = "",
    client: MondayClient = Depends(get_board_client),
    expiry_table: dict[str, str] = Depends(get_expiry_table),
    settings: Settings = Depends(get_settings),
):
    if name.strip():
        return await _search_payload(name.strip(), client, expiry_table, settings, name=name)
    data = await client.fetch_board()
    return {"success": True, "data": data}


@router.post("/certificates/search")
async def api_search_certificates(
    request: Request,
    client: MondayClient = Depends(get_board_client),
    expiry_table: dict[str, str] = Depends(get_expiry_table),
    settings: Settings = Depends(get_settings),
):
    try:
        payload = await request.json()
    except ValueError:
        payload = None
    term = payload.get("searchTerm") if isinstance(payload, dict) else None
    if not isinstance(term, str) or not term.strip():
        raise RequestValidationFailed("searchTerm is required and must be a string")
    return await _search_payload(term.strip(), client, expiry_table, settings)


@router.get("/certificates/{name}")
async def api_certificates_for_person(
    name: str,
    client: MondayClient = Depends(get_board_client),
    expiry_table: dict[str, str] = Depends(get_expiry_table),
    settings: Settings = Depends(get_settings),
):
    if not name.strip():
        raise RequestValidationFailed("name is required")
    return await _search_payload(name.strip(), client, expiry_table, settings, name=name)
