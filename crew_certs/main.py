from contextlib import asynccontextmanager
from datetime import datetime, UTC
from pathlib import Path
import logging
from fastapi import FastAPI, Request
from starlette.exceptions import HTTPException
from fastapi.staticfiles import StaticFiles
from fastapi.responses import FileResponse, JSONResponse
from starlette.middleware.cors import CORSMiddleware
from crew_certs.core.config import get_settings
from crew_certs.core.errors import BoardClientError, RequestValidationFailed
from crew_certs.core.logging import configure_logging
from crew_certs.api.rest import router as api_router

settings = get_settings()
configure_logging(settings.log_level, settings.app_name)
logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "static"


@asynccontextmanager
async def lifespan(_: FastAPI):
    logger.info(
        "certificate tracker starting",
        extra={
            "environment": settings.environment,
            "port": settings.port,
            "board_id": settings.monday_board_id,
            "query_variant": settings.monday_query_variant,
        },
    )
    if not settings.monday_api_token or not settings.monday_board_id:
        logger.warning("MONDAY_API_TOKEN or MONDAY_BOARD_ID not set; board requests will fail")
    yield


app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)

if settings.allowed_origins():
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")
app.include_router(api_router)


def _error_message(exc: Exception) -> str:
    return str(exc) if get_settings().is_development else "Something went wrong"


@app.exception_handler(RequestValidationFailed)
async def validation_exception_handler(_: Request, exc: RequestValidationFailed):
    return JSONResponse({"success": False, "error": exc.message}, status_code=400)


@app.exception_handler(BoardClientError)
async def board_exception_handler(request: Request, exc: BoardClientError):
    logger.error(
        "board request aborted",
        extra={"path": request.url.path, "error_type": type(exc).__name__, "error": str(exc)},
    )
    return JSONResponse(
        {"success": False, "error": "Failed to fetch certificates", "message": _error_message(exc)},
        status_code=500,
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(_: Request, exc: HTTPException):
    return JSONResponse({"success": False, "error": exc.detail}, status_code=exc.status_code)


@app.exception_handler(Exception)
async def unhandled_exception_handler(_: Request, exc: Exception):
    logger.exception("unhandled error")
    return JSONResponse(
        {"success": False, "error": "Internal server error", "message": _error_message(exc)},
        status_code=500,
    )


@app.get("/api/health")
def health():
    return {
        "success": True,
        "message": "Certificate Tracker API is running",
        "timestamp": datetime.now(UTC).isoformat(),
        "version": settings.version,
    }


@app.get("/{full_path:path}", include_in_schema=False)
def frontend(full_path: str):
    if full_path == "api" or full_path.startswith("api/"):
        return JSONResponse({"success": False, "error": "API endpoint not found"}, status_code=404)
    return FileResponse(STATIC_DIR / "index.html")


def run() -> None:
    import uvicorn

    uvicorn.run("crew_certs.main:app", host=settings.host, port=settings.port)
