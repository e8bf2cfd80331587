from functools import lru_cache
from pydantic import BaseModel
import os
from crew_certs import __version__

DEFAULT_CORS_ORIGINS = "http://localhost:8080,http://localhost:3002,http://127.0.0.1:8080"


class Settings(BaseModel):
    app_name: str = os.getenv("APP_NAME", "Certificate Tracker")
    version: str = __version__
    environment: str = os.getenv("ENVIRONMENT", os.getenv("NODE_ENV", "development"))
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "3002"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    monday_api_url: str = os.getenv("MONDAY_API_URL", "https://api.monday.com/v2")
    monday_api_token: str = os.getenv("MONDAY_API_TOKEN", "")
    monday_board_id: str = os.getenv("MONDAY_BOARD_ID", "")
    monday_api_version: str = os.getenv("MONDAY_API_VERSION", "")
    monday_query_variant: str = os.getenv("MONDAY_QUERY_VARIANT", "groups")
    monday_page_size: int = int(os.getenv("MONDAY_PAGE_SIZE", "100"))
    monday_timeout_seconds: float = float(os.getenv("MONDAY_TIMEOUT_SECONDS", "30"))

    frontend_url: str = os.getenv("FRONTEND_URL", "")
    cors_origins: str = os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)

    date_locale: str = os.getenv("DATE_LOCALE", "id")
    subject_expiry_dates: str = os.getenv("SUBJECT_EXPIRY_DATES", "")
    subject_expiry_file: str = os.getenv("SUBJECT_EXPIRY_FILE", "")

    @property
    def is_development(self) -> bool:
        return self.environment.lower() in ("development", "dev")

    def allowed_origins(self) -> list[str]:
        origins = [x.strip() for x in self.cors_origins.split(",") if x.strip()]
        if self.frontend_url and self.frontend_url not in origins:
            origins.insert(0, self.frontend_url)
        return origins


@lru_cache
def get_settings() -> Settings:
    return Settings()
