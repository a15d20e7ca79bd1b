import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

YOUTUBE_API_BASE_URL = "https://www.googleapis.com/youtube/v3"
DEFAULT_CORS_ORIGIN = "http://localhost:5173"
INCOME_CACHE_TTL_SECONDS = 6 * 60 * 60  # 6 hours

# CPM ranges by country/category. Reserved: the estimator uses flat RPM bands.
CPM_RANGES = {
    "KR": {
        "min": 0.5,
        "max": 4.0,
        "gaming": {"min": 1.0, "max": 5.0},
        "education": {"min": 2.0, "max": 6.0},
        "entertainment": {"min": 1.5, "max": 4.5},
    }
}


class Settings(BaseModel):
    youtube_api_key: str
    youtube_api_base_url: str = YOUTUBE_API_BASE_URL
    request_timeout_seconds: int = 15
    cache_ttl_seconds: int = INCOME_CACHE_TTL_SECONDS
    cors_origins: list[str] = Field(default_factory=lambda: [DEFAULT_CORS_ORIGIN])
    cors_credentials: bool = True
    log_level: str = "INFO"


def parse_cors_origins(raw: str | None) -> tuple[list[str], bool]:
    raw = (raw or "").strip()
    if not raw:
        return [DEFAULT_CORS_ORIGIN], True
    if raw == "*":
        return ["*"], False
    origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    if not origins:
        return [DEFAULT_CORS_ORIGIN], True
    return origins, True


def load_settings() -> Settings:
    load_dotenv()

    api_key = (os.getenv("YOUTUBE_API_KEY") or "").strip()
    if not api_key:
        raise RuntimeError("Missing YOUTUBE_API_KEY in backend/.env")

    cors_origins, cors_credentials = parse_cors_origins(os.getenv("CORS_ALLOWED_ORIGINS"))
    return Settings(
        youtube_api_key=api_key,
        youtube_api_base_url=os.getenv("YOUTUBE_API_BASE_URL") or YOUTUBE_API_BASE_URL,
        request_timeout_seconds=int(os.getenv("YOUTUBE_REQUEST_TIMEOUT_SECONDS") or 15),
        cache_ttl_seconds=int(os.getenv("INCOME_CACHE_TTL_SECONDS") or INCOME_CACHE_TTL_SECONDS),
        cors_origins=cors_origins,
        cors_credentials=cors_credentials,
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )
