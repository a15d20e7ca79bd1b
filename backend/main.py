import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.app.config import load_settings
from backend.app.models import CalculateRequest
from backend.app.services.cache import TTLCache
from backend.app.services.errors import IncomeCalculatorError, InvalidRequestError, localized_message
from backend.app.services.income import IncomeCalculator
from backend.app.services.youtube_client import YouTubeClient


# ---------------------------
# App setup
# ---------------------------

settings = load_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("backend.main")

DEFAULT_LANGUAGE = "ko"

income_cache = TTLCache(default_ttl=settings.cache_ttl_seconds)
youtube_client = YouTubeClient(
    settings.youtube_api_key,
    base_url=settings.youtube_api_base_url,
    timeout=settings.request_timeout_seconds,
)
calculator = IncomeCalculator(youtube_client, income_cache, ttl_seconds=settings.cache_ttl_seconds)

app = FastAPI()

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)


def request_language(request: Request) -> str:
    return getattr(request.state, "language", None) or DEFAULT_LANGUAGE


def error_response(request: Request, exc: IncomeCalculatorError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": localized_message(exc, request_language(request)),
            "error_code": exc.kind.value,
        },
    )


@app.exception_handler(IncomeCalculatorError)
async def income_calculator_error_handler(request: Request, exc: IncomeCalculatorError):
    logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
    return error_response(request, exc)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body") or "body"
        problems.append(f"{location}: {error.get('msg', 'invalid')}")
    logger.warning("%s %s rejected: %s", request.method, request.url.path, problems)
    return error_response(request, InvalidRequestError("; ".join(problems)))


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    message = "서버 에러가 발생했습니다." if request_language(request) == "ko" else "Internal server error."
    return JSONResponse(status_code=500, content={"success": False, "error": message})


# ---------------------------
# Routes
# ---------------------------

@app.get("/health")
def health():
    return {"ok": True}


@app.post("/api/youtube/calculate")
def calculate_income(payload: CalculateRequest, request: Request):
    request.state.language = payload.language or DEFAULT_LANGUAGE
    channel_url = (payload.channelUrl or "").strip()
    if not channel_url:
        raise InvalidRequestError("channelUrl is required")

    result = calculator.calculate_channel_income(channel_url, request.state.language)
    return {"success": True, "data": result}


@app.get("/api/youtube/rankings")
def channel_rankings(request: Request, sort: str | None = None, limit: str | None = None):
    # raw strings; parsing and clamping happen in get_channel_rankings
    rankings = calculator.get_channel_rankings({"sort": sort, "limit": limit})
    return {"success": True, "data": rankings}
