from enum import Enum


class ErrorKind(str, Enum):
    INVALID_CHANNEL_URL = "invalid_channel_url"
    INVALID_REQUEST = "invalid_request"
    CHANNEL_LOOKUP = "channel_lookup_failed"
    CHANNEL_NOT_FOUND = "channel_not_found"
    QUOTA_OR_AUTH = "youtube_quota_or_auth"
    PROVIDER = "youtube_provider_error"
    PROCESSING = "processing_failed"


# Kinds the resolver may swallow while trying the next URL pattern.
RECOVERABLE_SEARCH_KINDS = frozenset({ErrorKind.PROVIDER, ErrorKind.QUOTA_OR_AUTH})

MESSAGES: dict[ErrorKind, dict[str, str]] = {
    ErrorKind.INVALID_CHANNEL_URL: {
        "ko": "유효하지 않은 YouTube 채널 URL입니다.",
        "en": "Invalid YouTube channel URL.",
    },
    ErrorKind.INVALID_REQUEST: {
        "ko": "잘못된 요청입니다.",
        "en": "Invalid request.",
    },
    ErrorKind.CHANNEL_LOOKUP: {
        "ko": "채널 URL을 처리하는데 실패했습니다.",
        "en": "Could not resolve that channel URL.",
    },
    ErrorKind.CHANNEL_NOT_FOUND: {
        "ko": "채널을 찾을 수 없습니다.",
        "en": "Channel not found.",
    },
    ErrorKind.QUOTA_OR_AUTH: {
        "ko": "YouTube API 키가 유효하지 않거나 할당량이 초과되었습니다.",
        "en": "The YouTube API key is invalid or its quota is exhausted.",
    },
    ErrorKind.PROVIDER: {
        "ko": "채널 정보를 가져오는데 실패했습니다",
        "en": "Could not fetch YouTube data right now",
    },
    ErrorKind.PROCESSING: {
        "ko": "동영상 목록을 가져오는데 실패했습니다",
        "en": "Could not fetch the recent video list",
    },
}

DEFAULT_LANGUAGE = "en"


class IncomeCalculatorError(Exception):
    """Base error. ``kind`` drives both HTTP status and control flow."""

    kind = ErrorKind.PROCESSING
    status_code = 500

    def __init__(self, detail: str | None = None):
        self.detail = detail
        super().__init__(self.message)

    @property
    def message(self) -> str:
        base = MESSAGES[self.kind][DEFAULT_LANGUAGE]
        if self.detail:
            return f"{base}: {self.detail}"
        return base


class InvalidChannelUrlError(IncomeCalculatorError):
    kind = ErrorKind.INVALID_CHANNEL_URL
    status_code = 400


class InvalidRequestError(IncomeCalculatorError):
    kind = ErrorKind.INVALID_REQUEST
    status_code = 400


class ChannelLookupError(IncomeCalculatorError):
    kind = ErrorKind.CHANNEL_LOOKUP
    status_code = 404


class ChannelNotFoundError(IncomeCalculatorError):
    kind = ErrorKind.CHANNEL_NOT_FOUND
    status_code = 404


class ProviderError(IncomeCalculatorError):
    kind = ErrorKind.PROVIDER
    status_code = 502


class QuotaOrAuthError(ProviderError):
    kind = ErrorKind.QUOTA_OR_AUTH
    status_code = 403


class ProcessingError(IncomeCalculatorError):
    kind = ErrorKind.PROCESSING
    status_code = 502


def localized_message(exc: IncomeCalculatorError, language: str | None) -> str:
    lang = (language or DEFAULT_LANGUAGE).lower().split("-")[0]
    table = MESSAGES[exc.kind]
    base = table.get(lang) or table[DEFAULT_LANGUAGE]
    if exc.detail:
        return f"{base}: {exc.detail}"
    return base
