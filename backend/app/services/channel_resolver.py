"""
Channel URL -> channel ID resolution.

Only /channel/<id> URLs carry the ID directly. @handle and /c/<name> URLs
need a best-effort reverse lookup through channel search, since search is
not guaranteed to return the exact channel first.
"""

import logging
import re
from urllib.parse import unquote

from backend.app.services.errors import (
    RECOVERABLE_SEARCH_KINDS,
    ChannelLookupError,
    IncomeCalculatorError,
    InvalidChannelUrlError,
)
from backend.app.services.youtube_client import CHANNEL_SEARCH_MAX_RESULTS

logger = logging.getLogger(__name__)

CHANNEL_ID_URL_RE = re.compile(r"youtube\.com/channel/([^/?#]+)", flags=re.IGNORECASE)
HANDLE_URL_RE = re.compile(r"youtube\.com/@([^/?#]+)", flags=re.IGNORECASE)
CUSTOM_URL_RE = re.compile(r"youtube\.com/c/([^/?#]+)", flags=re.IGNORECASE)

# Checked in order. The flag marks patterns that need a search lookup.
URL_PATTERNS = (
    (CHANNEL_ID_URL_RE, False),
    (HANDLE_URL_RE, True),
    (CUSTOM_URL_RE, True),
)


def pick_candidate(candidates, name: str):
    """Exact title (or @title) match wins, otherwise the first search result."""
    if not candidates:
        return None
    for candidate in candidates:
        if candidate.title == name or candidate.title == f"@{name}":
            return candidate
    return candidates[0]


class ChannelResolver:
    def __init__(self, client):
        self.client = client

    def resolve(self, channel_url: str) -> str:
        decoded = unquote((channel_url or "").strip())
        if not decoded:
            raise InvalidChannelUrlError()

        looked_up = False
        for pattern, needs_lookup in URL_PATTERNS:
            match = pattern.search(decoded)
            if not match:
                continue
            if not needs_lookup:
                return match.group(1)

            looked_up = True
            channel_id = self._lookup(match.group(1))
            if channel_id:
                return channel_id

        if looked_up:
            raise ChannelLookupError(decoded)
        raise InvalidChannelUrlError()

    def _lookup(self, name: str) -> str | None:
        logger.info("Searching channel by name: %s", name)
        try:
            candidates = self.client.search_channels(name, max_results=CHANNEL_SEARCH_MAX_RESULTS)
        except IncomeCalculatorError as exc:
            if exc.kind not in RECOVERABLE_SEARCH_KINDS:
                raise
            logger.warning("Channel search failed for %s: %s", name, exc)
            return None

        picked = pick_candidate(candidates, name)
        if picked is None:
            return None
        if picked.title in (name, f"@{name}"):
            logger.info("Exact channel match for %s", name)
        else:
            logger.info("No exact match for %s, using closest channel %s", name, picked.title)
        return picked.channel_id
