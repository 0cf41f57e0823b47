from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from taskquest.errors import QuoteFetchError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchedQuote:
    text: str
    author: str
    category: Optional[str] = None
    # False for the fallback shown when the API is unavailable.
    pinnable: bool = True


FALLBACK_QUOTE = FetchedQuote(text="Unable to load quote", author="System", pinnable=False)


class QuoteClient:
    def __init__(
        self,
        *,
        url: str,
        api_key: Optional[str] = None,
        timeout_seconds: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.url = url
        self.api_key = api_key
        self.timeout_seconds = float(timeout_seconds)

        self._session = session or requests.Session()

    def _build_headers(self) -> Dict[str, str]:
        headers: Dict[str, str] = {"Accept": "application/json"}
        if self.api_key:
            headers["X-Api-Key"] = self.api_key
        return headers

    def fetch_random(self) -> FetchedQuote:
        try:
            resp = self._session.get(self.url, headers=self._build_headers(), timeout=self.timeout_seconds)
        except requests.RequestException as exc:
            logger.warning("Quote request failed: %s", exc)
            raise QuoteFetchError(f"Quote request failed: {exc}") from exc

        if not 200 <= int(resp.status_code) < 300:
            logger.warning("Quote API returned HTTP %s", resp.status_code)
            raise QuoteFetchError(f"Quote API returned HTTP {resp.status_code}")

        try:
            payload: Any = resp.json()
        except ValueError as exc:
            raise QuoteFetchError("Quote API returned invalid JSON") from exc

        if not isinstance(payload, list) or not payload or not isinstance(payload[0], dict):
            raise QuoteFetchError("Quote API returned no quotes")
        first = payload[0]
        text = first.get("quote")
        author = first.get("author")
        if not text or not author:
            raise QuoteFetchError("Quote API response is missing quote or author")
        return FetchedQuote(text=str(text), author=str(author), category=first.get("category"))

    def fetch_or_fallback(self) -> FetchedQuote:
        try:
            return self.fetch_random()
        except QuoteFetchError:
            return FALLBACK_QUOTE
