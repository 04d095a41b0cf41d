"""
Progression API client.

This module handles the only network boundary of the package: the
GET /promotions/{eventId}/students endpoint of the Zone01 progression API.
"""

import logging
import urllib.parse
from typing import Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..config import HTTP_BACKOFF, HTTP_RETRIES, HTTP_TIMEOUT, ZONE01_API_BASE
from .parser import ProgressionParser

logger = logging.getLogger(__name__)


class ProgressionAPIError(Exception):
    """The progression API was unreachable or answered with an error."""


def create_retry_session(retries: int = HTTP_RETRIES,
                         backoff: float = HTTP_BACKOFF) -> requests.Session:
    """Session that retries idempotent GETs on throttling and server errors."""
    session = requests.Session()
    retry = Retry(
        total=retries,
        backoff_factor=backoff,
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=["GET"],
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    session.headers.update({"Accept": "application/json"})
    return session


class ProgressionCache:
    """
    Raw progress arrays keyed by promotion, for one logical run.

    A resync, an import or a report creates its own cache and drops it at
    the end; there is no expiry and nothing is shared between runs.
    """

    def __init__(self):
        self._data = {}

    def get(self, promo_id: str) -> Optional[list]:
        return self._data.get(str(promo_id))

    def set(self, promo_id: str, progress: list):
        self._data[str(promo_id)] = progress

    def clear(self, promo_id: Optional[str] = None):
        if promo_id is None:
            self._data.clear()
        else:
            self._data.pop(str(promo_id), None)

    def __contains__(self, promo_id) -> bool:
        return str(promo_id) in self._data


class ProgressionClient:
    """
    Fetches promotion progressions from the external API.

    The API is the source of truth for students, projects and groups. Only
    audit data is stored locally.

    Usage:
        client = ProgressionClient()
        raw = client.fetch_raw_progress("303")
        entries = client.fetch_promotion_progressions("303")
    """

    def __init__(self, base_url: str = ZONE01_API_BASE,
                 session: Optional[requests.Session] = None,
                 cache: Optional[ProgressionCache] = None,
                 timeout: int = HTTP_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.session = session or create_retry_session()
        self.cache = cache
        self.timeout = timeout
        self.parser = ProgressionParser()

    def _url(self, promo_id: str) -> str:
        return f"{self.base_url}/promotions/{urllib.parse.quote(str(promo_id), safe='')}/students"

    def fetch_raw_progress(self, promo_id: str) -> list:
        """
        Raw `progress` array of a promotion.

        Raises:
            ProgressionAPIError: on transport failure, non-2xx status or a
                payload that is not the expected JSON object
        """
        if self.cache is not None and promo_id in self.cache:
            return self.cache.get(promo_id)

        url = self._url(promo_id)
        logger.debug("GET %s", url)
        try:
            resp = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise ProgressionAPIError(f"Zone01 API unreachable for {promo_id}: {e}") from e

        if not resp.ok:
            raise ProgressionAPIError(
                f"Zone01 API error for {promo_id}: {resp.status_code} {resp.reason}"
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise ProgressionAPIError(f"Zone01 API returned invalid JSON for {promo_id}") from e
        if not isinstance(data, dict):
            raise ProgressionAPIError(f"Zone01 API returned an unexpected payload for {promo_id}")

        progress = data.get("progress") or []
        logger.info("Fetched %d progression entries for promotion %s", len(progress), promo_id)

        if self.cache is not None:
            self.cache.set(promo_id, progress)
        return progress

    def fetch_promotion_progressions(self, promo_id: str) -> list:
        """Parsed ProgressionEntry list; malformed entries are skipped."""
        return self.parser.parse(self.fetch_raw_progress(promo_id))
