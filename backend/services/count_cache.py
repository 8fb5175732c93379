# services/count_cache.py
# ============================================================================
# LEADERSHIP COMPANION LANDING API — SIGNUP COUNT CACHE
# ============================================================================
# Best-effort signup count for the "spots left" counter. Served from memory
# for the TTL window, refreshed from the configured source on expiry, and
# falls back to the last known value (or 0) when the source is down.
# ============================================================================

import time
from abc import ABC, abstractmethod
from typing import Callable, Optional

import httpx
import structlog

from config import LandingConfig, get_config
from schemas.landing_models import CountCacheEntry
from storage.google_sheets import GoogleSheetsClient, SCOPE_READ_ONLY

logger = structlog.get_logger(component="count_cache")

DEFAULT_TTL_MS = 60 * 1000
COUNT_RANGE = "Sheet1!A:A"

Clock = Callable[[], float]


def epoch_ms() -> int:
    return int(time.time() * 1000)


# =============================================================================
# COUNT SOURCES
# =============================================================================

class CountSource(ABC):
    """Where a fresh signup count comes from."""

    @abstractmethod
    async def fetch_count(self) -> int:
        pass


class SheetRowCountSource(CountSource):
    """Counts timestamp cells in column A, minus the header row."""

    def __init__(self, client: GoogleSheetsClient, range_name: str = COUNT_RANGE, header_rows: int = 1):
        self.client = client
        self.range_name = range_name
        self.header_rows = header_rows

    async def fetch_count(self) -> int:
        rows = await self.client.count_rows(self.range_name)
        return max(0, rows - self.header_rows)


class EndpointCountSource(CountSource):
    """Delegates counting to a separately hosted endpoint returning {"count": n}."""

    def __init__(
        self,
        url: str,
        timeout_seconds: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    async def fetch_count(self) -> int:
        async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
            response = await client.get(self.url)
            response.raise_for_status()
            data = response.json()

        count = data.get("count") if isinstance(data, dict) else None
        if isinstance(count, bool) or not isinstance(count, (int, float)):
            raise ValueError(f"Count endpoint returned no numeric count: {data!r}")
        return max(0, int(count))


# =============================================================================
# CACHE
# =============================================================================

class CountCache:
    """
    Process-wide TTL cache around a CountSource.

    get_count() never raises. Concurrent refreshes are not coordinated; the
    last one to finish wins.
    """

    def __init__(
        self,
        source: CountSource,
        ttl_ms: int = DEFAULT_TTL_MS,
        clock: Clock = epoch_ms,
        entry: Optional[CountCacheEntry] = None,
    ):
        self.source = source
        self.ttl_ms = ttl_ms
        self.clock = clock
        self.entry = entry

    def is_fresh(self, now_ms: int) -> bool:
        return self.entry is not None and (now_ms - self.entry.fetched_at_epoch_ms) < self.ttl_ms

    async def get_count(self) -> int:
        now = int(self.clock())

        if self.is_fresh(now):
            return self.entry.value

        try:
            value = await self.source.fetch_count()
            self.entry = CountCacheEntry(value=max(0, int(value)), fetched_at_epoch_ms=now)
            logger.info("count_refreshed", count=self.entry.value)
            return self.entry.value
        except Exception as e:
            stale = self.entry.value if self.entry is not None else 0
            logger.warning(
                "count_refresh_failed",
                error=str(e),
                error_type=type(e).__name__,
                served_stale=self.entry is not None,
                count=stale,
            )
            return stale


def build_count_source(config: LandingConfig) -> CountSource:
    """Pick the count source that matches the ledger backend."""
    if config.count_endpoint_url:
        return EndpointCountSource(config.count_endpoint_url, timeout_seconds=config.http_timeout_seconds)

    if config.ledger_backend == "form":
        logger.warning("count_endpoint_missing", ledger_backend="form", fallback="sheets")

    client = GoogleSheetsClient(
        spreadsheet_id=config.google_sheet_id,
        client_email=config.google_client_email,
        private_key=config.google_private_key,
        scopes=(SCOPE_READ_ONLY,),
    )
    return SheetRowCountSource(client)


# Singleton instance
_cache_instance: Optional[CountCache] = None


def get_count_cache() -> CountCache:
    """Get or create the process-wide count cache."""
    global _cache_instance
    if _cache_instance is None:
        config = get_config()
        _cache_instance = CountCache(
            source=build_count_source(config),
            ttl_ms=int(config.count_cache_ttl_seconds * 1000),
        )
    return _cache_instance
