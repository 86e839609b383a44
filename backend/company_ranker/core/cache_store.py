"""Per-category company cache with daily reset-boundary freshness.

An entry stays valid until the next daily reset (18:00 Torn City Time by
default) rather than for a fixed TTL. Each category owns one JSON file:

    {"timestamp": <epoch-millis>, "companies": [<Company>, ...]}
"""
import json
import os
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Sequence
from zoneinfo import ZoneInfo

from pydantic import ValidationError

from .logging import get_logger
from ..models.schemas import CacheEntry, Company


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_epoch_millis(moment: datetime) -> int:
    """Convert an aware datetime to integer epoch milliseconds."""
    return int(moment.timestamp() * 1000)


class CacheStore:
    """Key-value store holding the last fetched batch of each category."""

    def __init__(
        self,
        cache_dir: str = "cache",
        file_prefix: str = "companies_",
        reset_hour: int = 18,
        reset_minute: int = 0,
        reset_timezone: str = "UTC",
        clock: Callable[[], datetime] = utc_now
    ):
        """Initialize the cache store.

        Args:
            cache_dir: Directory for cache files
            file_prefix: File name prefix, followed by the category id
            reset_hour: Hour of the daily reset in ``reset_timezone``
            reset_minute: Minute of the daily reset
            reset_timezone: IANA name of the reference time zone
            clock: Returns the current aware datetime
        """
        self.cache_dir = cache_dir
        self.file_prefix = file_prefix
        self.reset_hour = reset_hour
        self.reset_minute = reset_minute
        self.reset_zone = ZoneInfo(reset_timezone)
        self.clock = clock

        os.makedirs(cache_dir, exist_ok=True)

    def _path(self, category_id: int) -> str:
        return os.path.join(self.cache_dir, f"{self.file_prefix}{category_id}.json")

    def last_reset_boundary(self, now: Optional[datetime] = None) -> datetime:
        """Most recent reset instant at or before ``now``.

        Today's reset time, or yesterday's when ``now`` is earlier than today's.
        """
        now = (now or self.clock()).astimezone(self.reset_zone)
        boundary = now.replace(
            hour=self.reset_hour,
            minute=self.reset_minute,
            second=0,
            microsecond=0,
        )
        if now < boundary:
            boundary -= timedelta(days=1)
        return boundary

    def is_fresh(self, entry: CacheEntry, now: Optional[datetime] = None) -> bool:
        """An entry is fresh iff it was captured at or after the last reset."""
        return entry.timestamp >= to_epoch_millis(self.last_reset_boundary(now))

    def _read(self, category_id: int) -> Optional[CacheEntry]:
        path = self._path(category_id)
        if not os.path.exists(path):
            return None
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return CacheEntry.model_validate(json.load(f))
        except (OSError, ValueError, ValidationError) as e:
            get_logger().warning(f"Ignoring unreadable cache entry for category {category_id}: {e}")
            return None

    def get(self, category_id: int) -> Optional[CacheEntry]:
        """Return the fresh entry for a category.

        Expired entries are deleted and reported as absent. Corrupt entries
        are reported as absent and left for the next ``put`` to overwrite.
        """
        logger = get_logger()
        entry = self._read(category_id)
        if entry is None:
            logger.debug(f"Cache miss for category {category_id}")
            return None

        now = self.clock()
        if not self.is_fresh(entry, now):
            boundary = self.last_reset_boundary(now)
            captured = datetime.fromtimestamp(entry.timestamp / 1000, tz=timezone.utc)
            logger.info(
                f"Cache expired for category {category_id}. "
                f"Last reset: {boundary.isoformat()}, data time: {captured.isoformat()}"
            )
            self.purge(category_id)
            return None

        logger.debug(f"Cache hit for category {category_id} ({len(entry.companies)} companies)")
        return entry

    def put(self, category_id: int, companies: Sequence[Company]) -> CacheEntry:
        """Store a batch for a category, replacing any previous entry.

        Returns:
            The entry that was written
        """
        entry = CacheEntry(
            timestamp=to_epoch_millis(self.clock()),
            companies=list(companies),
        )
        path = self._path(category_id)
        tmp_path = f"{path}.tmp"
        try:
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(entry.model_dump(by_alias=True), f, ensure_ascii=False)
            os.replace(tmp_path, path)
        except (OSError, TypeError, ValueError):
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
        get_logger().debug(f"Cached {len(entry.companies)} companies for category {category_id}")
        return entry

    def purge(self, category_id: int) -> bool:
        """Delete the entry for a category.

        Returns:
            True if an entry existed
        """
        try:
            os.remove(self._path(category_id))
        except FileNotFoundError:
            return False
        get_logger().debug(f"Purged cache for category {category_id}")
        return True

    def get_cache_age(self, category_id: int) -> Optional[float]:
        """Age of a category's entry in seconds, or None if absent."""
        entry = self._read(category_id)
        if entry is None:
            return None
        return (to_epoch_millis(self.clock()) - entry.timestamp) / 1000

    def list_categories(self) -> List[int]:
        """Category ids that currently have a file on disk."""
        categories = []
        for name in os.listdir(self.cache_dir):
            if not (name.startswith(self.file_prefix) and name.endswith(".json")):
                continue
            suffix = name[len(self.file_prefix):-len(".json")]
            if suffix.isdigit():
                categories.append(int(suffix))
        return sorted(categories)
