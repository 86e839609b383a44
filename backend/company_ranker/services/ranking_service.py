"""Ranking service orchestrating the company pipeline.

Torn API -> cache store -> ranking -> filters -> sort -> bookmark projection.

The service owns the session state (selected category, API key, filters,
sort, bookmarks). It is loaded from the preferences store at startup and
flushed after every mutation. The ranking, filter and sort functions only
ever see explicit arguments.

Overlapping loads are serialised with a monotonic sequence number: a load
only writes the cache if no newer load for the same category started while
it was waiting on the network, and it only replaces the current batch if it
is the most recently started load overall.
"""
from datetime import datetime, timezone
from typing import Dict, List, Optional

import aiosqlite

from ..config import get_settings
from ..core.bookmarks import project_bookmarks
from ..core.cache_store import CacheStore
from ..core.errors import ConfigurationError, EmptyResultError, FetchSupersededError
from ..core.filtering import apply_filters
from ..core.logging import get_logger
from ..core.ranking import enrich_companies
from ..core.sorting import rank_lookup, sort_companies, toggle_sort
from ..core.statistics import filter_limits, summarize_view
from ..db.database import PreferencesDatabase
from ..models.schemas import (
    CompanyView,
    EnrichedCompany,
    FilterCriteria,
    SessionResponse,
    SessionState,
    SortDirection,
    SortField,
    SortSpec,
    StatsResponse,
)
from .torn_api import TornApiService


def mask_credential(credential: str) -> Optional[str]:
    """Show only the last four characters of an API key."""
    if not credential:
        return None
    if len(credential) <= 4:
        return "*" * len(credential)
    return "*" * (len(credential) - 4) + credential[-4:]


class RankingService:
    """Service for loading, ranking and viewing company batches."""

    def __init__(
        self,
        torn_service: Optional[TornApiService] = None,
        cache_store: Optional[CacheStore] = None,
        database: Optional[PreferencesDatabase] = None
    ):
        """Initialize the ranking service.

        Args:
            torn_service: Torn API service
            cache_store: Cache store instance
            database: Preferences database
        """
        settings = get_settings()
        self.torn_service = torn_service or TornApiService()
        self.cache_store = cache_store or CacheStore(
            cache_dir=settings.cache_dir,
            file_prefix=settings.cache_file_prefix,
            reset_hour=settings.reset_hour,
            reset_minute=settings.reset_minute,
            reset_timezone=settings.reset_timezone,
        )
        self.database = database
        self.state = self._default_state()

        self._batch: List[EnrichedCompany] = []
        self._batch_category: Optional[int] = None
        self._fetched_at: Optional[datetime] = None
        self._cached = False

        self._sequence = 0
        self._latest_by_category: Dict[int, int] = {}
        self._latest_load = 0

    @staticmethod
    def _default_state() -> SessionState:
        settings = get_settings()
        return SessionState(
            category_id=settings.default_category_id,
            sort=SortSpec(
                field=SortField(settings.default_sort_field),
                direction=SortDirection(settings.default_sort_direction),
            ),
        )

    async def get_database(self) -> PreferencesDatabase:
        """Get or create database instance."""
        if self.database is None:
            self.database = PreferencesDatabase()
        return self.database

    async def initialize(self) -> SessionState:
        """Load the persisted session state.

        Returns:
            The state now held by the service
        """
        logger = get_logger()
        try:
            db = await self.get_database()
            self.state = await db.load_session(self._default_state())
            logger.info(
                f"Loaded preferences: category={self.state.category_id}, "
                f"bookmarks={len(self.state.bookmarks)}, sort={self.state.sort.field.value} "
                f"{self.state.sort.direction.value}"
            )
        except (aiosqlite.Error, OSError) as e:
            logger.warning(f"Could not load preferences, using defaults: {e}")
            self.state = self._default_state()
        return self.state

    async def _flush_state(self) -> None:
        """Persist the session state after a mutation."""
        try:
            db = await self.get_database()
            await db.save_session(self.state)
        except (aiosqlite.Error, OSError) as e:
            # The in-memory state stays authoritative for this process
            get_logger().warning(f"Failed to save preferences: {e}")

    def _next_sequence(self, category_id: int) -> int:
        self._sequence += 1
        self._latest_by_category[category_id] = self._sequence
        self._latest_load = self._sequence
        return self._sequence

    def _replace_batch(
        self,
        category_id: int,
        companies: List[EnrichedCompany],
        fetched_at: datetime,
        cached: bool
    ) -> None:
        self._batch = companies
        self._batch_category = category_id
        self._fetched_at = fetched_at
        self._cached = cached

    async def load_category(
        self,
        category_id: int,
        credential: Optional[str] = None,
        force_refresh: bool = False
    ) -> List[EnrichedCompany]:
        """Load, cache and enrich the companies of a category.

        Args:
            category_id: Torn company type
            credential: API key; the session key is used when None
            force_refresh: Purge the cache entry and fetch fresh data

        Returns:
            The enriched batch, in provider order

        Raises:
            ConfigurationError: No API key available (nothing is fetched)
            ProviderError: Torn API failure; the current batch is kept
            EmptyResultError: The category has no companies; the batch is cleared
            FetchSupersededError: A newer load started while this one waited
        """
        logger = get_logger()
        key = (credential if credential is not None else self.state.credential).strip()
        if not key:
            raise ConfigurationError("Please enter a valid Public Torn API Key.")

        sequence = self._next_sequence(category_id)
        logger.info(f"Load #{sequence}: category={category_id}, force_refresh={force_refresh}")

        entry = None
        if force_refresh:
            self.cache_store.purge(category_id)
        else:
            entry = self.cache_store.get(category_id)

        if entry is not None:
            logger.info(f"Using cached data for category {category_id}")
            companies = entry.companies
            fetched_at = datetime.fromtimestamp(entry.timestamp / 1000, tz=timezone.utc)
            cached = True
        else:
            companies = await self.torn_service.fetch_companies(category_id, key)

            if sequence != self._latest_by_category.get(category_id):
                logger.warning(f"Load #{sequence} for category {category_id} superseded, discarding result")
                raise FetchSupersededError(category_id, sequence)

            fetched_at = self.cache_store.clock()
            cached = False
            if companies:
                try:
                    stored = self.cache_store.put(category_id, companies)
                    fetched_at = datetime.fromtimestamp(stored.timestamp / 1000, tz=timezone.utc)
                except OSError as e:
                    logger.warning(f"Failed to cache category {category_id}: {e}")

        if sequence != self._latest_load:
            logger.warning(f"Load #{sequence} finished after a newer load, not replacing the current batch")
            raise FetchSupersededError(category_id, sequence)

        if not companies:
            logger.info(f"No companies found for category {category_id}")
            self._replace_batch(category_id, [], fetched_at, cached)
            raise EmptyResultError(category_id)

        enriched = enrich_companies(companies)
        self._replace_batch(category_id, enriched, fetched_at, cached)
        logger.info(f"Load #{sequence} complete: {len(enriched)} companies (cached={cached})")
        return enriched

    async def _reload_selected(self) -> CompanyView:
        """Load the selected category if an API key is set."""
        if not self.state.credential.strip():
            return self.get_view()
        try:
            await self.load_category(self.state.category_id)
        except EmptyResultError as e:
            return self.get_view(message=str(e))
        return self.get_view()

    def get_view(self, message: Optional[str] = None) -> CompanyView:
        """Build the filtered, sorted and bookmarked view of the batch."""
        rows = sort_companies(apply_filters(self._batch, self.state.filters), self.state.sort)
        bookmarks = project_bookmarks(self._batch, self.state.bookmarks, rank_lookup(rows))

        return CompanyView(
            category_id=self._batch_category,
            fetched_at=self._fetched_at,
            cached=self._cached,
            total_companies=len(self._batch),
            companies=rows,
            bookmarks=bookmarks,
            filters=self.state.filters,
            sort=self.state.sort,
            highlights=summarize_view(rows),
            limits=filter_limits(self._batch),
            message=message,
        )

    def get_batch(self) -> List[EnrichedCompany]:
        """The enriched batch of the last successful load."""
        return list(self._batch)

    async def apply_filters(self, criteria: FilterCriteria) -> CompanyView:
        """Replace the filter criteria."""
        self.state.filters = criteria
        await self._flush_state()
        return self.get_view()

    async def reset_filters(self) -> CompanyView:
        """Restore the default filter criteria."""
        return await self.apply_filters(FilterCriteria())

    async def set_sort(
        self,
        field: SortField,
        direction: Optional[SortDirection] = None
    ) -> CompanyView:
        """Select a sort field; see ``toggle_sort`` for the direction rule."""
        self.state.sort = toggle_sort(self.state.sort, field, direction)
        await self._flush_state()
        return self.get_view()

    async def toggle_bookmark(self, company_id: int) -> bool:
        """Add or remove a bookmark.

        Returns:
            True if the company is bookmarked afterwards
        """
        marked = set(self.state.bookmarks)
        if company_id in marked:
            marked.discard(company_id)
            bookmarked = False
        else:
            marked.add(company_id)
            bookmarked = True
        self.state.bookmarks = sorted(marked)
        await self._flush_state()
        return bookmarked

    def purge_cache(self, category_id: int) -> bool:
        """Drop the cache entry of a category.

        Returns:
            True if an entry existed
        """
        purged = self.cache_store.purge(category_id)
        get_logger().info(f"Cache purge for category {category_id}: {'done' if purged else 'nothing cached'}")
        return purged

    async def select_category(self, category_id: int) -> CompanyView:
        """Switch category and load it."""
        self.state.category_id = category_id
        await self._flush_state()
        return await self._reload_selected()

    async def set_credential(self, credential: str) -> CompanyView:
        """Store a new API key and reload the selected category."""
        self.state.credential = credential.strip()
        await self._flush_state()
        return await self._reload_selected()

    def get_session(self) -> SessionResponse:
        """Session state with the API key masked."""
        return SessionResponse(
            category_id=self.state.category_id,
            has_credential=bool(self.state.credential),
            credential_hint=mask_credential(self.state.credential),
            filters=self.state.filters,
            sort=self.state.sort,
            bookmarks=list(self.state.bookmarks),
        )

    def get_stats(self) -> StatsResponse:
        """Cache and batch statistics."""
        category_id = self._batch_category or self.state.category_id
        return StatsResponse(
            category_id=self._batch_category,
            total_companies=len(self._batch),
            cache_age_seconds=self.cache_store.get_cache_age(category_id),
            last_reset=self.cache_store.last_reset_boundary(),
            cached_categories=self.cache_store.list_categories(),
            bookmark_count=len(self.state.bookmarks),
        )

    async def close(self) -> None:
        """Clean up resources."""
        await self.torn_service.close()
        if self.database:
            await self.database.close()
