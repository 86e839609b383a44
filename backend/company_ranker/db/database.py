"""Async preferences store for the session state.

Filters, sort, bookmarks, the selected category and the API key outlive the
process. They are kept as JSON values in a small key/value SQLite table.
"""
import asyncio
import json
import os
import time
from typing import Any, Dict, Optional

import aiosqlite
from pydantic import ValidationError

from ..config import get_settings
from ..core.logging import get_logger
from ..models.schemas import FilterCriteria, SessionState, SortSpec

# Preference keys
CATEGORY_KEY = "selected_category"
CREDENTIAL_KEY = "api_key"
FILTERS_KEY = "filters"
SORT_KEY = "sort"
BOOKMARKS_KEY = "marked_companies"


class PreferencesDatabase:
    """Async SQLite handler for persisted session preferences."""

    # Database schema version for future migrations
    SCHEMA_VERSION = 1

    def __init__(self, db_path: Optional[str] = None):
        """Initialize the store; tables are created on first use."""
        if db_path is None:
            settings = get_settings()
            db_path = settings.database_path

        self.db_path = os.path.abspath(db_path)
        self._lock = asyncio.Lock()

        if not self.db_path.endswith('.sqlite'):
            raise ValueError("Database path must end with .sqlite extension")

        db_dir = os.path.dirname(self.db_path)
        os.makedirs(db_dir, exist_ok=True)

        self._initialized = False

    async def _ensure_initialized(self) -> None:
        """Ensure database is initialized."""
        if not self._initialized:
            await self._create_tables()
            self._initialized = True

    async def _create_tables(self) -> None:
        """Create database tables if they don't exist."""
        async with self._lock:
            async with aiosqlite.connect(self.db_path) as conn:
                await conn.execute('''
                    CREATE TABLE IF NOT EXISTS preferences (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL,
                        updated_at INTEGER NOT NULL
                    )
                ''')

                await conn.execute('''
                    CREATE TABLE IF NOT EXISTS metadata (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL
                    )
                ''')

                await conn.execute(
                    'INSERT OR REPLACE INTO metadata (key, value) VALUES (?, ?)',
                    ('schema_version', str(self.SCHEMA_VERSION))
                )

                await conn.commit()

    async def get_all_preferences(self) -> Dict[str, str]:
        """Get every stored key with its raw value."""
        await self._ensure_initialized()

        async with aiosqlite.connect(self.db_path) as conn:
            cursor = await conn.execute('SELECT key, value FROM preferences')
            rows = await cursor.fetchall()
            return {row[0]: row[1] for row in rows}

    async def set_preferences(self, values: Dict[str, Any]) -> None:
        """Store several keys in one transaction, JSON-encoding each value."""
        await self._ensure_initialized()

        now = int(time.time())
        async with self._lock:
            async with aiosqlite.connect(self.db_path) as conn:
                await conn.executemany(
                    'INSERT OR REPLACE INTO preferences (key, value, updated_at) VALUES (?, ?, ?)',
                    [(key, json.dumps(value), now) for key, value in values.items()]
                )
                await conn.commit()

    async def load_session(self, defaults: SessionState) -> SessionState:
        """Rebuild the session state, falling back to defaults per key.

        A value that cannot be decoded is logged and replaced by its default.
        """
        logger = get_logger()
        stored = await self.get_all_preferences()
        state = defaults.model_copy(deep=True)

        def decode(key: str) -> Any:
            raw = stored.get(key)
            if raw is None:
                return None
            try:
                return json.loads(raw)
            except ValueError as e:
                logger.warning(f"Discarding unreadable preference '{key}': {e}")
                return None

        category = decode(CATEGORY_KEY)
        if isinstance(category, int) and category > 0:
            state.category_id = category

        credential = decode(CREDENTIAL_KEY)
        if isinstance(credential, str):
            state.credential = credential

        try:
            filters = decode(FILTERS_KEY)
            if filters is not None:
                state.filters = FilterCriteria.model_validate(filters)
        except ValidationError as e:
            logger.warning(f"Discarding invalid saved filters: {e.error_count()} errors")
            state.filters = defaults.filters.model_copy()

        try:
            sort = decode(SORT_KEY)
            if sort is not None:
                state.sort = SortSpec.model_validate(sort)
        except ValidationError as e:
            logger.warning(f"Discarding invalid saved sort: {e.error_count()} errors")
            state.sort = defaults.sort.model_copy()

        bookmarks = decode(BOOKMARKS_KEY)
        if isinstance(bookmarks, list):
            state.bookmarks = sorted({int(b) for b in bookmarks if isinstance(b, int)})

        return state

    async def save_session(self, state: SessionState) -> None:
        """Flush the whole session state."""
        await self.set_preferences({
            CATEGORY_KEY: state.category_id,
            CREDENTIAL_KEY: state.credential,
            FILTERS_KEY: state.filters.model_dump(mode="json"),
            SORT_KEY: state.sort.model_dump(mode="json"),
            BOOKMARKS_KEY: sorted(state.bookmarks),
        })

    async def close(self) -> None:
        """Close database connection and cleanup resources."""
        # Connections are opened per operation
        pass
