"""
Browse sessions: per-client listing state.

A session remembers whether it has ever had a non-empty load from the store
(which switches off the empty-result fallback) and numbers its requests so a
response that finishes after a newer request started is discarded.
"""

import logging
import uuid
from collections import OrderedDict
from datetime import datetime
from typing import Optional

from schemas.domain import DataTier, ToolPage, ToolQuery
from services.tool_catalog import ToolCatalog

logger = logging.getLogger(__name__)


class SessionClosedError(Exception):
    """Raised when a closed browse session is asked to load"""
    pass


class BrowseSession:
    def __init__(self, catalog: ToolCatalog, session_id: Optional[str] = None):
        self.session_id = session_id or uuid.uuid4().hex
        self.catalog = catalog
        self.has_loaded_from_primary = False
        self.current: Optional[ToolPage] = None
        self.closed = False
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    async def load(self, query: ToolQuery, now: Optional[datetime] = None) -> Optional[ToolPage]:
        """
        Load a listing page through the catalog.

        Returns the page, or None when a newer load was started while this one
        was in flight; `current` always holds the latest accepted page.
        """
        if self.closed:
            raise SessionClosedError(f"Browse session {self.session_id} is closed")

        self._generation += 1
        generation = self._generation

        page = await self.catalog.list_tools(
            query,
            allow_empty_fallback=not self.has_loaded_from_primary,
            now=now,
        )

        if page.tier == DataTier.PRIMARY and page.total > 0:
            self.has_loaded_from_primary = True

        if self.closed or generation != self._generation:
            logger.info(
                f"🗑️ [BROWSE] Session {self.session_id}: discarding stale response "
                f"(generation {generation}, latest {self._generation})"
            )
            return None

        self.current = page
        return page

    def close(self) -> None:
        self.closed = True
        self.current = None


class BrowseSessionRegistry:
    """Creates, looks up and ends browse sessions; oldest sessions are evicted past max_sessions"""

    def __init__(self, catalog: ToolCatalog, max_sessions: int = 1000):
        self.catalog = catalog
        self.max_sessions = max_sessions
        self._sessions: "OrderedDict[str, BrowseSession]" = OrderedDict()

    def create(self) -> BrowseSession:
        session = BrowseSession(self.catalog)
        self._sessions[session.session_id] = session
        while len(self._sessions) > self.max_sessions:
            _, evicted = self._sessions.popitem(last=False)
            evicted.close()
        logger.info(f"🆕 [BROWSE] Created session {session.session_id}")
        return session

    def get(self, session_id: str) -> Optional[BrowseSession]:
        session = self._sessions.get(session_id)
        if session is not None:
            self._sessions.move_to_end(session_id)
        return session

    def end(self, session_id: str) -> bool:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.close()
        logger.info(f"👋 [BROWSE] Ended session {session_id}")
        return True

    def close_all(self) -> None:
        for session in self._sessions.values():
            session.close()
        self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)
