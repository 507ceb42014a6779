from __future__ import annotations

import logging
import random
from threading import RLock
from typing import Dict, List, Optional

from .catalog import ItemCatalog
from .config import RecommenderSettings
from .feedback import FeedbackController
from .preferences import PreferenceStore
from .ranking import RankingEngine

logger = logging.getLogger(__name__)


class SessionRegistry:
    """In-memory sessions keyed by id, all sharing one read-only catalog."""

    def __init__(self, catalog: ItemCatalog, settings: Optional[RecommenderSettings] = None) -> None:
        self.catalog = catalog
        self.settings = settings or RecommenderSettings()
        self._sessions: Dict[str, FeedbackController] = {}
        self._lock = RLock()
        self._rng = random.Random(self.settings.seed)

    def _create(self, session_id: str) -> FeedbackController:
        preferences = PreferenceStore(self.catalog.default_preferences(), like_bonus=self.settings.like_bonus)
        engine = RankingEngine(
            limit=self.settings.max_results,
            noise_band=self.settings.noise_band,
            liked_category_boost=self.settings.liked_category_boost,
            rng=self._rng,
        )
        logger.info("session=%s created", session_id)
        return FeedbackController(self.catalog, preferences, engine, session_id=session_id)

    @staticmethod
    def _key(session_id: str) -> str:
        return (session_id or "").strip() or "default"

    def get_session(self, session_id: str) -> FeedbackController:
        session_key = self._key(session_id)
        with self._lock:
            if session_key not in self._sessions:
                self._sessions[session_key] = self._create(session_key)
            return self._sessions[session_key]

    def end_session(self, session_id: str) -> bool:
        session_key = self._key(session_id)
        with self._lock:
            ended = self._sessions.pop(session_key, None) is not None
        if ended:
            logger.info("session=%s ended", session_key)
        return ended

    def all_sessions(self) -> List[FeedbackController]:
        with self._lock:
            return list(self._sessions.values())


__all__ = ["SessionRegistry"]
