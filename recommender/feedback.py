from __future__ import annotations

import logging
from threading import RLock
from typing import Any, Dict, List, Optional

from .catalog import ItemCatalog
from .preferences import PreferenceStore
from .ranking import RankingEngine, ScoredItem

logger = logging.getLogger(__name__)


class ItemNotFoundError(LookupError):
    """Raised by :meth:`FeedbackController.like` for ids outside the catalog."""

    def __init__(self, item_id: Any) -> None:
        super().__init__(f"unknown item id {item_id!r}")
        self.item_id = item_id


class FeedbackController:
    """One user's session: preferences, likes and the last computed view.

    Every mutation recomputes the recommendations before returning, and the
    mutation plus its recomputation run under a single lock so callers never
    observe a half-applied update.
    """

    def __init__(
        self,
        catalog: ItemCatalog,
        preferences: PreferenceStore,
        engine: Optional[RankingEngine] = None,
        session_id: str = "default",
    ) -> None:
        self.session_id = session_id
        self.catalog = catalog
        self.preferences = preferences
        self.engine = engine or RankingEngine()
        # dict keeps like order; values unused
        self._liked: Dict[int, None] = {}
        self._recommendations: List[ScoredItem] = []
        self._lock = RLock()
        self.refresh()

    # ------------------------------------------------------------------
    def set_weight(self, category: str, weight: Any) -> List[ScoredItem]:
        with self._lock:
            stored = self.preferences.set_weight(category, weight)
            logger.debug("session=%s set_weight %s=%.2f (raw=%r)", self.session_id, category, stored, weight)
            return self.refresh()

    def like(self, item_id: int) -> List[ScoredItem]:
        item = self.catalog.find(item_id)
        if item is None:
            logger.info("session=%s like ignored, unknown item %r", self.session_id, item_id)
            raise ItemNotFoundError(item_id)
        with self._lock:
            if item.id in self._liked:
                return list(self._recommendations)
            self._liked[item.id] = None
            weight = self.preferences.apply_like_bonus(item.category)
            logger.debug("session=%s liked item=%s %s -> %.2f", self.session_id, item.id, item.category, weight)
            return self.refresh()

    def refresh(self) -> List[ScoredItem]:
        with self._lock:
            self._recommendations = self.engine.rank(self.catalog.list(), self.preferences, self._liked)
            return list(self._recommendations)

    # ------------------------------------------------------------------
    def recommendations(self) -> List[ScoredItem]:
        with self._lock:
            return list(self._recommendations)

    def liked(self) -> List[int]:
        with self._lock:
            return list(self._liked)

    def is_liked(self, item_id: int) -> bool:
        with self._lock:
            return item_id in self._liked

    def as_state(self) -> Dict[str, object]:
        with self._lock:
            return {
                "sessionId": self.session_id,
                "preferences": self.preferences.snapshot(),
                "liked": list(self._liked),
                "recommendations": [s.to_api() for s in self._recommendations],
            }


__all__ = ["FeedbackController", "ItemNotFoundError"]
