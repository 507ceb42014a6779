from __future__ import annotations

import random
from collections.abc import Collection
from dataclasses import dataclass
from typing import Dict, List, Optional

from .catalog import Item
from .preferences import PreferenceStore

DEFAULT_LIMIT = 4
DEFAULT_NOISE_BAND = 0.5
LIKED_CATEGORY_BOOST = 0.2


@dataclass(frozen=True)
class ScoredItem:
    item: Item
    score: float

    def to_api(self) -> Dict[str, object]:
        data = self.item.to_api()
        data["score"] = round(self.score, 4)
        return data


class RankingEngine:
    """Scores unliked catalog items by category affinity times rating.

    Every call adds uniform noise in ``[0, noise_band)`` per item so that
    near-equal items trade places between recomputations. Repeated calls
    with identical state are therefore not guaranteed to return the same
    order; only items whose score gap exceeds the noise band keep theirs.
    """

    def __init__(
        self,
        limit: int = DEFAULT_LIMIT,
        noise_band: float = DEFAULT_NOISE_BAND,
        liked_category_boost: float = LIKED_CATEGORY_BOOST,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.limit = max(0, int(limit))
        self.noise_band = max(0.0, float(noise_band))
        self.liked_category_boost = max(0.0, float(liked_category_boost))
        self._rng = rng or random.Random()

    def affinities(
        self,
        catalog: List[Item],
        preferences: PreferenceStore,
        liked: Collection[int],
    ) -> Dict[str, float]:
        scores = preferences.snapshot()
        if self.liked_category_boost:
            by_id = {item.id: item for item in catalog}
            for item_id in liked:
                item = by_id.get(item_id)
                if item is None:
                    continue
                scores[item.category] = scores.get(item.category, 0.0) + self.liked_category_boost
        return scores

    def rank(
        self,
        catalog: List[Item],
        preferences: PreferenceStore,
        liked: Collection[int],
        limit: Optional[int] = None,
    ) -> List[ScoredItem]:
        size = self.limit if limit is None else max(0, int(limit))
        affinity = self.affinities(catalog, preferences, liked)
        scored: List[ScoredItem] = []
        for item in catalog:
            if item.id in liked:
                continue
            noise = self._rng.random() * self.noise_band
            scored.append(ScoredItem(item, affinity.get(item.category, 0.0) * item.rating + noise))
        # sort is stable, so exact ties keep catalog order
        scored.sort(key=lambda s: s.score, reverse=True)
        return scored[:size]


__all__ = ["RankingEngine", "ScoredItem", "DEFAULT_LIMIT", "DEFAULT_NOISE_BAND", "LIKED_CATEGORY_BOOST"]
