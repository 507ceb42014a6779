from __future__ import annotations

import math
from threading import RLock
from typing import Any, Dict, List, Optional

LIKE_BONUS = 0.1


def clamp_weight(value: Any) -> float:
    """Coerce ``value`` to a float in [0, 1]; anything unparseable becomes 0."""
    try:
        weight = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(weight):
        return 0.0
    return max(0.0, min(1.0, weight))


class PreferenceStore:
    """Per-category interest weights for one session.

    Weights are independent (no normalisation) and every write is clamped to
    [0, 1]. Unknown categories are stored like any other so the catalog can
    grow without touching the store.
    """

    def __init__(self, initial: Optional[Dict[str, Any]] = None, like_bonus: float = LIKE_BONUS) -> None:
        self._weights: Dict[str, float] = {}
        self._like_bonus = like_bonus
        self._lock = RLock()
        for category, weight in (initial or {}).items():
            self._weights[str(category)] = clamp_weight(weight)

    @property
    def like_bonus(self) -> float:
        return self._like_bonus

    def set_weight(self, category: str, weight: Any) -> float:
        value = clamp_weight(weight)
        with self._lock:
            self._weights[category] = value
        return value

    def apply_like_bonus(self, category: str) -> float:
        with self._lock:
            prior = self._weights.get(category, 0.0)
            value = min(prior + self._like_bonus, 1.0)
            self._weights[category] = value
        return value

    def weight_for(self, category: str) -> float:
        with self._lock:
            return self._weights.get(category, 0.0)

    def categories(self) -> List[str]:
        with self._lock:
            return list(self._weights)

    def snapshot(self) -> Dict[str, float]:
        with self._lock:
            return dict(self._weights)


__all__ = ["PreferenceStore", "clamp_weight", "LIKE_BONUS"]
