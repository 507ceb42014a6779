from __future__ import annotations

import json
import logging
import math
from dataclasses import asdict, dataclass
from pathlib import Path
from threading import RLock
from typing import Any, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)

MAX_RATING = 5.0

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent / "data" / "products.json"


class CatalogError(ValueError):
    """Raised when a catalog document cannot be loaded."""


def _finite(value: Any, field: str) -> float:
    number = float(value or 0)
    if not math.isfinite(number):
        raise ValueError(f"{field} must be a finite number, got {value!r}")
    return number


@dataclass(frozen=True)
class Item:
    """A single catalog entry. Display fields are passed through untouched."""

    id: int
    name: str
    category: str
    price: float = 0.0
    rating: float = 0.0
    description: str = ""
    image: Optional[str] = None

    def to_api(self) -> Dict[str, object]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Item":
        return cls(
            id=int(data["id"]),
            name=str(data.get("name", "")).strip(),
            category=str(data.get("category", "")).strip(),
            price=_finite(data.get("price"), "price"),
            rating=max(0.0, min(MAX_RATING, _finite(data.get("rating"), "rating"))),
            description=str(data.get("description") or data.get("desc") or ""),
            image=(data.get("image") or data.get("icon") or None),
        )


class ItemCatalog:
    """Read-only, ordered item catalogue shared by every session."""

    def __init__(
        self,
        items: Iterable[Item] = (),
        default_preferences: Optional[Dict[str, float]] = None,
    ) -> None:
        self._items: List[Item] = []
        self._by_id: Dict[int, Item] = {}
        self._default_preferences: Dict[str, float] = dict(default_preferences or {})
        self._lock = RLock()
        for item in items:
            if item.id in self._by_id:
                raise CatalogError(f"duplicate item id {item.id}")
            self._items.append(item)
            self._by_id[item.id] = item

    # ------------------------------------------------------------------
    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "ItemCatalog":
        if not isinstance(payload, dict):
            raise CatalogError("catalog document must be a JSON object")
        items: List[Item] = []
        for raw in payload.get("items") or []:
            try:
                items.append(Item.from_dict(raw))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("skipping catalog entry %r: %s", raw, exc)
        prefs = {}
        for category, weight in (payload.get("default_preferences") or {}).items():
            try:
                prefs[str(category)] = float(weight)
            except (TypeError, ValueError):
                prefs[str(category)] = 0.0
        return cls(items, default_preferences=prefs)

    @classmethod
    def bootstrap_from_file(cls, path: Path) -> "ItemCatalog":
        if not path.exists():
            raise CatalogError(f"catalog file not found: {path}")
        try:
            with path.open("r", encoding="utf-8") as fh:
                payload = json.load(fh)
        except json.JSONDecodeError as exc:
            raise CatalogError(f"catalog file is not valid JSON: {path}") from exc
        catalog = cls.from_payload(payload)
        logger.info("loaded %d catalog items from %s", len(catalog), path)
        return catalog

    @classmethod
    def default(cls) -> "ItemCatalog":
        return cls.bootstrap_from_file(DEFAULT_CATALOG_PATH)

    # ------------------------------------------------------------------
    def list(self) -> List[Item]:
        with self._lock:
            return list(self._items)

    def find(self, item_id: int) -> Optional[Item]:
        with self._lock:
            return self._by_id.get(item_id)

    def categories(self) -> List[str]:
        seen: Dict[str, None] = {}
        for item in self.list():
            seen.setdefault(item.category, None)
        return list(seen)

    def default_preferences(self) -> Dict[str, float]:
        with self._lock:
            return dict(self._default_preferences)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


__all__ = ["CatalogError", "Item", "ItemCatalog", "DEFAULT_CATALOG_PATH"]
