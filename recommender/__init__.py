"""Preference-driven item ranking: catalog, preferences, ranking and feedback."""

from .catalog import CatalogError, Item, ItemCatalog
from .classifiers import ClassificationLabel, ClassificationResult, HuggingFaceClassifier
from .config import RecommenderSettings
from .feedback import FeedbackController, ItemNotFoundError
from .preferences import PreferenceStore, clamp_weight
from .ranking import RankingEngine, ScoredItem
from .sessions import SessionRegistry

__all__ = [
    "CatalogError",
    "Item",
    "ItemCatalog",
    "ClassificationLabel",
    "ClassificationResult",
    "HuggingFaceClassifier",
    "RecommenderSettings",
    "FeedbackController",
    "ItemNotFoundError",
    "PreferenceStore",
    "clamp_weight",
    "RankingEngine",
    "ScoredItem",
    "SessionRegistry",
]
