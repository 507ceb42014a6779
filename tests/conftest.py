"""Shared fixtures for the recommender tests."""

import random

import pytest

from recommender.catalog import Item, ItemCatalog
from recommender.feedback import FeedbackController
from recommender.preferences import PreferenceStore
from recommender.ranking import RankingEngine


@pytest.fixture
def demo_catalog() -> ItemCatalog:
    """The bundled eight-product catalog."""
    return ItemCatalog.default()


@pytest.fixture
def two_item_catalog() -> ItemCatalog:
    return ItemCatalog(
        [
            Item(id=1, name="One", category="X", rating=5.0),
            Item(id=2, name="Two", category="Y", rating=5.0),
        ],
        default_preferences={"X": 1.0, "Y": 0.0},
    )


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def controller(demo_catalog: ItemCatalog, rng: random.Random) -> FeedbackController:
    preferences = PreferenceStore(demo_catalog.default_preferences())
    return FeedbackController(demo_catalog, preferences, RankingEngine(rng=rng), session_id="test")
