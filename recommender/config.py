from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .preferences import LIKE_BONUS
from .ranking import DEFAULT_LIMIT, DEFAULT_NOISE_BAND, LIKED_CATEGORY_BOOST

DEFAULT_INFERENCE_URL = "https://api-inference.huggingface.co/models"
DEFAULT_IMAGE_MODEL = "google/mobilenet_v2_1.0_224"
DEFAULT_TEXT_MODEL = "distilbert/distilbert-base-uncased-finetuned-sst-2-english"


def _env(name: str, default: str = "") -> str:
    return (os.getenv(name) or default).strip()


def _env_float(name: str, default: float, low: float = 0.0, high: Optional[float] = None) -> float:
    try:
        value = float(_env(name, str(default)))
    except ValueError:
        return default
    if not math.isfinite(value) or value < low:
        return default
    if high is not None and value > high:
        return high
    return value


def _env_log_level(name: str, default: str = "INFO") -> str:
    level = _env(name, default).upper()
    if not isinstance(logging.getLevelName(level), int):
        return default
    return level


def _env_int(name: str, default: int, low: int = 0) -> int:
    try:
        return max(low, int(_env(name, str(default))))
    except ValueError:
        return default


@dataclass
class RecommenderSettings:
    """Runtime knobs, read from the environment by :meth:`from_env`.

    Uses environment variables:
      - RECOMMENDER_MAX_RESULTS (default: 4)
      - RECOMMENDER_NOISE_BAND (default: 0.5)
      - RECOMMENDER_LIKE_BONUS (default: 0.1)
      - RECOMMENDER_LIKED_CATEGORY_BOOST (default: 0.2)
      - RECOMMENDER_SEED (optional, pins the noise source)
      - RECOMMENDER_CATALOG_PATH (optional, JSON catalog document)
      - HF_API_TOKEN / HF_INFERENCE_URL / HF_IMAGE_MODEL / HF_TEXT_MODEL
      - CLASSIFIER_TOP_K (default: 5), CLASSIFIER_TIMEOUT (seconds, default: 20)
      - LOG_LEVEL (default: INFO)
    """

    max_results: int = DEFAULT_LIMIT
    noise_band: float = DEFAULT_NOISE_BAND
    like_bonus: float = LIKE_BONUS
    liked_category_boost: float = LIKED_CATEGORY_BOOST
    seed: Optional[int] = None
    catalog_path: Optional[Path] = None
    hf_api_token: str = ""
    inference_url: str = DEFAULT_INFERENCE_URL
    image_model: str = DEFAULT_IMAGE_MODEL
    text_model: str = DEFAULT_TEXT_MODEL
    classifier_top_k: int = 5
    classifier_timeout: float = 20.0
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "RecommenderSettings":
        raw_seed = _env("RECOMMENDER_SEED")
        try:
            seed: Optional[int] = int(raw_seed) if raw_seed else None
        except ValueError:
            seed = None
        raw_path = _env("RECOMMENDER_CATALOG_PATH")
        return cls(
            max_results=_env_int("RECOMMENDER_MAX_RESULTS", DEFAULT_LIMIT),
            noise_band=_env_float("RECOMMENDER_NOISE_BAND", DEFAULT_NOISE_BAND),
            like_bonus=_env_float("RECOMMENDER_LIKE_BONUS", LIKE_BONUS, high=1.0),
            liked_category_boost=_env_float("RECOMMENDER_LIKED_CATEGORY_BOOST", LIKED_CATEGORY_BOOST),
            seed=seed,
            catalog_path=Path(raw_path) if raw_path else None,
            hf_api_token=_env("HF_API_TOKEN") or _env("HUGGINGFACE_API_TOKEN"),
            inference_url=_env("HF_INFERENCE_URL", DEFAULT_INFERENCE_URL).rstrip("/"),
            image_model=_env("HF_IMAGE_MODEL", DEFAULT_IMAGE_MODEL),
            text_model=_env("HF_TEXT_MODEL", DEFAULT_TEXT_MODEL),
            classifier_top_k=_env_int("CLASSIFIER_TOP_K", 5, low=1),
            classifier_timeout=_env_float("CLASSIFIER_TIMEOUT", 20.0) or 20.0,
            log_level=_env_log_level("LOG_LEVEL"),
        )


__all__ = ["RecommenderSettings"]
