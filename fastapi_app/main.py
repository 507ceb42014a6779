from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from recommender import (
    ClassificationResult,
    HuggingFaceClassifier,
    ItemCatalog,
    ItemNotFoundError,
    RecommenderSettings,
    SessionRegistry,
)
from recommender.ranking import ScoredItem

settings = RecommenderSettings.from_env()
logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("fastapi_app")

app = FastAPI(title="Preference Recommender API", version="1.0.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

catalog = ItemCatalog.bootstrap_from_file(settings.catalog_path) if settings.catalog_path else ItemCatalog.default()
sessions = SessionRegistry(catalog, settings)
image_classifier = HuggingFaceClassifier.for_images(settings)
text_classifier = HuggingFaceClassifier.for_text(settings)


# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------
class PreferenceUpdate(BaseModel):
    sessionId: str = "default"
    category: str
    # any JSON value; the store clamps or coerces it
    weight: Any = None


class LikeRequest(BaseModel):
    sessionId: str = "default"
    itemId: Any = None


class TextClassifyRequest(BaseModel):
    text: str


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _recommendations(view: List[ScoredItem]) -> List[Dict[str, object]]:
    return [entry.to_api() for entry in view]


def _coerce_item_id(raw: Any) -> Optional[int]:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, float) and not raw.is_integer():
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def _classification_response(classifier: HuggingFaceClassifier, result: ClassificationResult) -> Dict[str, Any]:
    if result.error:
        status = 503 if not classifier.available else 502
        logger.warning("%s classification failed: %s", classifier.task, result.error)
        raise HTTPException(status_code=status, detail=result.error)
    return {
        "task": classifier.task,
        "model": classifier.model,
        "labels": [label.to_api() for label in result.labels],
    }


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------
@app.get("/health")
def health() -> Dict[str, Any]:
    return {
        "status": "ok",
        "time": datetime.now(timezone.utc).isoformat(),
        "items": len(catalog),
        "sessions": len(sessions.all_sessions()),
        "classifiers": {
            "image": image_classifier.available,
            "text": text_classifier.available,
        },
    }


@app.get("/api/catalog")
def get_catalog() -> Dict[str, Any]:
    return {
        "items": [item.to_api() for item in catalog.list()],
        "categories": catalog.categories(),
    }


@app.get("/api/session")
def get_session(sessionId: str = "default") -> Dict[str, Any]:
    return sessions.get_session(sessionId).as_state()


@app.delete("/api/session/{sessionId}")
def end_session(sessionId: str) -> Dict[str, Any]:
    return {"ok": sessions.end_session(sessionId)}


@app.get("/api/recommendations")
def get_recommendations(sessionId: str = "default", refresh: bool = False) -> Dict[str, Any]:
    session = sessions.get_session(sessionId)
    view = session.refresh() if refresh else session.recommendations()
    return {"sessionId": session.session_id, "recommendations": _recommendations(view)}


@app.post("/api/preferences")
def update_preference(body: PreferenceUpdate) -> Dict[str, Any]:
    session = sessions.get_session(body.sessionId)
    view = session.set_weight(body.category, body.weight)
    return {
        "sessionId": session.session_id,
        "preferences": session.preferences.snapshot(),
        "recommendations": _recommendations(view),
    }


@app.post("/api/like")
def like_item(body: LikeRequest) -> Dict[str, Any]:
    session = sessions.get_session(body.sessionId)
    item_id = _coerce_item_id(body.itemId)
    try:
        if item_id is None:
            raise ItemNotFoundError(body.itemId)
        view = session.like(item_id)
    except ItemNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return {
        "sessionId": session.session_id,
        "liked": session.liked(),
        "preferences": session.preferences.snapshot(),
        "recommendations": _recommendations(view),
    }


@app.post("/api/classify/image")
async def classify_image(file: UploadFile = File(...)) -> Dict[str, Any]:
    data = await file.read()
    if not data:
        raise HTTPException(status_code=400, detail="empty image upload")
    result = image_classifier.classify(data)
    return _classification_response(image_classifier, result)


@app.post("/api/classify/text")
def classify_text(body: TextClassifyRequest) -> Dict[str, Any]:
    text = body.text.strip()
    if not text:
        raise HTTPException(status_code=400, detail="text required")
    result = text_classifier.classify(text)
    return _classification_response(text_classifier, result)


# Entry for local dev
# uvicorn fastapi_app.main:app --reload --port 8000
