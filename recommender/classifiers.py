from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

import requests

from .config import RecommenderSettings

logger = logging.getLogger(__name__)

IMAGE_TASK = "image-classification"
TEXT_TASK = "sentiment-analysis"


@dataclass
class ClassificationLabel:
    label: str
    score: float

    def to_api(self) -> Dict[str, object]:
        return {"label": self.label, "score": self.score}


@dataclass
class ClassificationResult:
    labels: List[ClassificationLabel] = field(default_factory=list)
    raw: Any = None
    error: Optional[str] = None

    @property
    def top(self) -> Optional[ClassificationLabel]:
        return self.labels[0] if self.labels else None


def parse_labels(payload: Any, top_k: int) -> List[ClassificationLabel]:
    """Flatten ``[{label, score}]`` or ``[[{label, score}]]`` into sorted labels.

    Raises ``ValueError`` when the payload does not have that shape.
    """
    if isinstance(payload, dict) and "label" in payload:
        payload = [payload]
    if not isinstance(payload, list):
        raise ValueError("expected a list of labels")
    if payload and isinstance(payload[0], list):
        payload = payload[0]
    labels: List[ClassificationLabel] = []
    for entry in payload:
        if not isinstance(entry, dict) or "label" not in entry:
            raise ValueError("label entry missing 'label'")
        try:
            score = float(entry.get("score", 0.0))
        except (TypeError, ValueError) as exc:
            raise ValueError("label entry has a non-numeric score") from exc
        labels.append(ClassificationLabel(label=str(entry["label"]), score=max(0.0, min(1.0, score))))
    labels.sort(key=lambda lab: lab.score, reverse=True)
    return labels[:top_k]


class HuggingFaceClassifier:
    """Thin wrapper around a hosted Hugging Face inference endpoint.

    Images are posted as raw bytes and text as ``{"inputs": text}``. Failures
    are reported in :attr:`ClassificationResult.error`, never raised.
    """

    def __init__(
        self,
        task: str,
        model: str,
        token: str = "",
        base_url: str = "",
        top_k: int = 5,
        timeout: float = 20.0,
    ) -> None:
        self.task = task
        self.model = (model or "").strip()
        self.token = (token or "").strip()
        self.base_url = (base_url or "").strip().rstrip("/")
        self.top_k = max(1, int(top_k))
        self.timeout = timeout

    @classmethod
    def for_images(cls, settings: RecommenderSettings) -> "HuggingFaceClassifier":
        return cls(
            IMAGE_TASK,
            settings.image_model,
            token=settings.hf_api_token,
            base_url=settings.inference_url,
            top_k=settings.classifier_top_k,
            timeout=settings.classifier_timeout,
        )

    @classmethod
    def for_text(cls, settings: RecommenderSettings) -> "HuggingFaceClassifier":
        return cls(
            TEXT_TASK,
            settings.text_model,
            token=settings.hf_api_token,
            base_url=settings.inference_url,
            top_k=settings.classifier_top_k,
            timeout=settings.classifier_timeout,
        )

    @property
    def available(self) -> bool:
        return bool(self.token and self.model and self.base_url)

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/{self.model}"

    def classify(self, data: Union[bytes, str]) -> ClassificationResult:
        if not self.available:
            return ClassificationResult(error=f"{self.task} classifier not configured")
        headers = {"Authorization": f"Bearer {self.token}"}
        try:
            if isinstance(data, bytes):
                headers["Content-Type"] = "application/octet-stream"
                resp = requests.post(self.endpoint, headers=headers, data=data, timeout=self.timeout)
            else:
                resp = requests.post(self.endpoint, headers=headers, json={"inputs": data}, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("%s request failed: %s", self.task, exc)
            return ClassificationResult(error=str(exc))

        if not resp.ok:
            logger.warning("%s returned HTTP %s", self.task, resp.status_code)
            return ClassificationResult(raw=resp.text[:500], error=f"classifier returned HTTP {resp.status_code}")
        try:
            payload = resp.json()
            labels = parse_labels(payload, self.top_k)
        except ValueError as exc:
            logger.warning("%s returned malformed output: %s", self.task, exc)
            return ClassificationResult(raw=resp.text[:500], error="Malformed classifier output")
        return ClassificationResult(labels=labels, raw=payload)


__all__ = [
    "ClassificationLabel",
    "ClassificationResult",
    "HuggingFaceClassifier",
    "parse_labels",
    "IMAGE_TASK",
    "TEXT_TASK",
]
