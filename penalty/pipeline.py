"""
pipeline.py
-----------
Startup loading + per-request prediction.

load_context() reads metadata and model once and never raises for a missing
or broken resource: failures are recorded and the context stays not ready.
PredictionPipeline holds only that immutable context, so concurrent calls
are independent.

    ctx = load_context("models/penaltis_meta.json", "models/model.joblib")
    result = PredictionPipeline(ctx).predict({
        "velocity": 95, "angle": 20, "distance": 0.8,
        "pressure_level": "Alta", "dominant_foot": "Derecho",
    })
    print(result.render())   # GOAL — Probabilidad de gol: 73.0%
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import numpy as np

from penalty.config import (
    DECISION_THRESHOLD,
    GOAL_LABEL,
    META_FETCH_TIMEOUT,
    META_PATH,
    MISS_LABEL,
    MODEL_PATH,
    RANGES,
)
from penalty.errors import (
    InputValidationError,
    MetadataError,
    ModelLoadError,
    NotReadyError,
    PredictionError,
)
from penalty.features import RawInputs, build_feature_vector
from penalty.metadata import MetadataDescriptor, load_metadata
from penalty.model import load_model
from penalty.normalize import normalize_vector
from penalty.validation import validate_inputs

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PredictionResult:
    probability: float
    label: str

    def render(self) -> str:
        return f"{self.label} — Probabilidad de gol: {self.probability * 100:.1f}%"


@dataclass(frozen=True)
class PredictionContext:
    metadata: Optional[MetadataDescriptor] = None
    model: Optional[Any] = None
    errors: Tuple[str, ...] = ()
    metadata_source: Optional[str] = None
    metadata_sha256: Optional[str] = None
    model_path: Optional[str] = None

    @property
    def ready(self) -> bool:
        return self.metadata is not None and self.model is not None and not self.errors

    def status(self) -> Dict[str, Any]:
        return {
            "ready": self.ready,
            "errors": list(self.errors),
            "metadata_source": self.metadata_source,
            "metadata_sha256": self.metadata_sha256,
            "model_path": self.model_path,
        }


def load_context(
    meta_source: str = META_PATH,
    model_path: Path = MODEL_PATH,
    timeout: float = META_FETCH_TIMEOUT,
) -> PredictionContext:
    errors = []

    metadata, sha = None, None
    try:
        metadata, sha = load_metadata(meta_source, timeout=timeout)
    except MetadataError as e:
        logger.error("Metadata load failed: %s", e)
        errors.append(f"metadata: {e}")

    model = None
    try:
        model = load_model(model_path)
    except ModelLoadError as e:
        logger.error("Model load failed: %s", e)
        errors.append(f"model: {e}")

    if metadata is not None and model is not None:
        width = model.input_width
        if width is not None and width != metadata.width:
            msg = (
                f"model expects {width} inputs but metadata lists "
                f"{metadata.width} feature columns"
            )
            logger.error("Schema mismatch: %s", msg)
            errors.append(f"schema: {msg}")

    ctx = PredictionContext(
        metadata=metadata,
        model=model,
        errors=tuple(errors),
        metadata_source=str(meta_source),
        metadata_sha256=sha,
        model_path=str(model_path),
    )
    if ctx.ready:
        logger.info("Prediction context ready (%d feature columns)", metadata.width)
    else:
        logger.warning("Prediction context NOT ready: %s", "; ".join(errors))
    return ctx


def classify(probability: float, threshold: float = DECISION_THRESHOLD) -> str:
    return GOAL_LABEL if probability >= threshold else MISS_LABEL


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None


class PredictionPipeline:
    def __init__(
        self,
        context: PredictionContext,
        ranges: Mapping[str, Tuple[float, float]] = RANGES,
        threshold: float = DECISION_THRESHOLD,
    ):
        self.context = context
        self.ranges = ranges
        self.threshold = threshold

    def _require_ready(self) -> None:
        if not self.context.ready:
            raise NotReadyError(self.context.errors)

    def build_vector(self, values: Mapping[str, Any]) -> np.ndarray:
        """Validate form values and return the normalized model input row."""
        self._require_ready()
        check = validate_inputs(values, self.ranges)
        if not check.ok:
            raise InputValidationError(check)

        inputs = RawInputs(
            velocity=check.values["velocity"],
            angle=check.values["angle"],
            distance=check.values["distance"],
            pressure_level=_optional_text(values.get("pressure_level")),
            dominant_foot=_optional_text(values.get("dominant_foot")),
        )
        raw = build_feature_vector(inputs, self.context.metadata)
        return normalize_vector(raw, self.context.metadata)

    def predict(self, values: Mapping[str, Any]) -> PredictionResult:
        vector = self.build_vector(values)
        try:
            probability = float(self.context.model.predict(vector))
        except Exception as e:
            logger.exception("Model inference failed")
            raise PredictionError(f"model inference failed: {e}") from e

        if not math.isfinite(probability) or not 0.0 <= probability <= 1.0:
            raise PredictionError(f"model returned {probability!r}, expected a probability in [0, 1]")

        return PredictionResult(probability=probability, label=classify(probability, self.threshold))
