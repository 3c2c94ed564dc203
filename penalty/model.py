"""
model.py
--------
Joblib-backed model capability: predict(vector) -> probability of a goal.

The artifact may be a bare estimator or a package dict with a "model" key
(plus whatever schema bits the training run stored next to it).
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Any, Optional, Sequence

import joblib
import numpy as np

from penalty.errors import ModelLoadError

logger = logging.getLogger(__name__)

PREDICT_METHODS = ("predict_proba", "decision_function", "predict")


class ModelHandle:
    def __init__(self, model: Any, source: Optional[str] = None):
        if not any(hasattr(model, m) for m in PREDICT_METHODS):
            raise ModelLoadError(
                f"{type(model).__name__} has none of {', '.join(PREDICT_METHODS)}"
            )
        self.model = model
        self.source = source

    @property
    def input_width(self) -> Optional[int]:
        width = getattr(self.model, "n_features_in_", None)
        return int(width) if width is not None else None

    def predict(self, vector: Sequence[float]) -> float:
        row = np.asarray(vector, dtype=np.float64).reshape(1, -1)
        # proba if available, else decision_function, else predict
        if hasattr(self.model, "predict_proba"):
            return float(self.model.predict_proba(row)[0][1])
        if hasattr(self.model, "decision_function"):
            raw = float(np.asarray(self.model.decision_function(row)).reshape(-1)[0])
            if raw >= 0:
                return 1.0 / (1.0 + math.exp(-raw))
            z = math.exp(raw)
            return z / (1.0 + z)
        return float(np.asarray(self.model.predict(row)).reshape(-1)[0])


def load_model(path: Path) -> ModelHandle:
    path = Path(path)
    if not path.exists():
        raise ModelLoadError(f"model file not found: {path}")
    try:
        obj = joblib.load(path)
    except Exception as e:
        raise ModelLoadError(f"failed to load {path}: {e}") from e

    if isinstance(obj, dict):
        if "model" not in obj:
            raise ModelLoadError(f"model package {path} has no 'model' entry")
        obj = obj["model"]

    handle = ModelHandle(obj, source=str(path))
    logger.info(
        "Loaded model %s from %s (input_width=%s)",
        type(obj).__name__, path, handle.input_width,
    )
    return handle
