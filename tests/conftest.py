import json
from pathlib import Path

import joblib
import numpy as np
import pytest
from sklearn.linear_model import LogisticRegression

from penalty.metadata import parse_metadata
from penalty.pipeline import PredictionContext


FEATURE_COLUMNS = [
    "Velocidad_kmh",
    "Angulo_grados",
    "Distancia_Portero_m",
    "Presion_Partido_Alta",
    "Presion_Partido_Media",
    "Presion_Partido_Baja",
    "Pie_Dominante_Derecho",
    "Pie_Dominante_Izquierdo",
]
NUMERIC_COLUMNS = ["Velocidad_kmh", "Angulo_grados", "Distancia_Portero_m"]
MEANS = [92.5, 25.0, 0.8]
SCALES = [12.0, 10.0, 0.2]

GOOD_INPUTS = {
    "velocity": 95,
    "angle": 20,
    "distance": 0.8,
    "pressure_level": "Alta",
    "dominant_foot": "Derecho",
}


def meta_doc(columns=None, numeric=None, mean=None, scale=None):
    return {
        "feature_columns": list(columns or FEATURE_COLUMNS),
        "scaler": {
            "numeric_cols": list(numeric or NUMERIC_COLUMNS),
            "mean": list(mean or MEANS),
            "scale": list(scale or SCALES),
        },
    }


def write_json(path: Path, obj) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(obj), encoding="utf-8")
    return path


def fit_logreg(n_features: int) -> LogisticRegression:
    rng = np.random.default_rng(0)
    X = rng.normal(size=(60, n_features))
    y = (X[:, 0] > 0).astype(int)
    return LogisticRegression().fit(X, y)


class FakeModel:
    """Stands in for the loaded model capability and records every call."""

    def __init__(self, probability=0.73):
        self.probability = probability
        self.calls = []

    def predict(self, vector):
        self.calls.append(np.array(vector, dtype=float))
        return self.probability


@pytest.fixture
def descriptor():
    return parse_metadata(meta_doc())


@pytest.fixture
def fake_model():
    return FakeModel()


@pytest.fixture
def ready_context(descriptor, fake_model):
    return PredictionContext(metadata=descriptor, model=fake_model)


@pytest.fixture
def artifacts(tmp_path):
    """Metadata JSON + matching 8-input joblib model on disk."""
    meta_path = write_json(tmp_path / "models" / "penaltis_meta.json", meta_doc())
    model_path = tmp_path / "models" / "model.joblib"
    joblib.dump(fit_logreg(len(FEATURE_COLUMNS)), model_path)
    return meta_path, model_path
