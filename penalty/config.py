# Penalty inference contract + runtime settings
#
# Model input comes from penaltis_meta.json (feature_columns + scaler).
# The raw form fields below map onto the column keys used at training time:
#   - velocity        -> Velocidad_kmh        (float, km/h)
#   - angle           -> Angulo_grados        (float, degrees)
#   - distance        -> Distancia_Portero_m  (float, meters)
#   - pressure_level  -> Presion_Partido      (str: {Alta, Media, Baja})
#   - dominant_foot   -> Pie_Dominante        (str: {Derecho, Izquierdo})
#
# Paths / threshold / timeout can be overridden from the environment.

import os
from pathlib import Path

NUMERIC_FIELDS = {
    "velocity": "Velocidad_kmh",
    "angle": "Angulo_grados",
    "distance": "Distancia_Portero_m",
}

CATEGORICAL_FIELDS = {
    "pressure_level": "Presion_Partido",
    "dominant_foot": "Pie_Dominante",
}

PRESSURE_LEVELS = ("Alta", "Media", "Baja")
DOMINANT_FEET = ("Derecho", "Izquierdo")

# inclusive bounds, checked in this order
RANGES = {
    "velocity": (70.0, 115.0),
    "angle": (5.0, 45.0),
    "distance": (0.4, 1.2),
}

FIELD_LABELS = {
    "velocity": "Velocidad",
    "angle": "Ángulo",
    "distance": "Distancia",
}

GOAL_LABEL = "GOAL"
MISS_LABEL = "MISS"

META_PATH = os.getenv("PENALTY_META_PATH", "models/penaltis_meta.json")
MODEL_PATH = Path(os.getenv("PENALTY_MODEL_PATH", "models/model.joblib"))
DECISION_THRESHOLD = float(os.getenv("PENALTY_THRESHOLD", "0.5"))
META_FETCH_TIMEOUT = float(os.getenv("PENALTY_META_TIMEOUT", "30"))

LOG_DIR = Path(os.getenv("PENALTY_LOG_DIR", "logs"))
