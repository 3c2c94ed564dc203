"""
features.py
-----------
Builds the raw (unscaled) model input row from typed user input.
Column order and width come only from MetadataDescriptor.feature_columns:
numeric columns get the raw value, everything else is one-hot resolved.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

import numpy as np

from penalty.config import CATEGORICAL_FIELDS, NUMERIC_FIELDS
from penalty.encoding import encode_one_hot
from penalty.metadata import MetadataDescriptor


@dataclass(frozen=True)
class RawInputs:
    velocity: float
    angle: float
    distance: float
    pressure_level: Optional[str] = None
    dominant_foot: Optional[str] = None

    def numeric_values(self) -> Dict[str, float]:
        """Numeric inputs keyed by metadata column name."""
        return {column: float(getattr(self, field)) for field, column in NUMERIC_FIELDS.items()}

    def categorical_values(self) -> Dict[str, str]:
        """Categorical inputs keyed by metadata column key; absent values are left out."""
        values = {}
        for field, key in CATEGORICAL_FIELDS.items():
            value = getattr(self, field)
            if value is not None:
                values[key] = value
        return values


def build_feature_vector(inputs: RawInputs, descriptor: MetadataDescriptor) -> np.ndarray:
    numeric = inputs.numeric_values()
    categorical = inputs.categorical_values()
    known_numeric = set(NUMERIC_FIELDS.values())

    vec = np.zeros(descriptor.width, dtype=np.float64)
    for i, column in enumerate(descriptor.feature_columns):
        if column in known_numeric:
            vec[i] = numeric.get(column, 0.0)
        else:
            vec[i] = encode_one_hot(column, categorical)
    return vec
