"""Z-score scaling of the numeric positions of a feature vector."""

from __future__ import annotations

import numpy as np

from penalty.metadata import MetadataDescriptor


def _effective_scale(scale: float) -> float:
    # zero scale would divide by zero; treat as unit scale
    return scale if scale != 0 else 1.0


def _check_width(vector: np.ndarray, descriptor: MetadataDescriptor) -> np.ndarray:
    arr = np.asarray(vector, dtype=np.float64)
    if arr.shape != (descriptor.width,):
        raise ValueError(
            f"vector shape {arr.shape} does not match {descriptor.width} feature columns"
        )
    return arr


def normalize_vector(vector, descriptor: MetadataDescriptor) -> np.ndarray:
    """Return a scaled copy; categorical positions pass through untouched.

    Without scaler information the vector comes back unchanged.
    """
    out = _check_width(vector, descriptor).copy()
    if not descriptor.has_scaler:
        return out
    for idx, mean, scale in descriptor.numeric_positions():
        out[idx] = (out[idx] - mean) / _effective_scale(scale)
    return out


def denormalize_vector(vector, descriptor: MetadataDescriptor) -> np.ndarray:
    out = _check_width(vector, descriptor).copy()
    if not descriptor.has_scaler:
        return out
    for idx, mean, scale in descriptor.numeric_positions():
        out[idx] = out[idx] * _effective_scale(scale) + mean
    return out
