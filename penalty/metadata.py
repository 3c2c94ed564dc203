"""
metadata.py
-----------
Loads the preprocessing metadata document (penaltis_meta.json) and turns it
into an immutable MetadataDescriptor: the ordered feature columns the model
expects plus the z-score parameters of the numeric columns.

Two document layouts are accepted:
- current: {"feature_columns": [...], "scaler": {"numeric_cols", "mean", "scale"}}
- legacy:  {"input_order": [...], "scaler_mean": [...], "scaler_scale": [...]}
  where mean/scale apply to the leading columns of input_order.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
import pandera as pa
import requests
from pandera import Column, Check

from penalty.config import META_FETCH_TIMEOUT
from penalty.errors import MetadataError
from penalty.utils import sha256_bytes

import warnings
warnings.filterwarnings("ignore", category=FutureWarning, module="pandera")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MetadataDescriptor:
    feature_columns: Tuple[str, ...]
    numeric_columns: Tuple[str, ...] = ()
    means: Tuple[float, ...] = ()
    scales: Tuple[float, ...] = ()
    has_scaler: bool = False

    @property
    def width(self) -> int:
        return len(self.feature_columns)

    @property
    def categorical_columns(self) -> Tuple[str, ...]:
        numeric = set(self.numeric_columns)
        return tuple(c for c in self.feature_columns if c not in numeric)

    def numeric_positions(self) -> List[Tuple[int, float, float]]:
        """(feature index, mean, scale) for every numeric column, scaler order."""
        index = {c: i for i, c in enumerate(self.feature_columns)}
        return [
            (index[c], m, s)
            for c, m, s in zip(self.numeric_columns, self.means, self.scales)
        ]

    def to_document(self) -> Dict[str, Any]:
        doc: Dict[str, Any] = {"feature_columns": list(self.feature_columns)}
        if self.has_scaler:
            doc["scaler"] = {
                "numeric_cols": list(self.numeric_columns),
                "mean": list(self.means),
                "scale": list(self.scales),
            }
        return doc


def build_scaler_schema() -> pa.DataFrameSchema:
    finite = Check(lambda s: np.isfinite(s), error="must be finite")
    return pa.DataFrameSchema(
        columns={
            "numeric_col": Column(pa.String, nullable=False, unique=True),
            "mean": Column(pa.Float, nullable=False, checks=finite),
            "scale": Column(pa.Float, nullable=False, checks=finite),
        },
        coerce=True,
        strict=True,
    )


def _as_list(value: Any, name: str) -> List[Any]:
    if not isinstance(value, (list, tuple)):
        raise MetadataError(f"'{name}' must be a list, got {type(value).__name__}")
    return list(value)


def build_descriptor(
    feature_columns: Sequence[Any],
    numeric_columns: Optional[Sequence[Any]] = None,
    means: Optional[Sequence[Any]] = None,
    scales: Optional[Sequence[Any]] = None,
) -> MetadataDescriptor:
    """Validate raw metadata pieces and freeze them into a descriptor.

    Passing numeric_columns=None means the document had no scaler section.
    """
    columns = _as_list(feature_columns, "feature_columns")
    if not columns:
        raise MetadataError("'feature_columns' is empty")
    bad = [c for c in columns if not isinstance(c, str) or not c]
    if bad:
        raise MetadataError(f"feature column names must be non-empty strings: {bad}")
    dupes = sorted({c for c in columns if columns.count(c) > 1})
    if dupes:
        raise MetadataError(f"duplicate feature columns: {dupes}")

    if numeric_columns is None:
        return MetadataDescriptor(feature_columns=tuple(columns))

    numeric = _as_list(numeric_columns, "numeric_cols")
    mean = _as_list(means, "mean")
    scale = _as_list(scales, "scale")
    if not (len(numeric) == len(mean) == len(scale)):
        raise MetadataError(
            f"scaler lengths differ: numeric_cols={len(numeric)}, "
            f"mean={len(mean)}, scale={len(scale)}"
        )

    table = pd.DataFrame({"numeric_col": numeric, "mean": mean, "scale": scale})
    if len(table):
        try:
            table = build_scaler_schema().validate(table, lazy=True)
        except pa.errors.SchemaErrors as err:
            logger.error("Scaler validation failed:\n%s", err.failure_cases)
            raise MetadataError(
                f"invalid scaler section: {err.failure_cases.to_dict(orient='records')}"
            ) from err

    numeric_names = [str(c) for c in table["numeric_col"]]
    unknown = [c for c in numeric_names if c not in columns]
    if unknown:
        raise MetadataError(f"numeric_cols not present in feature_columns: {unknown}")

    zero = [c for c, s in zip(numeric_names, table["scale"]) if s == 0]
    if zero:
        logger.warning("Zero scale for %s; these columns will be centered only", zero)

    return MetadataDescriptor(
        feature_columns=tuple(columns),
        numeric_columns=tuple(numeric_names),
        means=tuple(float(m) for m in table["mean"]),
        scales=tuple(float(s) for s in table["scale"]),
        has_scaler=True,
    )


def parse_metadata(doc: Any) -> MetadataDescriptor:
    if not isinstance(doc, dict):
        raise MetadataError("metadata document must be a JSON object")

    if "feature_columns" in doc:
        scaler = doc.get("scaler")
        if scaler is None:
            logger.warning("Metadata has no scaler section; numeric features stay unscaled")
            return build_descriptor(doc["feature_columns"])
        if not isinstance(scaler, dict):
            raise MetadataError("'scaler' must be an object")
        missing = [k for k in ("numeric_cols", "mean", "scale") if k not in scaler]
        if missing:
            raise MetadataError(f"scaler missing keys: {missing}")
        return build_descriptor(
            doc["feature_columns"], scaler["numeric_cols"], scaler["mean"], scaler["scale"]
        )

    if "input_order" in doc:
        logger.warning("Legacy metadata layout (input_order/scaler_mean/scaler_scale)")
        columns = _as_list(doc["input_order"], "input_order")
        means = doc.get("scaler_mean")
        scales = doc.get("scaler_scale")
        if means is None or scales is None:
            return build_descriptor(columns)
        means = _as_list(means, "scaler_mean")
        if len(means) > len(columns):
            raise MetadataError(
                f"scaler_mean has {len(means)} entries but input_order only {len(columns)}"
            )
        return build_descriptor(columns, columns[: len(means)], means, scales)

    raise MetadataError("metadata document has neither 'feature_columns' nor 'input_order'")


def fetch_metadata_document(
    source: str, timeout: float = META_FETCH_TIMEOUT
) -> Tuple[Any, str]:
    """Read the metadata document from a path or http(s) URL.

    Returns (parsed JSON, sha256 of the raw bytes).
    """
    source = str(source)
    try:
        if source.startswith(("http://", "https://")):
            resp = requests.get(source, timeout=timeout)
            resp.raise_for_status()
            raw = resp.content
        else:
            path = Path(source)
            if not path.exists():
                raise MetadataError(f"metadata file not found: {path}")
            raw = path.read_bytes()
    except requests.RequestException as e:
        raise MetadataError(f"metadata fetch failed: {e}") from e
    except OSError as e:
        raise MetadataError(f"metadata read failed: {e}") from e

    try:
        doc = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MetadataError(f"metadata is not valid JSON: {e}") from e
    return doc, sha256_bytes(raw)


def load_metadata(
    source: str, timeout: float = META_FETCH_TIMEOUT
) -> Tuple[MetadataDescriptor, str]:
    doc, sha = fetch_metadata_document(source, timeout=timeout)
    descriptor = parse_metadata(doc)
    logger.info(
        "Loaded metadata from %s (columns=%d, numeric=%d, sha256=%s...)",
        source, descriptor.width, len(descriptor.numeric_columns), sha[:12],
    )
    return descriptor, sha
