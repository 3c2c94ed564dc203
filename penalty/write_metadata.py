"""
write_metadata.py
-----------------
Writes penaltis_meta.json from a fitted StandardScaler and the ordered
feature columns of the training matrix, so serving reads the exact column
order and scaling used at fit time.

usage: python -m penalty.write_metadata scaler.joblib out.json columns.json
  columns.json: ["Velocidad_kmh", ..., "Pie_Dominante_Izquierdo"]
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import joblib
from rich.console import Console
from sklearn.preprocessing import StandardScaler

from penalty.errors import MetadataError
from penalty.metadata import build_descriptor
from penalty.utils import read_json

console = Console()


def build_metadata_document(
    feature_columns: Sequence[str],
    scaler: StandardScaler,
    numeric_columns: Optional[Sequence[str]] = None,
) -> Dict[str, Any]:
    if numeric_columns is None:
        names = getattr(scaler, "feature_names_in_", None)
        if names is None:
            raise MetadataError("scaler was fitted without column names; pass numeric_columns")
        numeric_columns = [str(n) for n in names]

    n = len(numeric_columns)
    mean = getattr(scaler, "mean_", None)
    if not scaler.with_mean or mean is None:
        # with_mean=False still fills mean_ but transform never subtracts it
        mean = [0.0] * n
    scale = getattr(scaler, "scale_", None)
    if scale is None:
        # with_std=False leaves scale_ unset
        scale = [1.0] * n

    descriptor = build_descriptor(
        list(feature_columns),
        list(numeric_columns),
        [float(m) for m in mean],
        [float(s) for s in scale],
    )
    return descriptor.to_document()


def write_metadata(doc: Dict[str, Any], out_path: Path) -> Path:
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(json.dumps(doc, indent=2), encoding="utf-8")
    return out_path


def main(scaler_path, out_path, columns_path):
    scaler = joblib.load(scaler_path)
    columns = read_json(Path(columns_path))
    doc = build_metadata_document(columns, scaler)
    path = write_metadata(doc, out_path)
    console.print(
        f"[green]Metadata written:[/green] {path} "
        f"(columns={len(doc['feature_columns'])}, numeric={len(doc['scaler']['numeric_cols'])})"
    )
    return path


if __name__ == "__main__":
    if len(sys.argv) != 4:
        sys.exit("usage: python -m penalty.write_metadata scaler.joblib out.json columns.json")
    try:
        main(*sys.argv[1:])
    except MetadataError as e:
        console.print(f"[red]Metadata export failed:[/red] {e}")
        raise SystemExit(1)
