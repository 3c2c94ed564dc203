"""
predict_cli.py
--------------
Command-line front-end for a single penalty prediction.

  python -m penalty.predict_cli --velocity 95 --angle 20 --distance 0.8 \
      --pressure Alta --foot Derecho

Exit codes: 0 ok, 1 invalid input, 2 model/metadata not loaded, 3 inference error.
"""

from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from rich.console import Console
from rich.markup import escape

from penalty.config import DOMINANT_FEET, GOAL_LABEL, META_PATH, MODEL_PATH, PRESSURE_LEVELS
from penalty.errors import InputValidationError, NotReadyError, PredictionError
from penalty.pipeline import PredictionPipeline, load_context
from penalty.utils import setup_logging

console = Console()


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Predict whether a penalty kick ends in a goal.")
    p.add_argument("--velocity", required=True, help="shot velocity (km/h)")
    p.add_argument("--angle", required=True, help="shot angle (degrees)")
    p.add_argument("--distance", required=True, help="distance to goalkeeper (m)")
    p.add_argument("--pressure", required=True, choices=PRESSURE_LEVELS)
    p.add_argument("--foot", required=True, choices=DOMINANT_FEET)
    p.add_argument("--meta", default=META_PATH, help="metadata JSON path or URL")
    p.add_argument("--model", default=str(MODEL_PATH), help="joblib model artifact")
    p.add_argument("--show-vector", action="store_true", help="print the normalized input row")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging("predict_cli")

    ctx = load_context(args.meta, args.model)
    if not ctx.ready:
        for err in ctx.errors:
            console.print(f"[yellow]{escape(err)}[/yellow]")

    pipeline = PredictionPipeline(ctx)
    values = {
        "velocity": args.velocity,
        "angle": args.angle,
        "distance": args.distance,
        "pressure_level": args.pressure,
        "dominant_foot": args.foot,
    }

    try:
        if args.show_vector:
            vec = pipeline.build_vector(values)
            for name, v in zip(ctx.metadata.feature_columns, vec):
                console.print(f"  {name:<28} {v: .4f}")
        result = pipeline.predict(values)
    except NotReadyError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        return 2
    except InputValidationError as e:
        logging.info("Rejected input: %s", e.result.message)
        console.print(f"[yellow]{escape(e.result.message)}[/yellow]")
        return 1
    except PredictionError as e:
        console.print(f"[red]Prediction failed:[/red] {escape(str(e))}")
        return 3

    color = "green" if result.label == GOAL_LABEL else "red"
    console.print(f"[{color}]{escape(result.render())}[/{color}]")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
