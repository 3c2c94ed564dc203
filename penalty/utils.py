"""
utils.py
--------
Small helpers shared by the loaders and entry points:
log file setup, JSON reading, hashing.
"""

from __future__ import annotations

import hashlib
import json
import logging
from pathlib import Path
from typing import Any

from penalty.config import LOG_DIR


def setup_logging(name: str = "penalty", level: int = logging.INFO) -> Path:
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    log_file = LOG_DIR / f"{name}.log"
    logging.basicConfig(
        filename=str(log_file),
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
    return log_file


def read_json(path: Path) -> Any:
    return json.loads(Path(path).read_text(encoding="utf-8"))


def sha256_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()

