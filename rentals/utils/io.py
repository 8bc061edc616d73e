"""IO helpers for loading the demo CSV data into pandas DataFrames."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

import pandas as pd

from .logging import get_logger

LOGGER = get_logger("utils.io")

DATA_DIR = os.getenv("DATA_DIR", os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), "data"))
UPLOAD_DIR = os.getenv("UPLOAD_DIR", os.path.join(DATA_DIR, "uploads"))


@lru_cache(maxsize=16)
def load_csv(name: str) -> pd.DataFrame:
    """Load a CSV by filename from the data directory."""

    path = name if os.path.isabs(name) else os.path.join(DATA_DIR, name)
    if not os.path.exists(path):
        raise FileNotFoundError(f"CSV not found: {path}")
    LOGGER.debug("loading_csv path=%s", path)
    df = pd.read_csv(path)
    return df


def save_upload(relative_path: str, data: bytes, root: str | None = None) -> str:
    """Write an uploaded file below the upload directory and return its file URI."""

    target = Path(root or UPLOAD_DIR) / relative_path
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(data)
    LOGGER.debug("saved_upload path=%s bytes=%d", target, len(data))
    return target.resolve().as_uri()


__all__ = ["load_csv", "save_upload", "DATA_DIR", "UPLOAD_DIR"]
