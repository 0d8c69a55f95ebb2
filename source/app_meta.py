# app_meta.py
from __future__ import annotations

from importlib import metadata


APP_NAME = "Virtual Camera"
DIST_NAME = "virtualcam-panel"


def detect_version() -> str:
    try:
        return metadata.version(DIST_NAME)
    except metadata.PackageNotFoundError:
        return "0.0.0"
