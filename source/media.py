# media.py
from __future__ import annotations

from pathlib import Path
from typing import Tuple

from models import MediaKind, MediaSelection


IMAGE_EXTENSIONS: Tuple[str, ...] = ("png", "jpg", "jpeg")
VIDEO_EXTENSIONS: Tuple[str, ...] = ("mp4", "mkv", "avi")


def _globs(exts: Tuple[str, ...]) -> str:
    return " ".join(f"*.{e}" for e in exts)


FILE_DIALOG_FILTERS = ";;".join(
    [
        f"Media Files ({_globs(IMAGE_EXTENSIONS + VIDEO_EXTENSIONS)})",
        f"Images ({_globs(IMAGE_EXTENSIONS)})",
        f"Videos ({_globs(VIDEO_EXTENSIONS)})",
    ]
)


def kind_for_path(path: str) -> MediaKind:
    ext = Path(path).suffix.lstrip(".").lower()
    return MediaKind.IMAGE if ext in IMAGE_EXTENSIONS else MediaKind.VIDEO


def selection_for_path(path: str) -> MediaSelection:
    return MediaSelection(path=path, kind=kind_for_path(path))
