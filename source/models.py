# models.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from errors import ErrorKind


class MediaKind(Enum):
    IMAGE = "image"
    VIDEO = "video"


class StreamState(Enum):
    IDLE = "idle"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"
    RESTART_PENDING = "restart_pending"


class EventKind(Enum):
    STREAMING = "streaming"
    STOPPED = "stopped"
    START_FAILED = "start_failed"
    STOP_FAILED = "stop_failed"
    APPLYING_NEW_FILE = "applying_new_file"


@dataclass(frozen=True)
class MediaSelection:
    path: str
    kind: MediaKind

    def __post_init__(self) -> None:
        if not self.path:
            raise ValueError("MediaSelection path must not be empty.")

    @property
    def is_image(self) -> bool:
        return self.kind is MediaKind.IMAGE


@dataclass(frozen=True)
class StreamEvent:
    kind: EventKind
    error: Optional[ErrorKind] = None
    reason: str = ""  # free text for logs/tooltips, never parsed
