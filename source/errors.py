# errors.py
from __future__ import annotations

from enum import Enum
from typing import Dict, Tuple


class ErrorKind(Enum):
    NO_FILE_SELECTED = "no_file_selected"
    SPAWN_FAILED = "spawn_failed"
    START_TIMEOUT = "start_timeout"
    STOP_TIMEOUT = "stop_timeout"
    KILL_TIMEOUT = "kill_timeout"
    MODULE_CHECK_FAILED = "module_check_failed"
    MODULE_LOAD_FAILED = "module_load_failed"


class VirtualCamError(RuntimeError):
    kind: ErrorKind

    def __init__(self, message: str = "") -> None:
        super().__init__(message or user_message(self.kind)[1])


class ModuleCheckFailed(VirtualCamError):
    kind = ErrorKind.MODULE_CHECK_FAILED


class ModuleLoadFailed(VirtualCamError):
    kind = ErrorKind.MODULE_LOAD_FAILED


_MESSAGES: Dict[ErrorKind, Tuple[str, str]] = {
    ErrorKind.NO_FILE_SELECTED: (
        "No file selected",
        "Please select an image or video file first.",
    ),
    ErrorKind.SPAWN_FAILED: (
        "Failed to start ffmpeg",
        "The transcoder could not be launched. Check that ffmpeg is installed and in PATH.",
    ),
    ErrorKind.START_TIMEOUT: (
        "ffmpeg did not start",
        "The transcoder did not report that it started in time.",
    ),
    ErrorKind.STOP_TIMEOUT: (
        "ffmpeg did not stop",
        "The transcoder ignored the stop request and had to be killed.",
    ),
    ErrorKind.KILL_TIMEOUT: (
        "ffmpeg may still be running",
        "The transcoder could not be confirmed stopped. The camera device may stay busy for a moment.",
    ),
    ErrorKind.MODULE_CHECK_FAILED: (
        "Module check failed",
        "Could not list loaded kernel modules (lsmod).",
    ),
    ErrorKind.MODULE_LOAD_FAILED: (
        "Failed to load v4l2loopback",
        "The kernel module could not be loaded.",
    ),
}


def user_message(kind: ErrorKind) -> Tuple[str, str]:
    """Title and body text shown to the user for one failure kind."""
    return _MESSAGES[kind]
