# ffmpeg_cmd.py
from __future__ import annotations

from typing import List

from models import MediaKind, MediaSelection


DEFAULT_DEVICE = "/dev/video10"
DEFAULT_TRANSCODER = "ffmpeg"


def _input_args(selection: MediaSelection) -> List[str]:
    if selection.kind is MediaKind.IMAGE:
        return ["-loop", "1", "-re", "-i", selection.path]
    return ["-stream_loop", "-1", "-re", "-i", selection.path]


def build_stream_command(
    selection: MediaSelection,
    device_path: str = DEFAULT_DEVICE,
    transcoder: str = DEFAULT_TRANSCODER,
) -> List[str]:
    """
    Full argv (program first) that loops `selection` into `device_path`.
    """
    if not selection.path:
        raise ValueError("Cannot build a stream command without an input path.")
    if not device_path:
        raise ValueError("Cannot build a stream command without a device path.")

    return [
        transcoder,
        "-nostdin",
        "-hide_banner",
        "-loglevel", "error",
        *_input_args(selection),
        "-vf", "format=yuv420p",
        "-f", "v4l2",
        device_path,
    ]
