"""Tests for the transcoder command line builder."""

import pytest

from ffmpeg_cmd import build_stream_command
from models import MediaKind, MediaSelection


def _declared(argv):
    """Return (input, sink) the way ffmpeg reads them."""
    inp = argv[argv.index("-i") + 1]
    fmt_at = len(argv) - 1 - argv[::-1].index("-f")
    assert argv[fmt_at + 1] == "v4l2"
    return inp, argv[fmt_at + 2]


@pytest.mark.parametrize(
    "path",
    [
        "/home/user/pic.png",
        "/tmp/with space/and-dash -i.jpg",
        "relative.jpeg",
        "/media/ünïcode/фото.png",
        "-looks-like-a-flag.png",
    ],
)
def test_image_input_and_sink_recoverable(path):
    argv = build_stream_command(MediaSelection(path, MediaKind.IMAGE), "/dev/video7")
    assert _declared(argv) == (path, "/dev/video7")


def test_image_command_shape():
    argv = build_stream_command(MediaSelection("/a.png", MediaKind.IMAGE), "/dev/video10")
    assert argv == [
        "ffmpeg", "-nostdin", "-hide_banner", "-loglevel", "error",
        "-loop", "1", "-re", "-i", "/a.png",
        "-vf", "format=yuv420p",
        "-f", "v4l2", "/dev/video10",
    ]


def test_video_command_loops_container():
    argv = build_stream_command(MediaSelection("/m.mkv", MediaKind.VIDEO), "/dev/video10")
    i = argv.index("-stream_loop")
    assert argv[i + 1] == "-1"
    assert "-loop" not in argv
    assert "-re" in argv
    assert _declared(argv) == ("/m.mkv", "/dev/video10")


def test_stdin_disabled_and_transcoder_configurable():
    argv = build_stream_command(MediaSelection("/m.mp4", MediaKind.VIDEO), "/dev/video10", transcoder="/opt/ff/ffmpeg")
    assert argv[0] == "/opt/ff/ffmpeg"
    assert "-nostdin" in argv


def test_deterministic():
    sel = MediaSelection("/m.mp4", MediaKind.VIDEO)
    assert build_stream_command(sel, "/dev/video1") == build_stream_command(sel, "/dev/video1")


def test_empty_device_rejected():
    with pytest.raises(ValueError):
        build_stream_command(MediaSelection("/m.mp4", MediaKind.VIDEO), "")


def test_empty_path_cannot_be_selected():
    with pytest.raises(ValueError):
        MediaSelection("", MediaKind.VIDEO)
