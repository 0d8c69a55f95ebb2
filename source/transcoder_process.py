# transcoder_process.py
from __future__ import annotations

import logging
from typing import Callable, List, Optional

from PySide6.QtCore import QObject, QProcess


logger = logging.getLogger(__name__)

FinishedCallback = Callable[[int, bool], None]

# Handles whose kill was never confirmed. Deleting a running QProcess blocks in
# its destructor, so they are kept alive until their late exit arrives.
_UNREAPED: List["TranscoderProcess"] = []


class TranscoderProcess:
    """
    One child process handle, backed by QProcess.

    Waits are blocking and bounded; `finished` is delivered through the Qt
    event loop on the owner thread (and also from inside wait_for_finished,
    as QProcess does).
    """

    def __init__(self, parent: Optional[QObject] = None) -> None:
        self._proc = QProcess(parent)
        self._proc.setStandardInputFile(QProcess.nullDevice())
        self._on_finished: Optional[FinishedCallback] = None

        self._proc.finished.connect(self._finished)
        self._proc.readyReadStandardError.connect(self._drain_stderr)
        self._proc.readyReadStandardOutput.connect(self._drain_stdout)

    def set_finished_callback(self, cb: Optional[FinishedCallback]) -> None:
        self._on_finished = cb

    def start(self, argv: List[str]) -> None:
        if not argv:
            raise ValueError("Empty command line.")
        logger.info("Starting: %s", " ".join(argv))
        self._proc.start(argv[0], argv[1:])

    def wait_for_started(self, timeout_ms: int) -> bool:
        return bool(self._proc.waitForStarted(timeout_ms))

    def failed_to_start(self) -> bool:
        return self._proc.error() == QProcess.ProcessError.FailedToStart

    def is_running(self) -> bool:
        return self._proc.state() != QProcess.ProcessState.NotRunning

    def pid(self) -> int:
        return int(self._proc.processId())

    def error_string(self) -> str:
        return self._proc.errorString()

    def terminate(self) -> None:
        self._proc.terminate()

    def kill(self) -> None:
        self._proc.kill()

    def wait_for_finished(self, timeout_ms: Optional[int]) -> bool:
        if not self.is_running():
            return True
        return bool(self._proc.waitForFinished(-1 if timeout_ms is None else timeout_ms))

    def release(self) -> None:
        if self.is_running():
            logger.warning("Keeping unreaped transcoder pid %s", self.pid())
            _UNREAPED.append(self)
            self._on_finished = self._reaped_late
            return
        self._on_finished = None
        self._proc.deleteLater()

    def _reaped_late(self, exit_code: int, crashed: bool) -> None:
        logger.info("Unreaped transcoder exited late: code=%s crashed=%s", exit_code, crashed)
        self._on_finished = None
        if self in _UNREAPED:
            _UNREAPED.remove(self)
        self._proc.deleteLater()

    def _finished(self, exit_code: int, exit_status: QProcess.ExitStatus) -> None:
        crashed = exit_status == QProcess.ExitStatus.CrashExit
        logger.debug("Transcoder finished: code=%s crashed=%s", exit_code, crashed)
        cb = self._on_finished
        if cb is not None:
            cb(int(exit_code), crashed)

    def _drain_stderr(self) -> None:
        data = bytes(self._proc.readAllStandardError()).decode("utf-8", errors="replace").strip()
        for line in data.splitlines():
            logger.warning("ffmpeg: %s", line)

    def _drain_stdout(self) -> None:
        data = bytes(self._proc.readAllStandardOutput()).decode("utf-8", errors="replace").strip()
        for line in data.splitlines():
            logger.debug("ffmpeg: %s", line)


def qt_process_factory(parent: Optional[QObject] = None) -> Callable[[], TranscoderProcess]:
    return lambda: TranscoderProcess(parent)
