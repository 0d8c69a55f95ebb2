# supervisor.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from errors import ErrorKind, user_message
from ffmpeg_cmd import DEFAULT_DEVICE, DEFAULT_TRANSCODER, build_stream_command
from models import EventKind, MediaSelection, StreamEvent, StreamState


logger = logging.getLogger(__name__)

EventListener = Callable[[StreamEvent], None]
StateListener = Callable[[StreamState], None]


@dataclass(frozen=True)
class SupervisorSettings:
    transcoder: str = DEFAULT_TRANSCODER
    device_path: str = DEFAULT_DEVICE
    start_timeout_ms: int = 3000
    stop_grace_ms: int = 1000
    kill_timeout_ms: int = 3000
    settle_delay_ms: int = 150


class StreamSupervisor:
    """
    Owns the single transcoder child and drives it through
    IDLE -> STARTING -> RUNNING -> STOPPING -> IDLE, plus RESTART_PENDING
    while a newly selected file is being applied.

    `process_factory()` must return a fresh handle with the TranscoderProcess
    interface; `scheduler.call_later(ms, fn)` must return an object with
    `cancel()`. Everything runs on the owner thread.
    """

    def __init__(
        self,
        process_factory: Callable[[], Any],
        scheduler: Any,
        settings: Optional[SupervisorSettings] = None,
    ) -> None:
        self._factory = process_factory
        self._scheduler = scheduler
        self.settings = settings or SupervisorSettings()

        self._state = StreamState.IDLE
        self._selection: Optional[MediaSelection] = None
        self._pending: Optional[MediaSelection] = None
        self._proc: Any = None
        self._restart_task: Any = None
        self._stop_after_start = False

        self._listeners: List[EventListener] = []
        self._state_listeners: List[StateListener] = []

    # -- observation -------------------------------------------------------

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def selection(self) -> Optional[MediaSelection]:
        return self._selection

    @property
    def pending_selection(self) -> Optional[MediaSelection]:
        return self._pending

    @property
    def has_live_process(self) -> bool:
        return self._proc is not None

    def add_listener(self, cb: EventListener) -> None:
        self._listeners.append(cb)

    def add_state_listener(self, cb: StateListener) -> None:
        self._state_listeners.append(cb)

    def _set_state(self, state: StreamState) -> None:
        if state is self._state:
            return
        logger.debug("Stream state: %s -> %s", self._state.value, state.value)
        self._state = state
        for cb in list(self._state_listeners):
            cb(state)

    def _emit(self, kind: EventKind, error: Optional[ErrorKind] = None, reason: str = "") -> None:
        ev = StreamEvent(kind=kind, error=error, reason=reason)
        for cb in list(self._listeners):
            cb(ev)

    # -- user intents ------------------------------------------------------

    def file_changed(self, selection: MediaSelection) -> None:
        self._selection = selection
        st = self._state

        if st is StreamState.RUNNING:
            logger.info("Applying new file while streaming: %s", selection.path)
            self._pending = selection
            self._set_state(StreamState.RESTART_PENDING)
            self._emit(EventKind.APPLYING_NEW_FILE)
            if not self._stop_process():
                return
            if self._pending is None:
                # stop() arrived while the old process was being reaped
                self._set_state(StreamState.IDLE)
                self._emit(EventKind.STOPPED)
                return
            self._schedule_restart()
            return

        if st is StreamState.RESTART_PENDING:
            self._pending = selection
            if self._proc is None:
                self._schedule_restart()

    select_file = file_changed

    def start(self) -> bool:
        st = self._state
        if st is not StreamState.IDLE:
            logger.debug("start() ignored in state %s", st.value)
            return st is not StreamState.STOPPING

        if self._selection is None:
            self._emit(
                EventKind.START_FAILED,
                ErrorKind.NO_FILE_SELECTED,
                user_message(ErrorKind.NO_FILE_SELECTED)[1],
            )
            return False

        return self._spawn(self._selection)

    def stop(self) -> bool:
        st = self._state

        if st is StreamState.IDLE or st is StreamState.STOPPING:
            return True

        if st is StreamState.STARTING:
            self._stop_after_start = True
            return True

        if st is StreamState.RESTART_PENDING:
            self._cancel_restart()
            self._pending = None
            if self._proc is None:
                self._set_state(StreamState.IDLE)
                self._emit(EventKind.STOPPED)
            return True

        self._set_state(StreamState.STOPPING)
        if not self._stop_process():
            return False
        self._set_state(StreamState.IDLE)
        self._emit(EventKind.STOPPED)
        return True

    def toggle(self) -> bool:
        if self._state is StreamState.IDLE:
            return self.start()
        return self.stop()

    def shutdown(self) -> None:
        """Kill and reap any child without a timeout. Used when the panel closes."""
        self._cancel_restart()
        self._pending = None
        self._stop_after_start = False

        proc = self._proc
        if proc is not None:
            proc.set_finished_callback(None)
            if proc.is_running():
                logger.info("Shutting down: killing transcoder")
                proc.kill()
                proc.wait_for_finished(None)
            self._drop_process()

        self._set_state(StreamState.IDLE)

    # -- process control ---------------------------------------------------

    def _spawn(self, selection: MediaSelection) -> bool:
        s = self.settings
        argv = build_stream_command(selection, s.device_path, s.transcoder)

        self._stop_after_start = False
        self._set_state(StreamState.STARTING)

        proc = self._factory()
        self._proc = proc
        proc.set_finished_callback(lambda code, crashed: self._on_process_finished(proc, code, crashed))

        spawn_error = ""
        try:
            proc.start(argv)
            started = proc.wait_for_started(s.start_timeout_ms)
        except OSError as e:
            started = False
            spawn_error = str(e)

        if not started:
            if spawn_error or proc.failed_to_start():
                kind = ErrorKind.SPAWN_FAILED
                reason = spawn_error or proc.error_string()
            else:
                kind = ErrorKind.START_TIMEOUT
                reason = f"no start confirmation within {s.start_timeout_ms} ms"
            logger.error("%s: %s", kind.value, reason)
            self._discard(proc)
            self._set_state(StreamState.IDLE)
            self._emit(EventKind.START_FAILED, kind, reason)
            return False

        logger.info("Streaming %s to %s (pid %s)", selection.path, s.device_path, proc.pid())
        self._set_state(StreamState.RUNNING)
        self._emit(EventKind.STREAMING)

        if self._state is not StreamState.RUNNING or self._proc is not proc:
            return True

        if self._stop_after_start:
            self._stop_after_start = False
            self.stop()
        elif self._selection is not None and self._selection != selection:
            self.file_changed(self._selection)
        return True

    def _stop_process(self) -> bool:
        """Terminate, escalate to kill, and reap. False only when the kill is unconfirmed."""
        s = self.settings
        proc = self._proc
        if proc is None:
            return True

        proc.terminate()
        if not proc.wait_for_finished(s.stop_grace_ms):
            logger.warning(
                "%s: transcoder still running after %s ms, killing",
                ErrorKind.STOP_TIMEOUT.value,
                s.stop_grace_ms,
            )
            proc.kill()
            if not proc.wait_for_finished(s.kill_timeout_ms):
                reason = f"pid {proc.pid()} not reaped within {s.kill_timeout_ms} ms after kill"
                logger.error("%s: %s", ErrorKind.KILL_TIMEOUT.value, reason)
                self._drop_process()
                self._pending = None
                self._set_state(StreamState.IDLE)
                self._emit(EventKind.STOP_FAILED, ErrorKind.KILL_TIMEOUT, reason)
                return False

        self._drop_process()
        return True

    def _discard(self, proc: Any) -> None:
        if proc.is_running():
            proc.kill()
            if not proc.wait_for_finished(self.settings.kill_timeout_ms):
                logger.warning("Partially started transcoder did not exit after kill")
        self._drop_process()

    def _drop_process(self) -> None:
        proc, self._proc = self._proc, None
        if proc is not None:
            proc.set_finished_callback(None)
            proc.release()

    def _on_process_finished(self, proc: Any, exit_code: int, crashed: bool) -> None:
        if proc is not self._proc or self._state is not StreamState.RUNNING:
            return

        reason = "transcoder crashed" if crashed else f"transcoder exited with code {exit_code}"
        logger.warning("Unexpected exit: %s", reason)
        self._drop_process()
        self._set_state(StreamState.IDLE)
        self._emit(EventKind.STOPPED, reason=reason)

    # -- debounced restart -------------------------------------------------

    def _schedule_restart(self) -> None:
        self._cancel_restart()
        self._restart_task = self._scheduler.call_later(self.settings.settle_delay_ms, self._fire_restart)

    def _cancel_restart(self) -> None:
        task, self._restart_task = self._restart_task, None
        if task is not None:
            task.cancel()

    def _fire_restart(self) -> None:
        self._restart_task = None
        if self._state is not StreamState.RESTART_PENDING or self._proc is not None:
            return
        selection, self._pending = self._pending, None
        if selection is None:
            self._set_state(StreamState.IDLE)
            return
        self._selection = selection
        self._spawn(selection)
