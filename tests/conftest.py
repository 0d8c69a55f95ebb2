"""Shared pytest configuration and fixtures for the VirtualCam test suite."""

import os
import sys
from pathlib import Path
from typing import Callable, List, Optional

import pytest

# Ensure the source directory is in the path for imports
SOURCE_DIR = Path(__file__).parent.parent / "source"
if str(SOURCE_DIR) not in sys.path:
    sys.path.insert(0, str(SOURCE_DIR))

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from models import EventKind, StreamEvent, StreamState  # noqa: E402


# =============================================================================
# Test doubles
# =============================================================================

class FakeProcess:
    """Stands in for TranscoderProcess; behavior is driven by the factory."""

    def __init__(self, factory: "FakeProcessFactory") -> None:
        self.factory = factory
        self.argv: List[str] = []
        self.running = False
        self.released = False
        self.terminated = False
        self.killed = False
        self._cb = None
        self._spawn_failed = False

    # TranscoderProcess interface

    def set_finished_callback(self, cb) -> None:
        self._cb = cb

    def start(self, argv: List[str]) -> None:
        self.argv = list(argv)
        if self.factory.spawn_raises:
            raise FileNotFoundError(argv[0])
        if self.factory.spawn_fails:
            self._spawn_failed = True
            return
        self.running = True
        self.factory.on_spawn(self)

    def wait_for_started(self, timeout_ms: int) -> bool:
        if self._spawn_failed:
            return False
        return not self.factory.start_times_out

    def failed_to_start(self) -> bool:
        return self._spawn_failed

    def is_running(self) -> bool:
        return self.running

    def pid(self) -> int:
        return 4242

    def error_string(self) -> str:
        return "Process failed to start: No such file or directory"

    def terminate(self) -> None:
        self.terminated = True
        if not self.factory.ignore_terminate:
            self._exit()

    def kill(self) -> None:
        self.killed = True
        if not self.factory.ignore_kill:
            self._exit()

    def wait_for_finished(self, timeout_ms: Optional[int]) -> bool:
        if timeout_ms is None and self.running:
            # unconditional wait: the kernel reaps eventually
            self._exit()
        return not self.running

    def release(self) -> None:
        self.released = True

    # test helpers

    def _exit(self, code: int = 0) -> None:
        if not self.running:
            return
        self.running = False
        self.factory.on_exit(self)
        if self.factory.notify_exit_synchronously and self._cb is not None:
            self._cb(code, False)

    def crash(self, code: int = 1) -> None:
        if self.running:
            self.running = False
            self.factory.on_exit(self)
        if self._cb is not None:
            self._cb(code, False)


class FakeProcessFactory:
    def __init__(self) -> None:
        self.created: List[FakeProcess] = []
        self.live = 0
        self.max_live = 0
        self.spawn_fails = False
        self.spawn_raises = False
        self.start_times_out = False
        self.ignore_terminate = False
        self.ignore_kill = False
        self.notify_exit_synchronously = True

    def __call__(self) -> FakeProcess:
        p = FakeProcess(self)
        self.created.append(p)
        return p

    def on_spawn(self, _p: FakeProcess) -> None:
        self.live += 1
        self.max_live = max(self.max_live, self.live)

    def on_exit(self, _p: FakeProcess) -> None:
        self.live -= 1

    @property
    def spawned(self) -> List[FakeProcess]:
        return [p for p in self.created if p.argv and not p._spawn_failed]

    @property
    def last(self) -> FakeProcess:
        return self.created[-1]


class _ManualTask:
    def __init__(self, delay_ms: int, fn: Callable[[], None]) -> None:
        self.delay_ms = delay_ms
        self.fn = fn
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Delayed tasks run only when the test calls run_due()."""

    def __init__(self) -> None:
        self.tasks: List[_ManualTask] = []

    def call_later(self, delay_ms: int, fn: Callable[[], None]) -> _ManualTask:
        t = _ManualTask(delay_ms, fn)
        self.tasks.append(t)
        return t

    @property
    def pending(self) -> List[_ManualTask]:
        return [t for t in self.tasks if not t.cancelled and not t.fired]

    def run_due(self) -> int:
        ran = 0
        for t in self.pending:
            t.fired = True
            t.fn()
            ran += 1
        return ran


class Recorder:
    def __init__(self) -> None:
        self.events: List[StreamEvent] = []
        self.states: List[StreamState] = []

    def on_event(self, ev: StreamEvent) -> None:
        self.events.append(ev)

    def on_state(self, st: StreamState) -> None:
        self.states.append(st)

    @property
    def kinds(self) -> List[EventKind]:
        return [e.kind for e in self.events]


# =============================================================================
# Shared Fixtures
# =============================================================================

@pytest.fixture
def processes() -> FakeProcessFactory:
    return FakeProcessFactory()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def supervisor(processes, scheduler, recorder):
    from supervisor import StreamSupervisor, SupervisorSettings

    sup = StreamSupervisor(processes, scheduler, SupervisorSettings(device_path="/dev/video10"))
    sup.add_listener(recorder.on_event)
    sup.add_state_listener(recorder.on_state)
    return sup


@pytest.fixture
def config_home(tmp_path, monkeypatch) -> Path:
    """Point XDG_CONFIG_HOME at a temp dir so ConfigStore never touches ~/.config."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    monkeypatch.setattr("platform.system", lambda: "Linux")
    return tmp_path
