# main_window.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QFileDialog,
    QFrame,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from app_meta import APP_NAME, detect_version
from errors import ErrorKind, ModuleLoadFailed, user_message
from kmod_cli import LoopbackModule, ModuleOutcome
from media import FILE_DIALOG_FILTERS, selection_for_path
from models import EventKind, StreamEvent, StreamState
from scheduler import QtScheduler
from store_config import AppSettings, ConfigStore
from supervisor import StreamSupervisor
from transcoder_process import qt_process_factory
from widgets import StatusPill, repolish


logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    def __init__(
        self,
        store: Optional[ConfigStore] = None,
        supervisor: Optional[StreamSupervisor] = None,
        module: Optional[LoopbackModule] = None,
    ) -> None:
        super().__init__()
        self.setWindowTitle(APP_NAME)
        self.resize(520, 260)

        self._init_store(store)
        self._init_backend(supervisor, module)

        self._build_ui()
        self._sync_stream_controls()
        self.update_module_button()

    def _init_store(self, store: Optional[ConfigStore]) -> None:
        self.store = store or ConfigStore()
        self.settings: AppSettings = self.store.settings()

    def _init_backend(self, supervisor: Optional[StreamSupervisor], module: Optional[LoopbackModule]) -> None:
        self.supervisor = supervisor or StreamSupervisor(
            qt_process_factory(self),
            QtScheduler(self),
            self.settings.stream,
        )
        self.supervisor.add_listener(self._on_stream_event)
        self.supervisor.add_state_listener(lambda _s: self._sync_stream_controls())

        m = self.settings.module
        self.module = module or LoopbackModule(m.name, m.params, helper=m.helper)

    def _build_ui(self) -> None:
        root = QWidget()
        outer = QVBoxLayout()
        outer.setContentsMargins(12, 12, 12, 12)
        outer.setSpacing(10)
        root.setLayout(outer)
        self.setCentralWidget(root)

        outer.addLayout(self._build_header())
        outer.addWidget(self._build_stream_panel(), 1)

    def _build_header(self) -> QHBoxLayout:
        header = QHBoxLayout()
        header.setSpacing(10)

        title = QLabel(APP_NAME)
        title.setObjectName("Title")

        version = QLabel(f"v{detect_version()}")
        version.setStyleSheet("color: #aeb3bc;")

        self.btn_load_module = QPushButton("Load Module")
        self.btn_load_module.clicked.connect(self.on_load_module_clicked)

        header.addWidget(title)
        header.addWidget(version)
        header.addStretch(1)
        header.addWidget(self.btn_load_module)

        return header

    def _build_stream_panel(self) -> QFrame:
        frame = QFrame()
        frame.setObjectName("Panel")

        layout = QVBoxLayout()
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setSpacing(12)
        frame.setLayout(layout)

        file_row = QHBoxLayout()
        file_row.setSpacing(10)

        self.lbl_file = QLabel("No file selected")
        self.lbl_file.setObjectName("FileLabel")
        self.lbl_file.setTextInteractionFlags(Qt.TextSelectableByMouse)

        self.btn_select_file = QPushButton("Select File…")
        self.btn_select_file.clicked.connect(self.on_select_file_clicked)

        file_row.addWidget(self.lbl_file, 1)
        file_row.addWidget(self.btn_select_file)
        layout.addLayout(file_row)

        ctl = QHBoxLayout()
        ctl.setSpacing(10)

        self.lbl_status = StatusPill()
        self.btn_start = QPushButton("Start Virtual Camera")
        self.btn_start.setObjectName("Primary")
        self.btn_start.clicked.connect(self.on_start_clicked)

        ctl.addWidget(self.lbl_status, 0, Qt.AlignVCenter)
        ctl.addWidget(self.btn_start, 1)
        layout.addLayout(ctl)

        hint = QLabel(f"Output device: {self.settings.stream.device_path}")
        hint.setStyleSheet("color: #aeb3bc;")
        layout.addWidget(hint)
        layout.addStretch(1)

        return frame

    # -- user actions ------------------------------------------------------

    def on_select_file_clicked(self) -> None:
        path, _ = QFileDialog.getOpenFileName(
            self,
            "Select Image or Video",
            self.settings.last_dir,
            FILE_DIALOG_FILTERS,
        )
        if not path:
            return
        self.apply_file(path)

    def apply_file(self, path: str) -> None:
        selection = selection_for_path(path)
        self.lbl_file.setText("Selected file: " + Path(path).name)
        self.lbl_file.setToolTip(path)

        self.supervisor.file_changed(selection)

        try:
            self.store.record_last_dir(str(Path(path).parent))
        except (OSError, ValueError) as e:
            logger.warning("Could not remember last directory: %s", e)

    def on_start_clicked(self) -> None:
        self.supervisor.toggle()

    def on_load_module_clicked(self) -> None:
        self.btn_load_module.setEnabled(False)
        try:
            outcome = self.module.ensure_loaded()
        except ModuleLoadFailed as e:
            logger.error("Module load failed: %s", e)
            self._show_error(ErrorKind.MODULE_LOAD_FAILED)
            return
        finally:
            self.btn_load_module.setEnabled(True)
            self.update_module_button()

        if outcome is ModuleOutcome.ALREADY_LOADED:
            QMessageBox.information(self, "Info", f"{self.module.name} is already loaded.")

    # -- supervisor -> UI --------------------------------------------------

    def _on_stream_event(self, ev: StreamEvent) -> None:
        if ev.kind is EventKind.START_FAILED and ev.error is not None:
            self.lbl_status.show_status("Error", "error")
            self._show_error(ev.error, ev.reason)
        elif ev.kind is EventKind.STOP_FAILED and ev.error is not None:
            self.lbl_status.show_status("Error", "error")
            self._show_error(ev.error, ev.reason, warning=True)
        elif ev.kind is EventKind.STOPPED:
            self.lbl_status.show_status("Stopped", "stopped")
            self.lbl_status.setToolTip(ev.reason)
        elif ev.kind is EventKind.STREAMING:
            self.lbl_status.show_status("Streaming...", "on")
            self.lbl_status.setToolTip("")
        elif ev.kind is EventKind.APPLYING_NEW_FILE:
            self.lbl_status.show_status("Applying new file...", "pending")

    def _sync_stream_controls(self) -> None:
        st = self.supervisor.state
        if st is StreamState.IDLE:
            self.btn_start.setText("Start Virtual Camera")
            repolish(self.btn_start, "Primary")
        else:
            self.btn_start.setText("Stop Virtual Camera")
            repolish(self.btn_start, "Danger")

    def update_module_button(self) -> None:
        if self.module.is_loaded():
            self.btn_load_module.setText("Module Loaded")
            repolish(self.btn_load_module, "ModuleLoaded")
        else:
            self.btn_load_module.setText("Load Module")
            repolish(self.btn_load_module, "")

    def _show_error(self, kind: ErrorKind, detail: str = "", *, warning: bool = False) -> None:
        title, text = user_message(kind)
        if detail and detail != text:
            text = f"{text}\n\n{detail}"
        if warning:
            QMessageBox.warning(self, title, text)
        else:
            QMessageBox.critical(self, title, text)

    def closeEvent(self, event) -> None:
        self.supervisor.shutdown()
        super().closeEvent(event)
