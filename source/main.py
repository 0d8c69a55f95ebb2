# main.py
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from PySide6.QtWidgets import QApplication

from app_meta import APP_NAME, detect_version
from log_setup import configure_logging
from main_window import MainWindow
from store_config import ConfigStore
from theme import apply_dark_theme


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="virtualcam", description=f"{APP_NAME} control panel")
    p.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ERROR (overrides config)")
    p.add_argument("--version", action="version", version=detect_version())
    return p.parse_known_args(argv)[0]


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(sys.argv[1:] if argv is None else argv)

    store = ConfigStore()
    settings = store.settings()
    configure_logging(args.log_level or settings.log_level, store.dir_path)
    logging.getLogger(__name__).info("%s %s starting", APP_NAME, detect_version())

    app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    apply_dark_theme(app)

    win = MainWindow(store=store)
    win.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
