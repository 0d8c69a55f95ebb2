# theme.py
from __future__ import annotations

from PySide6.QtGui import QPalette, QColor
from PySide6.QtWidgets import QApplication


def apply_dark_theme(app: QApplication) -> None:
    app.setStyle("Fusion")

    pal = QPalette()
    pal.setColor(QPalette.Window, QColor(24, 26, 31))
    pal.setColor(QPalette.WindowText, QColor(222, 226, 232))
    pal.setColor(QPalette.Base, QColor(17, 19, 23))
    pal.setColor(QPalette.AlternateBase, QColor(30, 33, 39))
    pal.setColor(QPalette.Text, QColor(222, 226, 232))
    pal.setColor(QPalette.Button, QColor(37, 40, 47))
    pal.setColor(QPalette.ButtonText, QColor(222, 226, 232))
    pal.setColor(QPalette.Highlight, QColor(64, 124, 150))
    pal.setColor(QPalette.HighlightedText, QColor(250, 252, 255))
    # Status reasons and full file paths are shown as tooltips.
    pal.setColor(QPalette.ToolTipBase, QColor(40, 44, 52))
    pal.setColor(QPalette.ToolTipText, QColor(232, 235, 240))
    pal.setColor(QPalette.PlaceholderText, QColor(128, 134, 145))
    pal.setColor(QPalette.Disabled, QPalette.ButtonText, QColor(118, 123, 133))
    pal.setColor(QPalette.Disabled, QPalette.WindowText, QColor(118, 123, 133))
    pal.setColor(QPalette.Disabled, QPalette.Text, QColor(118, 123, 133))
    app.setPalette(pal)

    app.setStyleSheet(
        """
        QMainWindow { background: #181a1f; }

        QToolTip {
            background: #282c34;
            color: #e8ebf0;
            border: 1px solid #3a404c;
            padding: 4px 6px;
        }

        QLabel#Title {
            font-size: 16px;
            font-weight: 650;
        }

        QLabel#FileLabel { color: #cfd3da; }

        QFrame#Panel {
            background: #1e2127;
            border: 1px solid #2e333c;
            border-radius: 10px;
        }

        QPushButton {
            padding: 8px 12px;
            border-radius: 10px;
            border: 1px solid #2e333c;
            background: #25282f;
        }
        QPushButton:hover { background: #2c3039; }
        QPushButton:disabled { color: #767b85; }

        /* Start streaming */
        QPushButton#Primary {
            background: #2c3a5a;
            border: 1px solid #3b4f7a;
        }
        QPushButton#Primary:hover { background: #34456c; }

        /* Stop streaming */
        QPushButton#Danger {
            background: #3a2424;
            border: 1px solid #7a3131;
        }
        QPushButton#Danger:hover { background: #442b2b; }

        /* v4l2loopback present */
        QPushButton#ModuleLoaded {
            background: #233a2c;
            border: 1px solid #2f6b45;
            color: #cfeedd;
            font-weight: bold;
        }
        """
    )
