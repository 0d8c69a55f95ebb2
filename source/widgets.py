# widgets.py
from __future__ import annotations

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QLabel, QPushButton


_PILL_COLORS = {
    "on": ("#233a2c", "#2f6b45", "#cfeedd"),
    "pending": ("#3a3424", "#7a6231", "#f3e6c8"),
    "error": ("#3a2424", "#7a3131", "#f3c8c8"),
    "stopped": ("#2f2626", "#5a3a3a", "#e6cfcf"),
    "off": ("#2a2a30", "#3a3a42", "#d6d6d6"),
}


class StatusPill(QLabel):
    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self.setAlignment(Qt.AlignCenter)
        self.setMinimumWidth(150)
        self.show_status("Idle", "off")

    def show_status(self, text: str, tone: str) -> None:
        self.setText(text)
        self.set_state(tone)

    def set_state(self, tone: str) -> None:
        bg, bd, fg = _PILL_COLORS.get(tone, _PILL_COLORS["off"])
        self.setProperty("tone", tone)
        self.setStyleSheet(
            f"""
            QLabel {{
                background: {bg};
                border: 1px solid {bd};
                border-radius: 10px;
                padding: 4px 10px;
                color: {fg};
                font-weight: 600;
            }}
            """
        )


def repolish(btn: QPushButton, object_name: str) -> None:
    """Switch a button's stylesheet role (objectName) and re-apply the style."""
    if btn.objectName() == object_name:
        return
    btn.setObjectName(object_name)
    btn.style().unpolish(btn)
    btn.style().polish(btn)
