"""Overlay window for recording status and transcripts."""

from __future__ import annotations

try:
    from PySide6.QtCore import Qt, QTimer
    from PySide6.QtWidgets import QApplication, QLabel, QWidget, QVBoxLayout
except Exception:  # pragma: no cover
    Qt = None  # type: ignore
    QTimer = None  # type: ignore
    QApplication = None  # type: ignore
    QLabel = object  # type: ignore
    QWidget = object  # type: ignore
    QVBoxLayout = object  # type: ignore

_STYLE = (
    "color: {color}; font-size: 16px; padding: 16px;"
    "background: rgba(0,0,0,{alpha}); border-radius: 12px;"
)


class OverlayWindow(QWidget):
    def __init__(self) -> None:
        if Qt is None:
            raise RuntimeError("PySide6 is not installed")
        super().__init__()
        self.setWindowFlags(
            Qt.WindowStaysOnTopHint | Qt.FramelessWindowHint | Qt.Tool
        )
        self.setAttribute(Qt.WA_TranslucentBackground, True)
        self.setFixedWidth(560)

        self._label = QLabel("")
        self._label.setWordWrap(True)
        self._label.setTextInteractionFlags(Qt.TextSelectableByMouse)
        self._reset_style()

        layout = QVBoxLayout()
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self._label)
        self.setLayout(layout)

        self._hide_timer: QTimer | None = None

    def _center_top(self) -> None:
        if QApplication is None:
            return
        screen = QApplication.primaryScreen()
        if screen is None:
            return
        geom = screen.availableGeometry()
        self.adjustSize()
        x = geom.x() + (geom.width() - self.width()) // 2
        y = geom.y() + 40
        self.move(x, y)

    def set_status(self, text: str) -> None:
        """Show a status line until replaced."""
        self._cancel_hide_timer()
        self._reset_style()
        self._label.setText(text)
        self._center_top()
        self.show()

    def show_transcript(self, text: str, hide_after_ms: int = 6000) -> None:
        self.set_status(text or "(empty transcript)")
        self.hide_with_delay(hide_after_ms)

    def show_error(self, text: str, hide_after_ms: int = 4000) -> None:
        self._cancel_hide_timer()
        self._label.setStyleSheet(_STYLE.format(color="#FF6B6B", alpha=210))
        self._label.setText(f"Error: {text}")
        self._center_top()
        self.show()
        self.hide_with_delay(hide_after_ms)

    def hide_with_delay(self, delay_ms: int = 400) -> None:
        self._cancel_hide_timer()
        if QTimer is not None:
            self._hide_timer = QTimer()
            self._hide_timer.setSingleShot(True)
            self._hide_timer.timeout.connect(self.hide)
            self._hide_timer.start(delay_ms)

    def _cancel_hide_timer(self) -> None:
        if self._hide_timer is not None:
            self._hide_timer.stop()
            self._hide_timer = None

    def _reset_style(self) -> None:
        self._label.setStyleSheet(_STYLE.format(color="white", alpha=190))
