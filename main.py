"""Application entrypoint."""

from __future__ import annotations

import sys
import threading

from loguru import logger

from artifacts import TempArtifactManager
from clipboard import PyperclipClipboard
from config import JsonConfigStore, load_config
from credentials import CredentialCache
from hotkey import GlobalHotkeyAdapter
from interfaces import ClipboardWriter
from logging_setup import setup_logging
from models import LANGUAGES, SessionState
from overlay import OverlayWindow
from providers import build_client_factory
from recorder import SoundDeviceRecorder
from session_controller import SessionController
from transcriber import TranscriptionOrchestrator

try:
    from PySide6.QtCore import QObject, Signal, QSize
    from PySide6.QtGui import QAction, QActionGroup, QIcon, QPixmap, QPainter, QColor, QBrush
    from PySide6.QtWidgets import QApplication, QInputDialog, QLineEdit, QMenu, QSystemTrayIcon
except Exception as exc:  # pragma: no cover
    raise SystemExit(f"PySide6 is required to run the desktop app: {exc}")


def _create_icon(color: str = "#888888", size: int = 22) -> QIcon:
    """Generate a simple circular tray icon with the given color."""
    pixmap = QPixmap(QSize(size, size))
    pixmap.fill(QColor(0, 0, 0, 0))
    painter = QPainter(pixmap)
    painter.setRenderHint(QPainter.Antialiasing, True)
    painter.setBrush(QBrush(QColor(color)))
    painter.setPen(QColor(color))
    painter.drawEllipse(2, 2, size - 4, size - 4)
    painter.end()
    return QIcon(pixmap)


ICON_IDLE = "#888888"      # grey
ICON_RECORDING = "#FF4444"  # red
ICON_BUSY = "#3B82F6"      # blue
ICON_ERROR = "#FF8800"     # orange

LANGUAGE_LABELS = {"de": "Deutsch", "en": "English"}


class UIBridge(QObject):
    transcript_signal = Signal(str)
    error_signal = Signal(str)
    state_signal = Signal(str, str)  # from_state, to_state


class App:
    def __init__(self) -> None:
        self.config = load_config()
        setup_logging(self.config.logs_dir, self.config.log_level)

        self.app = QApplication(sys.argv)
        self.app.setQuitOnLastWindowClosed(False)
        self.config_store = JsonConfigStore(self.config.config_dir / "config.json")
        self.clipboard: ClipboardWriter = PyperclipClipboard()
        self.overlay = OverlayWindow()
        self.ui = UIBridge()
        self.ui.transcript_signal.connect(self._on_transcript_ui)
        self.ui.error_signal.connect(self._on_error_ui)
        self.ui.state_signal.connect(self._on_state_change_ui)
        self._last_transcript = ""

        self.credentials = CredentialCache(
            settings_store=self.config_store,
            client_factory=build_client_factory(self.config.provider, self.config.model),
            env_var=self.config.token_env_var,
        )
        self.controller = SessionController(
            recorder=SoundDeviceRecorder(),
            transcriber=TranscriptionOrchestrator(self.credentials, TempArtifactManager()),
            settings_store=self.config_store,
            on_state_change=self._on_state_change,
            on_transcript=self._on_transcript,
            on_error=self._on_error,
        )
        self.hotkey = GlobalHotkeyAdapter(hotkey_name=self.config.hotkey)

        self.tray = QSystemTrayIcon()
        self.tray.setIcon(_create_icon(ICON_IDLE))
        self.tray.setToolTip("MicScribe: ready")
        self._menu = QMenu()
        self._mic_menu = QMenu("Microphone", self._menu)
        self._setup_menu()
        self.tray.setContextMenu(self._menu)
        self.tray.show()

    def _setup_menu(self) -> None:
        menu = self._menu

        self._record_action = QAction("Record", menu)
        self._record_action.triggered.connect(self.toggle_recording)
        menu.addAction(self._record_action)

        copy_action = QAction("Copy last transcript", menu)
        copy_action.triggered.connect(self._copy_transcript)
        menu.addAction(copy_action)

        menu.addSeparator()

        language_menu = menu.addMenu("Language")
        language_group = QActionGroup(language_menu)
        current_language = self.config_store.get_settings().language
        for code in LANGUAGES:
            action = QAction(LANGUAGE_LABELS.get(code, code), language_menu, checkable=True)
            action.setChecked(code == current_language)
            action.triggered.connect(lambda _checked=False, c=code: self.controller.set_language(c))
            language_group.addAction(action)
            language_menu.addAction(action)

        menu.addMenu(self._mic_menu)
        self._mic_menu.aboutToShow.connect(self._rebuild_mic_menu)

        menu.addSeparator()
        token_action = QAction("Set API token", menu)
        token_action.triggered.connect(self._set_token)
        menu.addAction(token_action)

        clear_action = QAction("Clear API token", menu)
        clear_action.triggered.connect(self._clear_token)
        menu.addAction(clear_action)

        menu.addSeparator()
        quit_action = QAction("Quit", menu)
        quit_action.triggered.connect(self.quit)
        menu.addAction(quit_action)

    def _rebuild_mic_menu(self) -> None:
        self._mic_menu.clear()
        devices = self.controller.refresh_devices()
        if not devices:
            empty = QAction("No microphone found", self._mic_menu)
            empty.setEnabled(False)
            self._mic_menu.addAction(empty)
            return
        group = QActionGroup(self._mic_menu)
        for device in devices:
            action = QAction(device.label, self._mic_menu, checkable=True)
            action.setChecked(device.id == self.controller.selected_device_id)
            action.triggered.connect(lambda _checked=False, d=device.id: self.controller.select_device(d))
            group.addAction(action)
            self._mic_menu.addAction(action)

    def _set_token(self) -> None:
        value, ok = QInputDialog.getText(
            None, "API token", f"{self.config.provider.capitalize()} API token", QLineEdit.Password
        )
        if not ok:
            return
        try:
            self.credentials.set_token(value)
        except ValueError:
            self.overlay.show_error("Please enter an API token.")
            return
        self.overlay.show_transcript("API token saved.", hide_after_ms=1500)

    def _clear_token(self) -> None:
        self.credentials.clear_token()
        self.overlay.show_transcript("API token removed.", hide_after_ms=1500)

    def _copy_transcript(self) -> None:
        self.clipboard.write_text(self._last_transcript)

    # ------------------------------------------------------------------
    # Callbacks (called from worker threads → emit signals for UI thread)
    # ------------------------------------------------------------------

    def _on_state_change(self, from_state: SessionState, to_state: SessionState) -> None:
        self.ui.state_signal.emit(from_state.value, to_state.value)

    def _on_transcript(self, text: str) -> None:
        self.ui.transcript_signal.emit(text)

    def _on_error(self, code: str, message: str) -> None:
        self.ui.error_signal.emit(message)

    # ------------------------------------------------------------------
    # UI thread handlers (safe for Qt)
    # ------------------------------------------------------------------

    def _on_transcript_ui(self, text: str) -> None:
        self._last_transcript = text
        self.overlay.show_transcript(text)

    def _on_error_ui(self, msg: str) -> None:
        self.overlay.show_error(msg)

    def _on_state_change_ui(self, from_state: str, to_state: str) -> None:
        if to_state == SessionState.RECORDING.value:
            self.tray.setIcon(_create_icon(ICON_RECORDING))
            self.tray.setToolTip("MicScribe: recording...")
            self._record_action.setText("Stop")
            self.overlay.set_status("Recording...")
        elif to_state == SessionState.TRANSCRIBING.value:
            self.tray.setIcon(_create_icon(ICON_BUSY))
            self.tray.setToolTip("MicScribe: transcribing...")
            self._record_action.setText("Transcribing...")
            self._record_action.setEnabled(False)
            self.overlay.set_status("Transcribing...")
        elif to_state == SessionState.IDLE.value:
            if from_state != SessionState.ERROR.value:
                self.tray.setIcon(_create_icon(ICON_IDLE))
            self.tray.setToolTip("MicScribe: ready")
            self._record_action.setText("Record")
            self._record_action.setEnabled(True)
        elif to_state == SessionState.ERROR.value:
            self.tray.setIcon(_create_icon(ICON_ERROR))

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def toggle_recording(self) -> None:
        if self.controller.state == SessionState.RECORDING:
            # stop_session blocks on the provider call; keep it off the Qt thread
            threading.Thread(target=self.controller.stop_session, daemon=True).start()
        else:
            self.controller.start_session()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def run(self) -> int:
        self.controller.refresh_devices()
        if not self.credentials.has_token():
            self.overlay.show_error("No API token configured. Use \"Set API token\" in the tray menu.")
        try:
            self.hotkey.start(on_toggle=self.toggle_recording)
        except Exception as exc:
            logger.warning(f"Hotkey disabled: {exc}")
            self.overlay.show_error(f"Hotkey disabled: {exc}")
        return self.app.exec()

    def quit(self) -> None:
        self.hotkey.stop()
        self.controller.cancel_session("app quit")
        self.app.quit()


def main() -> int:
    app = App()
    return app.run()


if __name__ == "__main__":
    raise SystemExit(main())
