"""Protocol interfaces used by SessionController and TranscriptionOrchestrator."""

from __future__ import annotations

from pathlib import Path
from queue import Queue
from typing import Optional, Protocol

from models import AudioFrame, InputDevice, Settings


class Recorder(Protocol):
    def list_input_devices(self) -> list[InputDevice]: ...

    def start(self, audio_queue: Queue[AudioFrame | None], device_id: Optional[str] = None) -> None: ...

    def stop(self) -> None: ...


class TranscriptionClient(Protocol):
    def transcribe(self, audio_path: Path, language: str) -> object: ...


class Transcriber(Protocol):
    def transcribe(self, audio_bytes: bytes, mime_type: str, language: str) -> str: ...


class SettingsStore(Protocol):
    def get_settings(self) -> Settings: ...

    def set_settings(self, **updates: object) -> Settings: ...

    def get_token(self) -> str: ...

    def set_token(self, value: str) -> bool: ...

    def clear_token(self) -> bool: ...


class ClipboardWriter(Protocol):
    def write_text(self, text: str) -> None: ...
