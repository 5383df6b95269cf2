"""Core data models for the app."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

LANGUAGES = ("de", "en")
DEFAULT_LANGUAGE = "de"


class SessionState(str, Enum):
    IDLE = "IDLE"
    ACQUIRING_DEVICE = "ACQUIRING_DEVICE"
    RECORDING = "RECORDING"
    FINALIZING = "FINALIZING"
    TRANSCRIBING = "TRANSCRIBING"
    ERROR = "ERROR"


@dataclass
class AudioFrame:
    pcm16_bytes: bytes
    sample_rate: int = 16000
    channels: int = 1
    timestamp_ms: int = 0


@dataclass(frozen=True)
class InputDevice:
    id: str
    label: str


@dataclass
class Settings:
    language: str = DEFAULT_LANGUAGE
    preferred_mic_device_id: Optional[str] = None
    has_token: bool = False


@dataclass
class TranscriptionRequest:
    audio_bytes: bytes
    mime_type: str
    language: str = DEFAULT_LANGUAGE
    temp_artifact_path: Optional[Path] = None
