"""State-machine based capture session orchestration."""

from __future__ import annotations

import threading
from queue import Empty, Queue
from typing import Callable, Optional, Sequence

from loguru import logger

from audio_codec import MIME_PREFERENCES, assemble_fragments, encode_pcm, pick_mime_type
from errors import (
    CapturePermissionError,
    DeviceEnumerationError,
    MicScribeError,
    ProviderError,
    UnsupportedCaptureError,
)
from interfaces import Recorder, SettingsStore, Transcriber
from models import AudioFrame, InputDevice, SessionState

StateCallback = Callable[[SessionState, SessionState], None]
TranscriptCallback = Callable[[str], None]
ErrorCallback = Callable[[str, str], None]


class SessionController:
    def __init__(
        self,
        recorder: Recorder,
        transcriber: Transcriber,
        settings_store: SettingsStore,
        mime_preferences: Sequence[str] = MIME_PREFERENCES,
        on_state_change: Optional[StateCallback] = None,
        on_transcript: Optional[TranscriptCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> None:
        self._recorder = recorder
        self._transcriber = transcriber
        self._settings_store = settings_store
        self._mime_preferences = tuple(mime_preferences)
        self._on_state_change = on_state_change
        self._on_transcript = on_transcript
        self._on_error = on_error

        self._lock = threading.RLock()
        self._state = SessionState.IDLE
        self._audio_queue: Queue[AudioFrame | None] = Queue()
        self._recorder_active = False
        self._mime_type: Optional[str] = None
        self._devices: list[InputDevice] = []
        self._selected_device_id: Optional[str] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def devices(self) -> list[InputDevice]:
        return list(self._devices)

    @property
    def selected_device_id(self) -> Optional[str]:
        return self._selected_device_id

    # ------------------------------------------------------------------
    # Devices and settings
    # ------------------------------------------------------------------

    def refresh_devices(self) -> list[InputDevice]:
        """Re-list inputs and apply the preferred-device policy.

        On failure the previous list and selection are kept.
        """
        try:
            devices = self._recorder.list_input_devices()
        except DeviceEnumerationError as exc:
            logger.warning(f"Device enumeration failed: {exc.message}")
            self._emit_error(exc.code, exc.message)
            return self.devices

        with self._lock:
            self._devices = list(devices)
            self._selected_device_id = self._resolve_device(self._devices)
        return self.devices

    def select_device(self, device_id: Optional[str]) -> None:
        with self._lock:
            self._selected_device_id = device_id
            self._settings_store.set_settings(preferred_mic_device_id=device_id)

    def set_language(self, language: str) -> str:
        return self._settings_store.set_settings(language=language).language

    def _resolve_device(self, devices: list[InputDevice]) -> Optional[str]:
        if not devices:
            return None
        preferred = self._settings_store.get_settings().preferred_mic_device_id
        if preferred and any(device.id == preferred for device in devices):
            return preferred
        fallback = devices[0].id
        logger.info(f"Preferred microphone unavailable; falling back to {devices[0].label}")
        self._settings_store.set_settings(preferred_mic_device_id=fallback)
        return fallback

    # ------------------------------------------------------------------
    # Recording lifecycle
    # ------------------------------------------------------------------

    def start_session(self) -> None:
        with self._lock:
            if self._state != SessionState.IDLE:
                return
            try:
                mime_type = pick_mime_type(self._mime_preferences)
            except UnsupportedCaptureError as exc:
                self._fail(exc)
                return

            self._transition(SessionState.ACQUIRING_DEVICE)
            self._audio_queue = Queue()
            try:
                self._recorder.start(self._audio_queue, self._selected_device_id)
            except MicScribeError as exc:
                self._fail(exc)
                return
            except Exception as exc:
                self._fail(CapturePermissionError(str(exc)))
                return

            self._recorder_active = True
            self._mime_type = mime_type
            logger.info(f"Recording started ({mime_type}, device={self._selected_device_id or 'default'})")
            self._transition(SessionState.RECORDING)

    def stop_session(self) -> None:
        with self._lock:
            if self._state != SessionState.RECORDING or not self._recorder_active:
                return
            self._transition(SessionState.FINALIZING)
            self._release_device()

            frames = self._drain_frames()
            mime_type = self._mime_type or self._mime_preferences[-1]
            language = self._settings_store.get_settings().language
            try:
                payload = self._assemble(frames, mime_type)
            except MicScribeError as exc:
                self._fail(exc)
                return
            except Exception as exc:
                self._fail(UnsupportedCaptureError(f"Could not encode audio: {exc}"))
                return
            logger.info(f"Recording stopped: {len(frames)} fragment(s), {len(payload)} bytes")
            self._transition(SessionState.TRANSCRIBING)

        # The provider call runs outside the lock; start_session() stays a no-op meanwhile.
        try:
            text = self._transcriber.transcribe(payload, mime_type, language)
        except MicScribeError as exc:
            with self._lock:
                self._fail(exc)
            return
        except Exception as exc:
            with self._lock:
                self._fail(ProviderError(str(exc)))
            return

        with self._lock:
            self._transition(SessionState.IDLE)
        if self._on_transcript:
            self._on_transcript(text)

    def cancel_session(self, reason: str) -> None:
        """Drop the current recording. A running transcription is left to finish."""
        with self._lock:
            if self._state in (SessionState.IDLE, SessionState.TRANSCRIBING):
                return
            logger.info(f"Recording cancelled: {reason}")
            self._release_device()
            self._discard_frames()
            self._transition(SessionState.IDLE)

    def _assemble(self, frames: list[AudioFrame], mime_type: str) -> bytes:
        pcm = assemble_fragments(frame.pcm16_bytes for frame in frames)
        if not pcm:
            return b""
        return encode_pcm(pcm, mime_type, frames[0].sample_rate, frames[0].channels)

    def _drain_frames(self) -> list[AudioFrame]:
        frames: list[AudioFrame] = []
        while True:
            try:
                frame = self._audio_queue.get_nowait()
            except Empty:
                break
            if frame is None:  # Sentinel
                break
            frames.append(frame)
        return frames

    def _discard_frames(self) -> None:
        self._audio_queue = Queue()

    def _fail(self, error: MicScribeError) -> None:
        logger.error(f"{error.code}: {error.message}")
        self._transition(SessionState.ERROR)
        self._release_device()
        self._discard_frames()
        self._emit_error(error.code, error.message)
        self._transition(SessionState.IDLE)

    def _emit_error(self, code: str, message: str) -> None:
        if self._on_error:
            self._on_error(code, message)

    def _release_device(self) -> None:
        if not self._recorder_active:
            return
        self._recorder_active = False
        try:
            self._recorder.stop()
        except Exception as exc:
            logger.warning(f"Releasing the microphone failed: {exc}")

    def _transition(self, to_state: SessionState) -> None:
        from_state = self._state
        if from_state == to_state:
            return
        self._state = to_state
        logger.debug(f"Session state {from_state.value} -> {to_state.value}")
        if self._on_state_change:
            self._on_state_change(from_state, to_state)
