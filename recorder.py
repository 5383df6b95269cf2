"""Microphone recorder adapter."""

from __future__ import annotations

import threading
import time
from queue import Full, Queue
from typing import Any, Optional

from loguru import logger

from errors import CapturePermissionError, DeviceEnumerationError, UnsupportedCaptureError
from models import AudioFrame, InputDevice

try:
    import numpy as np
except Exception:  # pragma: no cover
    np = None  # type: ignore

try:
    import sounddevice as sd
except Exception:  # pragma: no cover
    sd = None  # type: ignore


class SoundDeviceRecorder:
    def __init__(
        self,
        sample_rate: int = 16000,
        channels: int = 1,
        chunk_ms: int = 100,
    ) -> None:
        self.sample_rate = sample_rate
        self.channels = channels
        self.chunk_ms = chunk_ms
        self._stream: Any = None
        self._running = False
        self._lock = threading.Lock()
        self.dropped_chunks = 0
        self._audio_queue: Queue[AudioFrame | None] | None = None

    def list_input_devices(self) -> list[InputDevice]:
        if sd is None:
            raise DeviceEnumerationError("sounddevice is not installed")
        try:
            devices = sd.query_devices()
        except Exception as exc:
            raise DeviceEnumerationError(f"Could not list input devices: {exc}") from exc
        return [
            InputDevice(id=str(index), label=str(info.get("name") or f"Microphone {index + 1}"))
            for index, info in enumerate(devices)
            if info.get("max_input_channels", 0) > 0
        ]

    def start(self, audio_queue: Queue[AudioFrame | None], device_id: Optional[str] = None) -> None:
        with self._lock:
            if self._running:
                return
            if sd is None:
                raise UnsupportedCaptureError("sounddevice is not installed")
            self._audio_queue = audio_queue
            self.dropped_chunks = 0
            blocksize = int(self.sample_rate * (self.chunk_ms / 1000.0))
            device = int(device_id) if device_id else None
            try:
                self._stream = sd.InputStream(
                    device=device,
                    samplerate=self.sample_rate,
                    channels=self.channels,
                    dtype="int16",
                    blocksize=blocksize,
                    callback=self._on_audio,
                )
                self._stream.start()
            except Exception as exc:
                self._close_stream()
                raise CapturePermissionError(f"Could not open microphone: {exc}") from exc
            self._running = True
            logger.info(f"Microphone stream opened (device={device_id or 'default'})")

    def stop(self) -> None:
        with self._lock:
            if not self._running:
                self._emit_sentinel_if_needed()
                return
            # PortAudio flushes pending buffers through the callback while stopping.
            try:
                self._close_stream()
            finally:
                self._running = False
            if self.dropped_chunks:
                logger.warning(f"Dropped {self.dropped_chunks} audio chunk(s); queue was full")
            logger.info("Microphone stream released")
            self._emit_sentinel_if_needed()

    def _close_stream(self) -> None:
        stream = self._stream
        self._stream = None
        if stream is None:
            return
        try:
            stream.stop()
        finally:
            stream.close()

    def _on_audio(self, indata: Any, frames: int, time_info: Any, status: Any) -> None:
        if not self._running or self._audio_queue is None:
            return
        if np is None:
            return
        payload = np.asarray(indata, dtype=np.int16).tobytes()
        frame = AudioFrame(
            pcm16_bytes=payload,
            sample_rate=self.sample_rate,
            channels=self.channels,
            timestamp_ms=int(time.time() * 1000),
        )
        try:
            self._audio_queue.put_nowait(frame)
        except Full:
            self.dropped_chunks += 1

    def _emit_sentinel_if_needed(self) -> None:
        if self._audio_queue is None:
            return
        try:
            self._audio_queue.put_nowait(None)
        except Full:
            pass
