"""Capture codec negotiation and PCM container encoding."""

from __future__ import annotations

import io
import wave
from typing import Iterable, Sequence

from errors import UnsupportedCaptureError

try:
    import numpy as np
except Exception:  # pragma: no cover
    np = None  # type: ignore

try:
    import soundfile as sf
except Exception:  # pragma: no cover
    sf = None  # type: ignore

MIME_OGG_OPUS = "audio/ogg;codecs=opus"
MIME_WAV = "audio/wav"

# Opus-in-container first, plain container as fallback.
MIME_PREFERENCES: tuple[str, ...] = (MIME_OGG_OPUS, MIME_WAV)


def is_mime_supported(mime_type: str) -> bool:
    if mime_type == MIME_WAV:
        return True
    if mime_type == MIME_OGG_OPUS:
        if sf is None or np is None:
            return False
        try:
            return "OPUS" in sf.available_subtypes("OGG")
        except Exception:  # pragma: no cover - libsndfile probing
            return False
    return False


def pick_mime_type(candidates: Sequence[str] = MIME_PREFERENCES) -> str:
    """Return the first supported capture mime type or raise UnsupportedCaptureError."""
    for candidate in candidates:
        if is_mime_supported(candidate):
            return candidate
    raise UnsupportedCaptureError("No supported recording format is available.")


def assemble_fragments(fragments: Iterable[bytes]) -> bytes:
    """Concatenate captured fragments in arrival order."""
    return b"".join(fragments)


def encode_pcm(
    pcm: bytes,
    mime_type: str,
    sample_rate: int = 16000,
    channels: int = 1,
) -> bytes:
    """Wrap raw 16-bit PCM in the container named by ``mime_type``."""
    if mime_type == MIME_WAV:
        return _pcm_to_wav(pcm, sample_rate, channels)
    if mime_type == MIME_OGG_OPUS:
        return _pcm_to_ogg_opus(pcm, sample_rate, channels)
    raise UnsupportedCaptureError(f"Cannot encode audio as {mime_type}")


def _pcm_to_wav(pcm: bytes, sample_rate: int, channels: int, sample_width: int = 2) -> bytes:
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(sample_width)
        wf.setframerate(sample_rate)
        wf.writeframes(pcm)
    return buf.getvalue()


def _pcm_to_ogg_opus(pcm: bytes, sample_rate: int, channels: int) -> bytes:
    if sf is None or np is None:
        raise UnsupportedCaptureError("soundfile is not installed")
    samples = np.frombuffer(pcm, dtype=np.int16).reshape(-1, channels)
    buf = io.BytesIO()
    sf.write(buf, samples, sample_rate, format="OGG", subtype="OPUS")
    return buf.getvalue()
