"""Transient audio files handed to the transcription provider."""

from __future__ import annotations

import tempfile
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from loguru import logger


def extension_for_mime(mime_type: Optional[str]) -> str:
    mime_type = (mime_type or "").lower()
    if "wav" in mime_type:
        return ".wav"
    if "ogg" in mime_type:
        return ".ogg"
    return ".webm"


class TempArtifactManager:
    def __init__(self, temp_dir: Optional[Path] = None, prefix: str = "micscribe-") -> None:
        self._temp_dir = Path(temp_dir) if temp_dir else Path(tempfile.gettempdir())
        self._prefix = prefix

    def write(self, data: bytes, mime_type: Optional[str] = None) -> Path:
        path = self._temp_dir / f"{self._prefix}{uuid.uuid4()}{extension_for_mime(mime_type)}"
        try:
            path.write_bytes(data)
        except OSError:
            self.remove(path)
            raise
        logger.debug(f"Wrote audio artifact {path} ({len(data)} bytes)")
        return path

    def remove(self, path: Path) -> None:
        try:
            Path(path).unlink(missing_ok=True)
            logger.debug(f"Removed audio artifact {path}")
        except OSError as exc:
            logger.warning(f"Could not remove audio artifact {path}: {exc}")

    @contextmanager
    def scoped(self, data: bytes, mime_type: Optional[str] = None) -> Iterator[Path]:
        """Write ``data`` to a temp file and remove it when the block exits."""
        path = self.write(data, mime_type)
        try:
            yield path
        finally:
            self.remove(path)
