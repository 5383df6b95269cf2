"""Captured audio in, transcript text out."""

from __future__ import annotations

import time
from pathlib import Path

from loguru import logger

from artifacts import TempArtifactManager
from credentials import CredentialCache
from errors import ArtifactWriteError, EmptyAudioError, ProviderError, TranscriptionError
from models import TranscriptionRequest
from normalizer import normalize_transcript


class TranscriptionOrchestrator:
    """Runs one provider attempt per request.

    The audio is written to a temp file first and the file is removed on
    every exit path, including credential and provider failures. Failures
    are raised as TranscriptionError subclasses whose message is fit to
    show to the user.
    """

    def __init__(
        self,
        credentials: CredentialCache,
        artifacts: TempArtifactManager | None = None,
    ) -> None:
        self._credentials = credentials
        self._artifacts = artifacts or TempArtifactManager()

    def transcribe(self, audio_bytes: bytes, mime_type: str, language: str) -> str:
        request = TranscriptionRequest(audio_bytes=audio_bytes, mime_type=mime_type, language=language)
        return self.transcribe_request(request)

    def transcribe_request(self, request: TranscriptionRequest) -> str:
        if not request.audio_bytes:
            raise EmptyAudioError("No audio data was recorded.")

        try:
            with self._artifacts.scoped(request.audio_bytes, request.mime_type) as path:
                request.temp_artifact_path = path
                return self._run(request, path)
        except OSError as exc:
            # only the artifact write can get here; provider failures are typed in _run
            logger.error(f"Could not write audio artifact: {exc}")
            raise ArtifactWriteError(f"Could not save the recording for transcription: {exc}") from exc

    def _run(self, request: TranscriptionRequest, path: Path) -> str:
        logger.info(
            f"Transcribing {len(request.audio_bytes)} bytes ({request.mime_type}, language={request.language})"
        )
        start_time = time.time()
        try:
            client = self._credentials.get_client()
            raw = client.transcribe(path, request.language)
        except TranscriptionError:
            raise
        except Exception as exc:
            logger.error(f"Transcription failed after {time.time() - start_time:.2f}s: {exc}")
            raise ProviderError(str(exc)) from exc
        logger.info(f"Transcription finished in {time.time() - start_time:.2f}s")
        return normalize_transcript(raw)
