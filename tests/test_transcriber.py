"""Tests for TranscriptionOrchestrator."""

from __future__ import annotations

from pathlib import Path

import pytest

from artifacts import TempArtifactManager
from credentials import CredentialCache
from errors import (
    ARTIFACT_WRITE_FAILED,
    ArtifactWriteError,
    EmptyAudioError,
    MissingCredentialError,
    ProviderError,
    TranscriptionError,
)
from models import Settings, TranscriptionRequest
from transcriber import TranscriptionOrchestrator

ENV_VAR = "MICSCRIBE_TEST_TOKEN"


# ---------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------

class FakeSettingsStore:
    def __init__(self, token: str = "") -> None:
        self.token = token

    def get_settings(self) -> Settings:
        return Settings(has_token=bool(self.token))

    def set_settings(self, **updates: object) -> Settings:
        return self.get_settings()

    def get_token(self) -> str:
        return self.token

    def set_token(self, value: str) -> bool:
        self.token = value
        return True

    def clear_token(self) -> bool:
        self.token = ""
        return False


class FakeClient:
    def __init__(self, response: object = None, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.calls: list[tuple[Path, str]] = []
        self.seen_bytes: list[bytes] = []

    def transcribe(self, audio_path: Path, language: str) -> object:
        self.calls.append((audio_path, language))
        self.seen_bytes.append(audio_path.read_bytes())
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture(autouse=True)
def _no_env_token(monkeypatch) -> None:  # noqa: ANN001
    monkeypatch.delenv(ENV_VAR, raising=False)


def _orchestrator(tmp_path: Path, client: FakeClient, token: str = "r8_token") -> TranscriptionOrchestrator:
    credentials = CredentialCache(
        settings_store=FakeSettingsStore(token),
        client_factory=lambda _token: client,
        env_var=ENV_VAR,
    )
    return TranscriptionOrchestrator(credentials, TempArtifactManager(temp_dir=tmp_path))


# ---------------------------------------------------------------
# Success
# ---------------------------------------------------------------

def test_fragments_response_is_joined(tmp_path: Path) -> None:
    client = FakeClient(response={"text": ["Hel", "lo"]})
    orchestrator = _orchestrator(tmp_path, client)

    text = orchestrator.transcribe(b"RIFFdata", "audio/wav", "en")

    assert text == "Hello"
    path, language = client.calls[0]
    assert language == "en"
    assert path.suffix == ".wav"
    assert client.seen_bytes == [b"RIFFdata"]
    assert not path.exists()
    assert list(tmp_path.iterdir()) == []


def test_request_records_artifact_path(tmp_path: Path) -> None:
    client = FakeClient(response="Hallo")
    orchestrator = _orchestrator(tmp_path, client)
    request = TranscriptionRequest(audio_bytes=b"OggS", mime_type="audio/ogg;codecs=opus", language="de")

    assert orchestrator.transcribe_request(request) == "Hallo"
    assert request.temp_artifact_path is not None
    assert request.temp_artifact_path.suffix == ".ogg"
    assert not request.temp_artifact_path.exists()


# ---------------------------------------------------------------
# Failures
# ---------------------------------------------------------------

def test_provider_error_carries_message_and_cleans_up(tmp_path: Path) -> None:
    client = FakeClient(error=ConnectionError("network unreachable"))
    orchestrator = _orchestrator(tmp_path, client)

    with pytest.raises(ProviderError) as exc_info:
        orchestrator.transcribe(b"audio", "audio/webm", "de")

    assert str(exc_info.value) == "network unreachable"
    assert exc_info.value.message == "network unreachable"
    assert len(client.calls) == 1
    assert not client.calls[0][0].exists()
    assert list(tmp_path.iterdir()) == []


def test_provider_error_without_message_uses_fallback(tmp_path: Path) -> None:
    orchestrator = _orchestrator(tmp_path, FakeClient(error=RuntimeError()))

    with pytest.raises(ProviderError, match="Unknown transcription error"):
        orchestrator.transcribe(b"audio", "audio/wav", "de")


def test_typed_provider_error_passes_through(tmp_path: Path) -> None:
    orchestrator = _orchestrator(tmp_path, FakeClient(error=ProviderError("quota exceeded")))

    with pytest.raises(ProviderError, match="quota exceeded"):
        orchestrator.transcribe(b"audio", "audio/wav", "de")
    assert list(tmp_path.iterdir()) == []


def test_missing_token_fails_without_calling_provider(tmp_path: Path) -> None:
    client = FakeClient(response="never")
    orchestrator = _orchestrator(tmp_path, client, token="")

    with pytest.raises(MissingCredentialError):
        orchestrator.transcribe(b"audio", "audio/wav", "de")

    assert client.calls == []
    assert list(tmp_path.iterdir()) == []


def test_empty_audio_fails_before_writing(tmp_path: Path) -> None:
    client = FakeClient(response="never")
    orchestrator = _orchestrator(tmp_path, client)

    with pytest.raises(EmptyAudioError):
        orchestrator.transcribe(b"", "audio/wav", "de")

    assert client.calls == []
    assert list(tmp_path.iterdir()) == []


def test_artifact_write_failure_is_typed_and_leaves_no_file(tmp_path: Path, monkeypatch) -> None:  # noqa: ANN001
    client = FakeClient(response="never")
    orchestrator = _orchestrator(tmp_path, client)

    def _disk_full(self, data):  # noqa: ANN001
        with open(self, "wb") as fh:
            fh.write(data[:2])
        raise OSError(28, "No space left on device")

    monkeypatch.setattr(Path, "write_bytes", _disk_full)

    with pytest.raises(ArtifactWriteError) as exc_info:
        orchestrator.transcribe(b"abcdef", "audio/wav", "de")

    assert isinstance(exc_info.value, TranscriptionError)
    assert exc_info.value.code == ARTIFACT_WRITE_FAILED
    assert "No space left on device" in exc_info.value.message
    assert client.calls == []
    assert list(tmp_path.iterdir()) == []


def test_absent_response_gives_empty_transcript(tmp_path: Path) -> None:
    orchestrator = _orchestrator(tmp_path, FakeClient(response=None))

    assert orchestrator.transcribe(b"audio", "audio/wav", "de") == ""
