"""Shared error codes, user-facing messages and exception types."""

from __future__ import annotations

PERMISSION_DENIED = "PERMISSION_DENIED"
UNSUPPORTED_CAPTURE = "UNSUPPORTED_CAPTURE"
EMPTY_AUDIO = "EMPTY_AUDIO"
MISSING_CREDENTIAL = "MISSING_CREDENTIAL"
PROVIDER_ERROR = "PROVIDER_ERROR"
DEVICE_ENUMERATION_FAILED = "DEVICE_ENUMERATION_FAILED"
ARTIFACT_WRITE_FAILED = "ARTIFACT_WRITE_FAILED"

ERROR_MESSAGES = {
    PERMISSION_DENIED: "Microphone access was denied.",
    UNSUPPORTED_CAPTURE: "Audio recording is not supported on this system.",
    EMPTY_AUDIO: "No audio data was recorded.",
    MISSING_CREDENTIAL: "No API token configured. Set one in the settings or the environment.",
    PROVIDER_ERROR: "Unknown transcription error.",
    DEVICE_ENUMERATION_FAILED: "Could not list input devices.",
    ARTIFACT_WRITE_FAILED: "Could not save the recording for transcription.",
}


class MicScribeError(Exception):
    code = PROVIDER_ERROR

    def __init__(self, message: str = "") -> None:
        self.message = message or ERROR_MESSAGES[self.code]
        super().__init__(self.message)


class CapturePermissionError(MicScribeError):
    code = PERMISSION_DENIED


class UnsupportedCaptureError(MicScribeError):
    code = UNSUPPORTED_CAPTURE


class DeviceEnumerationError(MicScribeError):
    code = DEVICE_ENUMERATION_FAILED


class TranscriptionError(MicScribeError):
    """Any failure of a single transcription request."""


class EmptyAudioError(TranscriptionError):
    code = EMPTY_AUDIO


class MissingCredentialError(TranscriptionError):
    code = MISSING_CREDENTIAL


class ProviderError(TranscriptionError):
    code = PROVIDER_ERROR


class ArtifactWriteError(TranscriptionError):
    code = ARTIFACT_WRITE_FAILED
