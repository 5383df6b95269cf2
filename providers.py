"""Transcription provider clients.

Two providers are supported. Replicate runs ``openai/gpt-4o-transcribe`` and
is the default; DashScope runs ``qwen3-asr-flash``. Each client is built for
one API token and submits a single audio file per call. Responses are
returned raw; shaping them into text is the normalizer's job.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Callable, Optional

from loguru import logger

from errors import ProviderError
from interfaces import TranscriptionClient

try:
    import replicate
except Exception:  # pragma: no cover
    replicate = None  # type: ignore

try:
    import dashscope
except Exception:  # pragma: no cover
    dashscope = None  # type: ignore

DEFAULT_REPLICATE_MODEL = "openai/gpt-4o-transcribe"
DEFAULT_DASHSCOPE_MODEL = "qwen3-asr-flash"

ClientFactory = Callable[[str], TranscriptionClient]


class ReplicateTranscriptionClient:
    def __init__(self, api_token: str, model: str = DEFAULT_REPLICATE_MODEL) -> None:
        if replicate is None:
            raise ProviderError("replicate is not installed")
        self._model = model
        self._client = replicate.Client(api_token=api_token)

    def transcribe(self, audio_path: Path, language: str) -> object:
        with Path(audio_path).open("rb") as audio_file:
            start_time = time.time()
            output = self._client.run(
                self._model,
                input={"audio_file": audio_file, "language": language},
            )
        logger.info(f"Replicate {self._model} finished in {time.time() - start_time:.2f}s")
        return output


class DashscopeTranscriptionClient:
    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_DASHSCOPE_MODEL,
        request_timeout_s: float = 60.0,
    ) -> None:
        if dashscope is None:
            raise ProviderError("dashscope is not installed")
        self._api_key = api_key
        self._model = model
        self._request_timeout_s = request_timeout_s

    def transcribe(self, audio_path: Path, language: str) -> object:
        start_time = time.time()
        response = dashscope.MultiModalConversation.call(
            api_key=self._api_key,
            model=self._model,
            messages=[
                {"role": "system", "content": [{"text": ""}]},
                {"role": "user", "content": [{"audio": f"file://{Path(audio_path).resolve()}"}]},
            ],
            result_format="message",
            asr_options={"language": language, "enable_itn": False},
            timeout=self._request_timeout_s,
        )
        logger.info(f"DashScope {self._model} finished in {time.time() - start_time:.2f}s")

        status_code = _field(response, "status_code")
        if status_code is not None and status_code != 200:
            message = _field(response, "message") or f"DashScope request failed ({status_code})"
            raise ProviderError(str(message))
        return self._extract_text(response)

    def _extract_text(self, response: object) -> list[str]:
        """Pull the text pieces out of a DashScope message response."""
        output = _field(response, "output") or {}
        choices = _field(output, "choices") or []
        if not choices:
            return []
        message = _field(choices[0], "message") or {}
        content = _field(message, "content") or []
        return [str(item.get("text", "")) for item in content if isinstance(item, dict)]


def _field(obj: object, name: str) -> object:
    # DashScope responses are dict subclasses that also expose attributes.
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def build_client_factory(provider: str, model: Optional[str] = None) -> ClientFactory:
    if provider == "replicate":
        return lambda token: ReplicateTranscriptionClient(token, model=model or DEFAULT_REPLICATE_MODEL)
    if provider == "dashscope":
        return lambda token: DashscopeTranscriptionClient(token, model=model or DEFAULT_DASHSCOPE_MODEL)
    raise ValueError(f"Unknown transcription provider: {provider}")
