"""Environment config and the JSON-based settings store."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from models import DEFAULT_LANGUAGE, LANGUAGES, Settings

PROVIDER_TOKEN_ENV = {
    "replicate": "REPLICATE_API_TOKEN",
    "dashscope": "DASHSCOPE_API_KEY",
}
DEFAULT_PROVIDER = "replicate"


@dataclass(frozen=True)
class AppConfig:
    provider: str
    model: Optional[str]
    token_env_var: str
    config_dir: Path
    logs_dir: Path
    log_level: str
    hotkey: str


def load_config() -> AppConfig:
    load_dotenv()

    provider = os.getenv("MICSCRIBE_PROVIDER", DEFAULT_PROVIDER).strip().lower()
    if provider not in PROVIDER_TOKEN_ENV:
        raise ValueError(f"Unknown transcription provider: {provider}")

    config_dir = Path(
        os.getenv("MICSCRIBE_CONFIG_DIR") or Path.home() / ".config" / "micscribe"
    ).expanduser()

    return AppConfig(
        provider=provider,
        model=os.getenv("MICSCRIBE_MODEL") or None,
        token_env_var=PROVIDER_TOKEN_ENV[provider],
        config_dir=config_dir,
        logs_dir=config_dir / "logs",
        log_level=os.getenv("MICSCRIBE_LOG_LEVEL", "INFO").upper(),
        hotkey=os.getenv("MICSCRIBE_HOTKEY", "Key.f9"),
    )


class JsonConfigStore:
    def __init__(self, path: Path | None = None) -> None:
        self._path = path or Path.home() / ".config" / "micscribe" / "config.json"
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def get_settings(self) -> Settings:
        data = self._read_all()
        language = data.get("language")
        device_id = data.get("preferred_mic_device_id")
        return Settings(
            language=language if language in LANGUAGES else DEFAULT_LANGUAGE,
            preferred_mic_device_id=device_id if isinstance(device_id, str) else None,
            has_token=bool(data.get("api_token")),
        )

    def set_settings(self, **updates: object) -> Settings:
        data = self._read_all()
        if "language" in updates and updates["language"] in LANGUAGES:
            data["language"] = updates["language"]
        if "preferred_mic_device_id" in updates:
            device_id = updates["preferred_mic_device_id"]
            if device_id is None or isinstance(device_id, str):
                data["preferred_mic_device_id"] = device_id
        self._write_all(data)
        return self.get_settings()

    def get_token(self) -> str:
        data = self._read_all()
        return str(data.get("api_token") or "")

    def set_token(self, value: str) -> bool:
        data = self._read_all()
        data["api_token"] = value
        self._write_all(data)
        return bool(value)

    def clear_token(self) -> bool:
        data = self._read_all()
        data.pop("api_token", None)
        self._write_all(data)
        return False

    def _read_all(self) -> dict:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: dict) -> None:
        self._path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
