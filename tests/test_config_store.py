from __future__ import annotations

from pathlib import Path

import pytest

from config import JsonConfigStore, load_config


def test_settings_read_write(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    store = JsonConfigStore(path=path)

    settings = store.get_settings()
    assert settings.language == "de"
    assert settings.preferred_mic_device_id is None
    assert settings.has_token is False

    store.set_settings(language="en", preferred_mic_device_id="3")

    reloaded = JsonConfigStore(path=path).get_settings()
    assert reloaded.language == "en"
    assert reloaded.preferred_mic_device_id == "3"


def test_set_settings_ignores_invalid_values(tmp_path: Path) -> None:
    store = JsonConfigStore(path=tmp_path / "config.json")
    store.set_settings(language="en", preferred_mic_device_id="1")

    updated = store.set_settings(language="fr", preferred_mic_device_id=42)

    assert updated.language == "en"
    assert updated.preferred_mic_device_id == "1"


def test_set_settings_can_clear_device(tmp_path: Path) -> None:
    store = JsonConfigStore(path=tmp_path / "config.json")
    store.set_settings(preferred_mic_device_id="1")

    assert store.set_settings(preferred_mic_device_id=None).preferred_mic_device_id is None


def test_token_flags_never_echo_the_value(tmp_path: Path) -> None:
    store = JsonConfigStore(path=tmp_path / "config.json")

    assert store.set_token("r8_secret") is True
    assert store.get_settings().has_token is True
    assert store.get_token() == "r8_secret"

    assert store.clear_token() is False
    assert store.get_settings().has_token is False
    assert store.get_token() == ""


def test_config_invalid_json_fallback(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{invalid", encoding="utf-8")

    store = JsonConfigStore(path=path)
    assert store.get_settings().language == "de"
    assert store.get_token() == ""


def test_load_config_defaults_to_replicate(monkeypatch, tmp_path: Path) -> None:  # noqa: ANN001
    monkeypatch.delenv("MICSCRIBE_PROVIDER", raising=False)
    monkeypatch.delenv("MICSCRIBE_MODEL", raising=False)
    monkeypatch.setenv("MICSCRIBE_CONFIG_DIR", str(tmp_path))

    config = load_config()

    assert config.provider == "replicate"
    assert config.token_env_var == "REPLICATE_API_TOKEN"
    assert config.model is None
    assert config.config_dir == tmp_path
    assert config.logs_dir == tmp_path / "logs"


def test_load_config_dashscope(monkeypatch, tmp_path: Path) -> None:  # noqa: ANN001
    monkeypatch.setenv("MICSCRIBE_PROVIDER", "DashScope")
    monkeypatch.setenv("MICSCRIBE_CONFIG_DIR", str(tmp_path))

    config = load_config()

    assert config.provider == "dashscope"
    assert config.token_env_var == "DASHSCOPE_API_KEY"


def test_load_config_rejects_unknown_provider(monkeypatch) -> None:  # noqa: ANN001
    monkeypatch.setenv("MICSCRIBE_PROVIDER", "nope")

    with pytest.raises(ValueError, match="Unknown transcription provider"):
        load_config()
