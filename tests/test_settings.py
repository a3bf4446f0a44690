import json

import pytest

from certificate.core.settings import EditorSettings

ENV_VARS = ("CERT_API_BASE_URL", "CERT_ASSET_BASE_URL", "CERT_API_TOKEN", "CERT_API_TIMEOUT", "CERT_LANGUAGE")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_without_env():
    settings = EditorSettings.from_env(dotenv=False)
    assert settings == EditorSettings()
    assert settings.asset_base == "http://localhost:8000/api"


def test_from_env(monkeypatch):
    monkeypatch.setenv("CERT_API_BASE_URL", "https://lms.example.com/api")
    monkeypatch.setenv("CERT_ASSET_BASE_URL", "https://cdn.example.com")
    monkeypatch.setenv("CERT_API_TOKEN", "abc")
    monkeypatch.setenv("CERT_API_TIMEOUT", "3.5")
    monkeypatch.setenv("CERT_LANGUAGE", "es")

    settings = EditorSettings.from_env(dotenv=False)

    assert settings.api_base_url == "https://lms.example.com/api"
    assert settings.asset_base == "https://cdn.example.com"
    assert settings.api_token == "abc"
    assert settings.timeout == 3.5
    assert settings.language == "es"


def test_invalid_timeout_falls_back(monkeypatch, caplog):
    monkeypatch.setenv("CERT_API_TIMEOUT", "soon")
    assert EditorSettings.from_env(dotenv=False).timeout == 15.0
    assert "CERT_API_TIMEOUT" in caplog.text


def test_overlay_and_save(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"asset_base_url": "https://files.example.com", "unknown": 1}))

    settings = EditorSettings(api_token="secret").overlay_file(str(path))
    assert settings.asset_base_url == "https://files.example.com"
    assert settings.api_token == "secret"

    out = tmp_path / "conf" / "saved.json"
    settings.save(str(out))
    saved = json.loads(out.read_text())
    assert "api_token" not in saved
    assert saved["asset_base_url"] == "https://files.example.com"


def test_overlay_rejects_non_object(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("[1, 2]")
    with pytest.raises(ValueError):
        EditorSettings().overlay_file(str(path))
