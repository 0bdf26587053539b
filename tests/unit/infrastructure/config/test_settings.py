from pathlib import Path

from learnassist.domain.models.tasks import TaskKind
from learnassist.infrastructure.config import settings


def test_defaults(monkeypatch):
    monkeypatch.setattr(settings, "_config", {})
    for var in ("API_URL", "USE_MOCK_DATA"):
        monkeypatch.delenv(var, raising=False)
    assert settings.get_api_base_url() == "https://api.example.com"
    assert settings.get_cache_ttl_seconds() == 300
    assert settings.get_retry_settings() == (2, 1.0, 2.0)
    assert settings.get_poll_settings(TaskKind.OCR) == (10, 2.0)
    assert settings.get_poll_settings(TaskKind.ANALYSIS) == (15, 2.0)
    assert settings.get_max_upload_bytes() == 10 * 1024 * 1024
    assert settings.get_supported_image_types() == ["jpg", "jpeg", "png", "heic"]
    assert settings.get_token_storage_key() == "auth_token"
    assert settings.use_mock_data() is False


def test_environment_overrides_yaml(monkeypatch):
    monkeypatch.setattr(settings, "_config", {"api.base_url": "https://yaml.example", "cache.ttl_seconds": 60})
    monkeypatch.delenv("API_URL", raising=False)
    assert settings.get_api_base_url() == "https://yaml.example"
    assert settings.get_cache_ttl_seconds() == 60
    monkeypatch.setenv("API_URL", "https://env.example/")
    monkeypatch.setenv("CACHE_TTL_SECONDS", "120")
    assert settings.get_api_base_url() == "https://env.example"
    assert settings.get_cache_ttl_seconds() == 120


def test_test_config_has_highest_priority(monkeypatch):
    monkeypatch.setenv("USE_MOCK_DATA", "false")
    settings.set_config_for_testing({"USE_MOCK_DATA": True, "image.supported_types": "png, JPG"})
    assert settings.use_mock_data() is True
    assert settings.get_supported_image_types() == ["png", "jpg"]
    settings.clear_test_config()
    assert settings.use_mock_data() is False


def test_yaml_file_is_flattened(monkeypatch, tmp_path: Path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("polling:\n  ocr:\n    max_attempts: 4\n    interval_seconds: 0.5\n", encoding="utf-8")
    monkeypatch.setattr(settings, "_loaded", False)
    monkeypatch.setattr(settings, "_config", {})
    settings.load_configuration(config_file=config_file, env_file=tmp_path / "missing.env")
    assert settings.get_poll_settings(TaskKind.OCR) == (4, 0.5)
