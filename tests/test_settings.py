from backend.app.core import settings as settings_module
from backend.app.core.settings import Settings, get_settings


def test_settings_defaults():
    settings = get_settings()
    assert settings.app_name == "PhysioDesk"
    assert isinstance(settings.secret_key, str) and settings.secret_key
    assert isinstance(settings.database_url, str) and settings.database_url
    assert settings.store_backend in ("sql", "memory")


def test_get_settings_is_singleton():
    assert get_settings() is get_settings()


def test_settings_read_prefixed_environment(monkeypatch):
    monkeypatch.setenv("PHYSIO_STORE_BACKEND", "Memory")
    monkeypatch.setenv("PHYSIO_PRACTICE_TIMEZONE", "Asia/Kolkata")
    monkeypatch.setenv("PHYSIO_ACCESS_TOKEN_EXPIRE_MINUTES", "90")
    monkeypatch.setenv("PHYSIO_CORS_ORIGINS", "https://a.example, https://b.example,")
    settings = Settings()
    assert settings.store_backend == "memory"
    assert settings.practice_timezone == "Asia/Kolkata"
    assert settings.access_token_expire_minutes == 90
    assert settings.cors_origins == ["https://a.example", "https://b.example"]
    assert settings_module.get_settings() is not settings
