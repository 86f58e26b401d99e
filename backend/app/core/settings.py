import os


def _env(name: str, default: str) -> str:
    return os.getenv(f"PHYSIO_{name}", default)


class Settings:
    def __init__(self):
        self.app_name = "PhysioDesk"
        self.api_version = "1.0.0"
        self.environment = _env("ENVIRONMENT", "development")
        self.secret_key = _env("SECRET_KEY", "CHANGE_ME")
        self.access_token_expire_minutes = int(_env("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))
        self.database_url = _env("DATABASE_URL", "sqlite:///./physiodesk.db")
        # "sql" or "memory"; chosen once when the app is built
        self.store_backend = _env("STORE_BACKEND", "sql").lower()
        self.practice_timezone = _env("PRACTICE_TIMEZONE", "UTC")
        self.log_level = _env("LOG_LEVEL", "INFO").upper()
        self.cors_origins = [
            origin.strip()
            for origin in _env("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
            if origin.strip()
        ]


_settings_instance = None


def get_settings():
    """Return a singleton Settings instance."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
