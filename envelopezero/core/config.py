from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path


class Settings(BaseSettings):
    APP_NAME: str = "EnvelopeZero API"
    ENV: str = "dev"

    # Resolve the default SQLite file against the repo root so CWD does not matter
    _default_db_path = Path(__file__).resolve().parents[2] / "envelopezero.sqlite3"
    DATABASE_URL: str = f"sqlite:///{_default_db_path}"
    AUTO_CREATE_TABLES: bool = False

    CORS_ORIGINS: list[str] = ["http://localhost:5173"]
    APP_ORIGIN: str = "http://localhost:5173"

    FEATURE_PASSKEYS: bool = False
    FEATURE_MULTI_BUDGET: bool = False
    FEATURE_ASSIGNMENTS: bool = True
    DEV_SEED: bool = False

    MAGIC_LINK_TTL_MINUTES: int = 15
    SESSION_TTL_DAYS: int = 30

    SMTP_ENABLED: bool = False
    SMTP_HOST: str = "localhost"
    SMTP_PORT: int = 1025
    SMTP_FROM: str = "no-reply@envelopezero.local"

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=(".env",), env_prefix="EZ_", case_sensitive=False)

    @property
    def expose_debug_token(self) -> bool:
        return self.ENV.lower() != "prod"


settings = Settings()
