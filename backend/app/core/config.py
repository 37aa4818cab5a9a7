import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    environment: str = os.getenv("ENVIRONMENT", "development")
    debug: bool = os.getenv("DEBUG", "true").lower() == "true"
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8000"))
    cors_origins_raw: str = os.getenv("CORS_ORIGINS", "http://localhost:3000")
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./environmental.db")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "logs/application.log")
    secret_key: str = os.getenv("SECRET_KEY", "change-me-in-production")
    token_algorithm: str = os.getenv("TOKEN_ALGORITHM", "HS256")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))
    readings_default_limit: int = int(os.getenv("READINGS_DEFAULT_LIMIT", "100"))
    readings_latest_limit: int = int(os.getenv("READINGS_LATEST_LIMIT", "50"))
    readings_max_limit: int = int(os.getenv("READINGS_MAX_LIMIT", "1000"))

    @property
    def cors_origins(self) -> list[str]:
        return [item.strip() for item in self.cors_origins_raw.split(",") if item.strip()]


settings = Settings()
