from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env")

    PROJECT_NAME: str = "URL Shortener"
    LOG_LEVEL: str = "INFO"

    # Infrastructure Configs (Env Vars)
    DATABASE_URL: Optional[str] = None
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: str = "5432"
    POSTGRES_DB: str = "urlshortener"

    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_MAX_CONNECTIONS: int = 50
    REDIS_CONNECT_TIMEOUT: float = 2.0
    CACHE_ENABLED: bool = False
    CACHE_TTL: int = 86400

    BASE_URL: str = "http://localhost:8080"
    CORS_ORIGINS: List[str] = ["*"]

    # Short code lifecycle
    RETENTION_MONTHS: int = 6
    MAX_PROBES: int = 1000
    MAX_INSERT_RETRIES: int = 5
    SWEEP_INTERVAL_SECONDS: int = 0

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

settings = Settings()
