"""Application configuration via environment variables.

Read once at import into an immutable ``settings`` object. Components that need
configuration (link building, sender identity) receive it explicitly.
"""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """App settings loaded from .env or environment."""

    DATABASE_URL: str = "sqlite:///./quick_reservations.db"
    BASE_URL: str = "http://localhost:8000"
    APP_NAME: str = "Quick Reservations"
    APP_ENVIRONMENT: str = "development"
    EMAIL_PROVIDER: str = "console"
    EMAIL_FROM: str = "noreply@quick-res.example.com"
    EMAIL_FROM_NAME: str = "Quick Reservations"
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:8080"
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        frozen = True

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.APP_ENVIRONMENT.lower() == "production"


settings = Settings()
