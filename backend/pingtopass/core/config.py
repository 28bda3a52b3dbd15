from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

DEFAULT_JWT_SECRET = "dev-secret-change-in-production"


class Settings(BaseSettings):
    """
    Application settings, loaded from environment variables or the .env file.

    Covers server options, database connection (local SQLite or Turso),
    authentication, third-party API keys, caching and logging. Production
    settings are checked once at startup by ``validate_production``.
    """
    # Server
    APP_ENV: str = "development"
    BACKEND_PORT: int = 8000
    PROJECT_NAME: str = "PingToPass"
    APP_VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"
    BACKEND_CORS_ORIGINS: List[str] = ["*"]

    # Database: plain SQLite by default, Turso (libSQL) when TURSO_DATABASE_URL is set
    DATABASE_URL: str = "sqlite:///./pingtopass.db"
    TURSO_DATABASE_URL: str = ""
    TURSO_AUTH_TOKEN: str = ""
    DATABASE_ECHO: bool = False

    # Auth
    JWT_SECRET: str = DEFAULT_JWT_SECRET
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 60 * 24 * 7
    # Accepted only when APP_ENV == "development"
    DEV_AUTH_TOKEN: str = "mock-dev-token"

    # External collaborators
    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_CLIENT_SECRET: str = ""
    STRIPE_SECRET_KEY: str = ""

    # OpenRouter (OpenAI compatible) for question generation
    OPENROUTER_API_KEY: str = ""
    OPENROUTER_API_BASE: str = "https://openrouter.ai/api/v1"
    OPENROUTER_MODEL: str = "qwen/qwen-2.5-72b-instruct"
    LLM_MAX_TOKENS: int = 4096
    LLM_TEMPERATURE: float = 0.7
    AI_PROMPT_VERSION: str = "v1.2"
    # Flat price used for the AI cost report
    LLM_COST_CENTS_PER_1K_TOKENS: float = 0.09

    # Cache / rate limiting
    REDIS_URL: str = ""
    DASHBOARD_CACHE_TTL: int = 300
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_DEFAULT: str = "200/hour"
    GENERATION_RATE_LIMIT: str = "10/minute"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"  # "json" or "text"

    # Model configuration tells Pydantic where to find the .env file.
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding='utf-8',
        extra='ignore',
        case_sensitive=True
    )

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"

    @property
    def database_url(self) -> str:
        """Resolve the SQLAlchemy URL, preferring Turso when configured."""
        if self.TURSO_DATABASE_URL:
            host = self.TURSO_DATABASE_URL.split("://", 1)[-1]
            url = f"sqlite+libsql://{host}?secure=true"
            if self.TURSO_AUTH_TOKEN:
                url += f"&authToken={self.TURSO_AUTH_TOKEN}"
            return url
        return self.DATABASE_URL

    def validate_production(self) -> None:
        """Fail fast on insecure configuration in production."""
        if not self.is_production:
            return
        errors: List[str] = []
        if self.JWT_SECRET in (DEFAULT_JWT_SECRET, ""):
            errors.append("JWT_SECRET must be set to a secure value in production.")
        if errors:
            raise RuntimeError(
                "Production configuration errors:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Create a single, globally accessible instance of the settings.
settings = Settings()
