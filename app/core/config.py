from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # PostgreSQL
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "bv_user"
    postgres_password: str = "changeme"
    postgres_db: str = "brand_visibility"

    @property
    def postgres_url(self) -> str:
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    # OpenAI (answer provider)
    openai_api_key: str = ""
    openai_model: str = "gpt-4"
    openai_api_url: str = "https://api.openai.com/v1/chat/completions"
    provider_timeout_seconds: float = 60.0

    # Tracked brand
    brand_name: str = "Stake"
    default_client_name: str = "Stake"

    # Aggregation windows
    default_window_days: int = 30
    max_window_days: int = 365

    # App
    app_env: str = "development"
    app_debug: bool = True
    app_host: str = "0.0.0.0"
    app_port: int = 8000

    # CORS
    allowed_origins: str = "*"  # comma-separated

    # Logging
    log_level: str = "INFO"
    log_json: bool = False  # set True in production for structured JSON logs

    # Sentry
    sentry_dsn: str = ""  # leave empty to disable


settings = Settings()


def validate_settings_for_production() -> None:
    """Validate critical settings. Called on startup in non-test environments."""
    errors: list[str] = []

    if not settings.openai_api_key:
        errors.append("OPENAI_API_KEY must be set to run keyword analyses")

    if settings.provider_timeout_seconds <= 0:
        errors.append("PROVIDER_TIMEOUT_SECONDS must be positive")

    if not 1 <= settings.default_window_days <= settings.max_window_days:
        errors.append("DEFAULT_WINDOW_DAYS must be between 1 and MAX_WINDOW_DAYS")

    if settings.app_env == "production":
        if settings.allowed_origins == "*":
            errors.append("ALLOWED_ORIGINS must not be '*' in production")
        if settings.app_debug:
            errors.append("APP_DEBUG must be false in production")

    if errors:
        raise SystemExit("Configuration errors:\n  - " + "\n  - ".join(errors))
