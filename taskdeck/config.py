from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    """Process configuration, read from the environment and an optional ``.env``."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"
    base_url: str = "http://localhost:8000"

    # storage
    database_url: str = "postgresql+psycopg://app:app@db:5432/taskdeck"
    redis_url: str = "redis://redis:6379/0"

    # bearer tokens, 7 day lifetime
    jwt_secret: str = "dev-secret-change-me"
    jwt_issuer: str = "taskdeck-api"
    jwt_audience: str = "taskdeck-api"
    jwt_expires_minutes: int = Field(default=60 * 24 * 7, gt=0)

    # magic-link sign-in
    magic_link_expires_minutes: int = Field(default=15, gt=0)
    magic_link_pepper: str = "dev-pepper-change-me"

    # unset means webhook signatures are not checked
    STRIPE_WEBHOOK_SECRET: str | None = None

    # analytics windows, in days
    analytics_trend_days: int = Field(default=30, gt=0)
    stats_recent_days: int = Field(default=7, gt=0)

    # per-minute limits, enforced through redis
    rate_limit_enabled: bool = True
    rate_limit_auth_request_link_per_min: int = 20
    rate_limit_auth_redeem_per_min: int = 30
    rate_limit_webhooks_per_min: int = 60
    rate_limit_suggestions_per_min: int = 30

settings = Settings()
