from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_env: str = Field(default="dev", alias="APP_ENV")
    app_host: str = Field(default="0.0.0.0", alias="APP_HOST")
    app_port: int = Field(default=8000, alias="APP_PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    docs_enabled: bool = Field(default=True, alias="DOCS_ENABLED")

    database_url: str = Field(alias="DATABASE_URL")
    public_base_url: str = Field(default="http://localhost:3000", alias="PUBLIC_BASE_URL")
    trusted_proxies: str = Field(default="", alias="TRUSTED_PROXIES")

    admin_session_ttl_days: int = Field(default=7, ge=1, alias="ADMIN_SESSION_TTL_DAYS")

    mailgun_api_key: str = Field(default="", alias="MAILGUN_API_KEY")
    mailgun_domain: str = Field(default="", alias="MAILGUN_DOMAIN")
    mailgun_from_email: str = Field(default="", alias="MAILGUN_FROM_EMAIL")
    mailgun_api_base_url: str = Field(
        default="https://api.mailgun.net/v3",
        alias="MAILGUN_API_BASE_URL",
    )
    mail_timeout_seconds: float = Field(default=5.0, gt=0, alias="MAIL_TIMEOUT_SECONDS")

    @property
    def is_production(self) -> bool:
        return self.app_env == "prod"

    @property
    def base_url(self) -> str:
        return self.public_base_url.rstrip("/")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
