from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Business Finance Tracker"
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    database_url: str = "postgresql+asyncpg://postgres:postgres@db:5432/finance"
    log_level: str = "INFO"

    session_ttl_hours: int = 24
    recent_transactions_limit: int = 5

    business_name: str = "My Business"
    currency_code: str = "GHS"
    currency_symbol: str = "₵"

    admin_email: str = "admin@example.com"
    admin_password: str = "admin"
    admin_name: str = "Administrator"
    seed_admin: bool = True


@lru_cache
def get_settings() -> Settings:
    return Settings()
