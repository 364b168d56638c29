from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    use_in_memory: bool = True
    supplier_base_url: str = "https://travelapi-bg6t.onrender.com"
    supplier_timeout_seconds: float = 25.0

    default_language: str = "en"
    default_currency: str = "USD"
    default_residency: str = "us"
    price_increase_percent: int = 20

    prebook_retry_delay_seconds: float = 1.2
    order_form_max_attempts: int = 10
    order_form_backoff_base_seconds: float = 1.0
    order_form_backoff_max_seconds: float = 10.0
    order_form_lock_ttl_seconds: float = 30.0
    status_poll_max_attempts: int = 20
    status_poll_interval_seconds: float = 3.0

    supplier_breaker_fail_max: int = 5
    supplier_breaker_reset_timeout: int = 60


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
