"""Application settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration settings."""

    debug_mode: bool = False
    timeline_store: str = "in_memory"  # in_memory or postgres
    database_url: str = ""  # Required when timeline_store=postgres
    transaction_timeout_seconds: float = 5.0
    transaction_retry_attempts: int = 1  # Retries after a write conflict
    order_index_gap: int = 1000  # Spacing between appended/renumbered steps
    customer_lead_default_address: str = "Not provided"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",
    )


settings = Settings()
