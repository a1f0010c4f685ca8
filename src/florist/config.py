"""Process-wide settings for the florist backend.

Settings are read from ``FLORIST_*`` environment variables (and an optional
``.env`` file) once, frozen, and handed to the collaborators that need them
(payment gateway, push gateway, notification router). Business logic never
reads the environment directly.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="FLORIST_",
        env_file=".env",
        extra="ignore",
        frozen=True,
    )

    # Payment gateway
    payment_provider: str = Field(default="fake", pattern=r"^(fake|midtrans)$")
    midtrans_server_key: str = ""
    midtrans_client_key: str = ""
    midtrans_is_production: bool = False
    cash_payment_methods: tuple[str, ...] = ("cod",)

    # Push gateway. `fcm_api` picks the bulk-send call of the Admin SDK:
    # "batch" -> send_each_for_multicast, "legacy" -> send_multicast.
    push_provider: str = Field(default="fake", pattern=r"^(fake|fcm)$")
    fcm_api: str = Field(default="batch", pattern=r"^(batch|legacy)$")
    fcm_credentials_file: str | None = None
    android_channel_id: str = "order_updates"

    # Notification routing
    staff_roles: tuple[str, ...] = ("admin",)
    fallback_staff_ids: tuple[str, ...] = ()
    notification_max_items: int = Field(default=5, ge=1)
    notification_max_name_length: int = Field(default=40, ge=1)
    status_update_ttl_seconds: int = 24 * 60 * 60

    http_timeout_seconds: float = 10.0

    # Logging. Empty values fall back to per-environment defaults.
    log_level: str = ""
    log_format: str = Field(default="", pattern=r"^(|console|json)$")
    log_dir: str | None = None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the settings singleton, built on first use."""
    return Settings()
