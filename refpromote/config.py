"""Promoter configuration."""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .events import DEFAULT_EVENT_SOURCE


class PromoterSettings(BaseSettings):
    """
    Promoter configuration.

    Uses Pydantic BaseSettings for automatic environment variable loading.
    Environment variables are prefixed with REFPROMOTE_.

    Optional environment variables:
        REFPROMOTE_BATCH_CLEANUP: Delete obsolete references with batch
            requests instead of one request per key (default: false)
        REFPROMOTE_CLEANUP_BATCH_SIZE: Max keys per batch delete (default: 1000)
        REFPROMOTE_EVENT_SOURCE: Source recorded on file events (default: "refpromote")
    """

    model_config = SettingsConfigDict(
        env_prefix="REFPROMOTE_",
        extra="ignore",
    )

    # Use delete_objects for cleanup
    batch_cleanup: bool = False

    # Maximum keys per delete_objects call
    cleanup_batch_size: int = Field(
        default=1000,
        ge=1,
        validation_alias=AliasChoices(
            "cleanup_batch_size",
            "REFPROMOTE_CLEANUP_BATCH_SIZE",
        ),
    )

    # Source recorded on published events
    event_source: str = Field(default=DEFAULT_EVENT_SOURCE, min_length=1)
