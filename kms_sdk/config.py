"""Configuration settings for kms-sdk using Pydantic."""

from functools import lru_cache
from typing import Any

from pydantic_settings import BaseSettings, SettingsConfigDict


class KMSSDKSettings(BaseSettings):
    """botocore transport settings for KMS clients, read from ``KMS_SDK_*`` env vars."""

    model_config = SettingsConfigDict(
        env_prefix="KMS_SDK_",
        case_sensitive=False,
        extra="allow",
    )

    connect_timeout: int = 10
    read_timeout: int = 30
    max_pool_connections: int = 10


settings = KMSSDKSettings()


@lru_cache()
def get_settings() -> KMSSDKSettings:
    return settings


def configure_settings(**kwargs: Any) -> None:
    """Replace the global settings, e.g. ``configure_settings(read_timeout=10)``."""
    global settings
    settings = KMSSDKSettings(**kwargs)
    get_settings.cache_clear()
