"""Configuration for the push provisioning client."""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models.errors import ConfigurationError

# Placeholders shipped in the sample configuration; a value equal to one of
# these has not been configured yet.
PLACEHOLDER_BACKEND_URL = "put your base url here"
PLACEHOLDER_USERNAME = "put your username here"
PLACEHOLDER_PASSWORD = "put your password here"

STRIPE_API_VERSION = "2020-08-27"


class ProvisioningSettings(BaseSettings):
    """Push provisioning settings.

    Read from ``PUSH_PROVISIONING_*`` environment variables or a ``.env`` file.
    ``backend_url`` is the base URL of your test backend, something like
    ``https://push-provisioning-samples.onrender.com``; username and password
    must match the ones configured on that backend.
    """

    model_config = SettingsConfigDict(
        env_prefix="PUSH_PROVISIONING_",
        env_file=".env",
        extra="ignore",
    )

    backend_url: str = PLACEHOLDER_BACKEND_URL
    backend_username: str = PLACEHOLDER_USERNAME
    backend_password: str = PLACEHOLDER_PASSWORD

    # Stripe API version requested for ephemeral keys and pass details
    stripe_api_version: str = STRIPE_API_VERSION
    stripe_api_base: str = "https://api.stripe.com"
    livemode: bool = True

    timeout_seconds: float = 15.0
    enable_logs: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    @field_validator("backend_url", mode="after")
    @classmethod
    def normalize_backend_url(cls, v: str) -> str:
        """Relay paths are relative, so the base URL needs a trailing slash."""
        v = v.strip()
        if v and v != PLACEHOLDER_BACKEND_URL and not v.endswith("/"):
            v += "/"
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v):
        if isinstance(v, str):
            return v.upper()
        return v

    @field_validator("timeout_seconds")
    @classmethod
    def positive_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeout_seconds must be positive")
        return v

    def missing_fields(self) -> list[str]:
        missing = []
        if not self.backend_url or self.backend_url == PLACEHOLDER_BACKEND_URL:
            missing.append("backend_url")
        if not self.backend_username or self.backend_username == PLACEHOLDER_USERNAME:
            missing.append("backend_username")
        if not self.backend_password or self.backend_password == PLACEHOLDER_PASSWORD:
            missing.append("backend_password")
        return missing

    @property
    def is_configured(self) -> bool:
        return not self.missing_fields()

    def require_configured(self) -> "ProvisioningSettings":
        missing = self.missing_fields()
        if missing:
            env_names = ", ".join(f"PUSH_PROVISIONING_{name.upper()}" for name in missing)
            raise ConfigurationError(
                f"Backend relay is not configured. Set {env_names}.",
                details={"missing": missing},
            )
        return self


@lru_cache
def get_settings() -> ProvisioningSettings:
    return ProvisioningSettings()
