"""Cashea-Relay configuration via pydantic-settings."""

import warnings
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

_REQUIRED_SECRETS = ("cashea_api_key", "shopify_store", "shopify_access_token")


class RelaySettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="RELAY_")

    environment: str = "development"
    log_level: str = "INFO"

    # Cashea (payment provider)
    cashea_api_key: str = ""
    cashea_base_url: str = "https://external.cashea.app"
    # Applies to the Cashea client only; Shopify always verifies.
    cashea_verify_tls: bool = True

    # Shopify (commerce platform)
    shopify_store: str = ""
    shopify_access_token: str = ""
    shopify_host: str = "myshopify.com"
    shopify_api_version: str = "2024-01"

    # Workflow
    http_timeout: float = 8.0  # seconds, per outbound call
    default_country: str = "VE"
    payment_channel: str = "Cashea"
    # "abort": a rejected down payment never reaches Shopify.
    # "proceed": log the rejection and create the order anyway.
    provider_failure_policy: Literal["abort", "proceed"] = "abort"

    # API
    api_title: str = "Cashea-Relay"
    api_version: str = "0.1.0"
    host: str = "0.0.0.0"
    port: int = 8080
    api_prefix: str = "/api"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    def validate_for_production(self) -> None:
        """Raise if required secrets are missing in non-development environments."""
        missing = [field for field in _REQUIRED_SECRETS if not getattr(self, field)]

        if not self.is_development and missing:
            env_vars = ", ".join(f"RELAY_{f.upper()}" for f in missing)
            raise RuntimeError(
                f"Missing required settings in '{self.environment}' environment: {env_vars}."
            )

        if missing:
            warnings.warn(
                "Cashea/Shopify credentials are not configured; set RELAY_CASHEA_API_KEY, "
                "RELAY_SHOPIFY_STORE and RELAY_SHOPIFY_ACCESS_TOKEN",
                UserWarning,
                stacklevel=2,
            )


@lru_cache
def get_settings() -> RelaySettings:
    settings = RelaySettings()
    settings.validate_for_production()
    return settings
