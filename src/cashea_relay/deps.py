"""Dependency injection singletons for Cashea-Relay."""

from cashea_relay.common.config import get_settings
from cashea_relay.confirmation.cashea_client import CasheaClient
from cashea_relay.confirmation.service import ConfirmationService
from cashea_relay.confirmation.shopify_client import ShopifyClient

_confirmation: ConfirmationService | None = None


def get_cashea_client() -> CasheaClient:
    settings = get_settings()
    return CasheaClient(
        base_url=settings.cashea_base_url,
        api_key=settings.cashea_api_key,
        timeout=settings.http_timeout,
        verify_tls=settings.cashea_verify_tls,
    )


def get_shopify_client() -> ShopifyClient:
    settings = get_settings()
    return ShopifyClient(
        store=settings.shopify_store,
        access_token=settings.shopify_access_token,
        api_version=settings.shopify_api_version,
        host=settings.shopify_host,
        timeout=settings.http_timeout,
    )


def get_confirmation_service() -> ConfirmationService:
    global _confirmation
    if _confirmation is None:
        _confirmation = ConfirmationService(
            get_settings(),
            cashea_client=get_cashea_client(),
            shopify_client=get_shopify_client(),
        )
    return _confirmation


def reset_singletons() -> None:
    """Reset all singletons (for testing)."""
    global _confirmation
    _confirmation = None
