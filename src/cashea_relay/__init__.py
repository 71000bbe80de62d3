"""Cashea-Relay: confirms Cashea down payments and creates Shopify orders."""

from cashea_relay.confirmation.service import ConfirmationService
from cashea_relay.confirmation.schemas import ConfirmationRequest, WorkflowResult

__all__ = [
    "ConfirmationService",
    "ConfirmationRequest",
    "WorkflowResult",
]
__version__ = "0.1.0"
