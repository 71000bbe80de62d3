"""ConfirmationService: confirms a Cashea down payment, then creates the Shopify order."""

import asyncio
import logging
import traceback
from typing import Any

from cashea_relay.common.config import RelaySettings
from cashea_relay.common.exceptions import InvalidRequestError, UpstreamUnavailableError
from cashea_relay.confirmation.cashea_client import CasheaClient
from cashea_relay.confirmation.order_builder import build_shopify_order
from cashea_relay.confirmation.schemas import (
    ConfirmationRequest,
    Outcome,
    ProviderConfirmation,
    Stage,
    WorkflowResult,
    parse_confirmation,
)
from cashea_relay.confirmation.shopify_client import ShopifyClient

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Pago confirmado en Cashea y orden creada en Shopify"
PARTIAL_WARNING = "Pago confirmado en Cashea pero error al crear orden en Shopify"
UNCONFIRMED_WARNING = "Cashea no confirmó el pago; la orden se procesó de todas formas"

# Shopify calls still running after their request was cancelled.
_detached_tasks: set[asyncio.Future] = set()


class ConfirmationService:
    """Runs the two-phase confirmation workflow for one request at a time.

    Each call to :meth:`confirm` issues at most one Cashea request and one
    Shopify request, in that order, and never retries either. Resubmitting
    the same request confirms and orders again; there is no deduplication.
    """

    def __init__(
        self,
        settings: RelaySettings,
        cashea_client: CasheaClient,
        shopify_client: ShopifyClient,
    ):
        self.settings = settings
        self.cashea = cashea_client
        self.shopify = shopify_client

    async def confirm(self, payload: Any) -> WorkflowResult:
        """Validate ``payload`` and drive it through both upstream calls.

        Steps:
        1. Validate the request (no network calls on failure)
        2. Confirm the down payment with Cashea
        3. Create the order in Shopify
        """
        # 1. Validate
        try:
            request = parse_confirmation(payload)
        except InvalidRequestError as e:
            logger.warning(
                "Rejected confirmation request: %s", e.message,
                extra={"stage": Stage.VALIDATING.value},
            )
            return self._validation_error(e)

        logger.info(
            "Validated confirmation request with %d item(s)",
            len(request.line_items),
            extra={"id_number": request.id_number},
        )

        # 2. Confirm with Cashea
        try:
            confirmation = await self.cashea.confirm_down_payment(
                request.id_number, request.amount,
            )
        except UpstreamUnavailableError as e:
            logger.error(
                "Cashea unreachable: %s", e.message,
                extra={"id_number": request.id_number, "upstream": e.upstream},
            )
            return self._server_error(request, Stage.CONFIRMING_PAYMENT, e)
        except Exception as e:
            logger.exception(
                "Cashea confirmation failed", extra={"id_number": request.id_number},
            )
            return self._server_error(request, Stage.CONFIRMING_PAYMENT, e)

        if not confirmation.ok:
            logger.error(
                "Cashea rejected down payment with status %s",
                confirmation.status_code,
                extra={"id_number": request.id_number, "status_code": confirmation.status_code},
            )
            if self.settings.provider_failure_policy == "abort":
                return self._provider_error(request, confirmation)
            logger.warning(
                "Creating Shopify order for an unconfirmed payment",
                extra={"id_number": request.id_number},
            )
        else:
            logger.info("Payment confirmed in Cashea", extra={"id_number": request.id_number})

        # 3. Create the Shopify order; survives cancellation of the request.
        task = asyncio.ensure_future(self._create_order(request, confirmation))
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            logger.error(
                "Request cancelled after Cashea confirmation; finishing Shopify order in background",
                extra={"id_number": request.id_number, "stage": Stage.CREATING_ORDER.value},
            )
            _detached_tasks.add(task)
            task.add_done_callback(_log_detached_result)
            raise

    async def _create_order(
        self,
        request: ConfirmationRequest,
        confirmation: ProviderConfirmation,
    ) -> WorkflowResult:
        order = build_shopify_order(
            request,
            payment_channel=self.settings.payment_channel,
            default_country=self.settings.default_country,
        )
        try:
            result = await self.shopify.create_order(order)
        except UpstreamUnavailableError as e:
            logger.error(
                "Shopify unreachable after payment confirmation: %s", e.message,
                extra={"id_number": request.id_number, "upstream": e.upstream},
            )
            return self._server_error(request, Stage.CREATING_ORDER, e)
        except Exception as e:
            logger.exception(
                "Shopify order creation failed", extra={"id_number": request.id_number},
            )
            return self._server_error(request, Stage.CREATING_ORDER, e)

        created = result.order
        if not result.ok or created is None:
            logger.error(
                "Shopify rejected order with status %s",
                result.status_code,
                extra={"id_number": request.id_number, "status_code": result.status_code},
            )
            body = {
                "success": True,
                "warning": PARTIAL_WARNING,
                "idNumber": request.id_number,
                "amount": float(request.amount),
                "providerResponse": confirmation.body,
                "platformError": result.body,
            }
            if not confirmation.ok:
                body["providerStatus"] = confirmation.status_code
            return WorkflowResult(Outcome.PARTIAL_SUCCESS, Stage.CREATING_ORDER, 207, body)

        logger.info(
            "Shopify order created",
            extra={"id_number": request.id_number, "order_id": created.get("id")},
        )
        body = {
            "success": True,
            "idNumber": request.id_number,
            "amount": float(request.amount),
            "message": SUCCESS_MESSAGE,
            "providerResponse": confirmation.body,
            "order": {
                "id": created.get("id"),
                "order_number": created.get("order_number"),
                "total_price": created.get("total_price"),
                "admin_graphql_api_id": created.get("admin_graphql_api_id"),
            },
        }
        if not confirmation.ok:
            body["warning"] = UNCONFIRMED_WARNING
            body["providerStatus"] = confirmation.status_code
        return WorkflowResult(Outcome.SUCCESS, Stage.CREATING_ORDER, 200, body)

    # ── Response shaping ──

    def _validation_error(self, error: InvalidRequestError) -> WorkflowResult:
        body: dict[str, Any] = {"error": error.error, "message": error.message}
        if error.errors:
            body["errors"] = error.errors
        return WorkflowResult(Outcome.VALIDATION_ERROR, Stage.VALIDATING, 400, body)

    def _provider_error(
        self,
        request: ConfirmationRequest,
        confirmation: ProviderConfirmation,
    ) -> WorkflowResult:
        # Only error statuses are passed through; an odd 2xx/3xx becomes 502.
        status = confirmation.status_code if confirmation.status_code >= 400 else 502
        body = {
            "error": "Error al confirmar con Cashea",
            "status": confirmation.status_code,
            "details": confirmation.body,
            "idNumber": request.id_number,
        }
        return WorkflowResult(Outcome.PROVIDER_ERROR, Stage.CONFIRMING_PAYMENT, status, body)

    def _server_error(
        self,
        request: ConfirmationRequest,
        stage: Stage,
        error: Exception,
    ) -> WorkflowResult:
        body: dict[str, Any] = {
            "error": "Error del servidor",
            "message": "No se pudo completar la solicitud",
            "idNumber": request.id_number,
            "stage": stage.value,
        }
        if self.settings.is_development:
            body["detail"] = f"{type(error).__name__}: {error}"
            body["stack"] = traceback.format_exception(error)
        return WorkflowResult(Outcome.SERVER_ERROR, stage, 500, body)


def _log_detached_result(task: "asyncio.Future[WorkflowResult]") -> None:
    """Record how a Shopify call finished after its request was cancelled."""
    _detached_tasks.discard(task)
    if task.cancelled():
        logger.error("Detached Shopify order task was cancelled")
        return
    if task.exception() is not None:
        logger.error("Detached Shopify order task failed", exc_info=task.exception())
        return
    result = task.result()
    logger.warning(
        "Detached Shopify order finished with outcome %s",
        result.outcome.value,
        extra={
            "id_number": result.body.get("idNumber"),
            "status_code": result.status_code,
            "order_id": (result.body.get("order") or {}).get("id"),
        },
    )
