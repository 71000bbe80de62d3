"""Cashea confirmation endpoint."""

import json
import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from cashea_relay.confirmation.service import ConfirmationService
from cashea_relay.deps import get_confirmation_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["confirmation"])

# Sent on every response from this endpoint, including errors.
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


@router.options("/confirmar-cashea")
async def confirmation_preflight():
    """CORS preflight; always succeeds."""
    return Response(status_code=200, headers=CORS_HEADERS)


@router.post("/confirmar-cashea")
async def confirm_cashea(
    request: Request,
    svc: ConfirmationService = Depends(get_confirmation_service),
):
    """Confirm a Cashea down payment and create the matching Shopify order."""
    body = await request.body()
    try:
        payload = json.loads(body)
    except ValueError:
        logger.warning("Confirmation request body is not valid JSON")
        payload = None

    result = await svc.confirm(payload)
    return JSONResponse(
        status_code=result.status_code,
        content=result.body,
        headers=CORS_HEADERS,
    )


@router.api_route("/confirmar-cashea", methods=["GET", "HEAD", "PUT", "PATCH", "DELETE", "TRACE"])
async def confirmation_method_not_allowed():
    return JSONResponse(
        status_code=405,
        content={"error": "Método no permitido", "message": "Solo se acepta POST"},
        headers={**CORS_HEADERS, "Allow": "POST, OPTIONS"},
    )
