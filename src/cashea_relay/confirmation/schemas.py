"""Pydantic schemas and result types for the confirmation workflow."""

import math
import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from cashea_relay.common.exceptions import InvalidRequestError

# Longest numeric prefix, the way parseFloat reads "12.5abc" as 12.5.
_NUMERIC_PREFIX = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


class Address(BaseModel):
    """Postal address as Shopify expects it; unknown keys are forwarded."""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    company: Optional[str] = None
    address1: Optional[str] = None
    address2: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    country: Optional[str] = None
    zip: Optional[str] = None
    phone: Optional[str] = None


class Customer(BaseModel):
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    address1: Optional[str] = None
    address2: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    country: Optional[str] = None
    zip: Optional[str] = None


class LineItem(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    title: str
    price: Decimal
    quantity: int = Field(default=1, ge=1)
    sku: Optional[str] = None
    variant_id: Optional[Union[int, str]] = None


class ConfirmationRequest(BaseModel):
    """A validated Cashea down-payment notification."""

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    id_number: str = Field(..., min_length=1, alias="idNumber")
    amount: Decimal = Field(..., gt=0)
    customer: Customer
    line_items: list[LineItem] = Field(..., min_length=1, alias="lineItems")
    shipping_address: Optional[Address] = Field(default=None, alias="shippingAddress")
    billing_address: Optional[Address] = Field(default=None, alias="billingAddress")
    email: Optional[str] = None
    phone: Optional[str] = None


def parse_amount(value: Any) -> Decimal:
    """Coerce an inbound amount to a Decimal, returning 0 when it cannot be read."""
    if value is None or isinstance(value, bool):
        return Decimal(0)
    if isinstance(value, (int, float, Decimal)):
        text = str(value)
    elif isinstance(value, str):
        match = _NUMERIC_PREFIX.match(value.strip())
        if match is None:
            return Decimal(0)
        text = match.group(0)
    else:
        return Decimal(0)

    try:
        amount = Decimal(text)
    except InvalidOperation:
        return Decimal(0)
    # Must also be a finite, non-zero JSON float.
    if not amount.is_finite() or not math.isfinite(float(amount)):
        return Decimal(0)
    if amount and not float(amount):
        return Decimal(0)
    return amount


def _is_blank(value: Any) -> bool:
    if isinstance(value, str):
        return not value.strip()
    return not value


def parse_confirmation(payload: Any) -> ConfirmationRequest:
    """Validate a raw request body and build a ConfirmationRequest.

    The four required-field checks run in a fixed order and stop at the
    first failure, so callers always get the same message for the same
    defect. Structural problems found afterwards are reported as a list.

    Raises:
        InvalidRequestError: if any check fails.
    """
    if not isinstance(payload, dict):
        raise InvalidRequestError(
            "El cuerpo de la solicitud debe ser un objeto JSON",
            error="Cuerpo inválido",
        )

    id_number = payload.get("idNumber")
    if _is_blank(id_number) or isinstance(id_number, (bool, dict, list)):
        raise InvalidRequestError("Se requiere idNumber")

    amount = parse_amount(payload.get("amount"))
    if amount <= 0:
        raise InvalidRequestError("El monto debe ser mayor a 0", error="Monto inválido")

    line_items = payload.get("lineItems")
    if not isinstance(line_items, list) or not line_items:
        raise InvalidRequestError("Se requiere al menos un producto")

    customer = payload.get("customer")
    if (
        not isinstance(customer, dict)
        or _is_blank(customer.get("first_name"))
        or _is_blank(customer.get("last_name"))
    ):
        raise InvalidRequestError("Se requieren datos completos del cliente")

    try:
        return ConfirmationRequest.model_validate(
            {**payload, "idNumber": str(id_number).strip(), "amount": amount}
        )
    except ValidationError as exc:
        errors = [
            {"loc": ".".join(str(part) for part in err["loc"]), "msg": err["msg"]}
            for err in exc.errors()
        ]
        raise InvalidRequestError(
            "La solicitud contiene campos inválidos",
            error="Datos inválidos",
            errors=errors,
        ) from exc


# ── Workflow results ──


class Stage(str, Enum):
    """Where in the workflow a request ended."""

    VALIDATING = "validating"
    CONFIRMING_PAYMENT = "confirming_payment"
    CREATING_ORDER = "creating_order"


class Outcome(str, Enum):
    SUCCESS = "success"
    PARTIAL_SUCCESS = "partial_success"
    VALIDATION_ERROR = "validation_error"
    PROVIDER_ERROR = "provider_error"
    SERVER_ERROR = "server_error"


@dataclass
class UpstreamResponse:
    """Status and decoded body of one outbound call."""

    status_code: int
    body: Any = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


@dataclass
class ProviderConfirmation(UpstreamResponse):
    """Cashea's answer to a down-payment confirmation."""

    @property
    def ok(self) -> bool:
        return self.status_code in (200, 201)


@dataclass
class PlatformResult(UpstreamResponse):
    """Shopify's answer to an order creation."""

    @property
    def order(self) -> Optional[dict[str, Any]]:
        if isinstance(self.body, dict) and isinstance(self.body.get("order"), dict):
            return self.body["order"]
        return None


@dataclass
class WorkflowResult:
    """Final outcome of one confirmation request, ready to be sent back."""

    outcome: Outcome
    stage: Stage
    status_code: int
    body: dict[str, Any]
