"""Build the Shopify order document for a confirmed Cashea down payment."""

from typing import Any

from cashea_relay.confirmation.schemas import Address, ConfirmationRequest, Customer, LineItem


def customer_address(customer: Customer, default_country: str = "VE") -> dict[str, Any]:
    """Minimal address built from the customer's own fields."""
    return {
        "first_name": customer.first_name,
        "last_name": customer.last_name,
        "address1": customer.address1 or "",
        "city": customer.city or "",
        "province": customer.province or "",
        "country": customer.country or default_country,
        "zip": customer.zip or "",
    }


def _address(address: Address) -> dict[str, Any]:
    return address.model_dump(exclude_none=True)


def _line_item(item: LineItem) -> dict[str, Any]:
    return {
        "title": item.title,
        "price": format(item.price, "f"),
        "quantity": item.quantity,
        "sku": item.sku or "",
        "variant_id": item.variant_id,
    }


def _customer_block(request: ConfirmationRequest) -> dict[str, Any]:
    block = {
        "first_name": request.customer.first_name,
        "last_name": request.customer.last_name,
    }
    email = request.email or request.customer.email
    phone = request.phone or request.customer.phone
    if email:
        block["email"] = email
    if phone:
        block["phone"] = phone
    return block


def build_shopify_order(
    request: ConfirmationRequest,
    payment_channel: str = "Cashea",
    default_country: str = "VE",
) -> dict[str, Any]:
    """Map a ConfirmationRequest onto a Shopify ``orders.json`` payload.

    The order is created unpaid: financial status ``pending`` with a single
    pending ``sale`` transaction for the confirmed amount. Billing falls back
    to the shipping address, which falls back to the customer's own fields.
    """
    if request.shipping_address is not None:
        shipping = _address(request.shipping_address)
    else:
        shipping = customer_address(request.customer, default_country)

    if request.billing_address is not None:
        billing = _address(request.billing_address)
    else:
        billing = dict(shipping)

    return {
        "order": {
            "line_items": [_line_item(item) for item in request.line_items],
            "customer": _customer_block(request),
            "billing_address": billing,
            "shipping_address": shipping,
            "financial_status": "pending",
            "fulfillment_status": None,
            "note": f"Orden creada desde {payment_channel}. ID: {request.id_number}",
            "tags": payment_channel,
            "transactions": [
                {
                    "kind": "sale",
                    "status": "pending",
                    "amount": format(request.amount, "f"),
                    "gateway": payment_channel,
                }
            ],
        }
    }
