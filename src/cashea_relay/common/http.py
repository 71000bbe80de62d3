"""Helpers shared by the outbound HTTP clients."""

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


def read_json_body(resp: httpx.Response, upstream: str) -> Any:
    """Decode a response body, returning ``{}`` when it is empty or not JSON."""
    if not resp.content:
        return {}
    try:
        return resp.json()
    except ValueError:
        logger.warning(
            "%s returned a non-JSON body (status %s)",
            upstream,
            resp.status_code,
            extra={"upstream": upstream, "status_code": resp.status_code},
        )
        return {}
