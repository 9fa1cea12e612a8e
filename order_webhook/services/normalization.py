"""Turn Shopify order payloads into canonical customer records.

Orders arrive with no enforced schema: any block may be missing, null, or of
the wrong type. Every lookup here tolerates that and yields an empty value.
"""

from collections.abc import Iterable
from typing import Any

from order_webhook.schemas.webhook import AddressSource, PipelineConfig

_ADDRESS_KEYS = {
    AddressSource.BILLING: "billing_address",
    AddressSource.SHIPPING: "shipping_address",
}


def get_path(data: Any, *keys: str) -> Any:
    """Follow ``keys`` through nested dicts, returning None on any miss."""
    current = data
    for key in keys:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def get_text(data: Any, *keys: str) -> str:
    """Like :func:`get_path` but always returns a stripped string.

    Only strings and numbers count as text; ``true`` is not an email.
    """
    value = get_path(data, *keys)
    if value is None or isinstance(value, (bool, dict, list)):
        return ""
    return str(value).strip()


def first_non_empty(candidates: Iterable[str]) -> str:
    for candidate in candidates:
        if candidate:
            return candidate
    return ""


def join_name(*parts: str) -> str:
    """Join name parts with single spaces, dropping empty ones."""
    return " ".join(p.strip() for p in parts if p and p.strip())


def resolve_email(order: dict[str, Any]) -> str:
    return first_non_empty(
        [
            get_text(order, "email"),
            get_text(order, "customer", "email"),
            get_text(order, "customer", "default_address", "email"),
        ]
    )


def resolve_names(
    order: dict[str, Any],
    address_source: AddressSource = AddressSource.BILLING,
) -> tuple[str, str, str]:
    """Return ``(first_name, last_name, full_name)`` for an order."""
    address_key = _ADDRESS_KEYS[address_source]
    first_name = first_non_empty(
        [get_text(order, "customer", "first_name"), get_text(order, address_key, "first_name")]
    )
    last_name = first_non_empty(
        [get_text(order, "customer", "last_name"), get_text(order, address_key, "last_name")]
    )
    full_name = get_text(order, "shipping_address", "name") or join_name(first_name, last_name)
    return first_name, last_name, full_name


def ordered_product_ids(order: dict[str, Any]) -> set[str]:
    line_items = order.get("line_items")
    if not isinstance(line_items, list):
        return set()
    return {
        str(item["product_id"])
        for item in line_items
        if isinstance(item, dict) and item.get("product_id") is not None
    }


def matches_product_allowlist(order: dict[str, Any], allowed: frozenset[str]) -> bool:
    """True when no allow-list is configured or any ordered product is on it."""
    if not allowed:
        return True
    return not ordered_product_ids(order).isdisjoint(allowed)


def source_order_id(order: dict[str, Any]) -> int | str | None:
    order_id = order.get("id")
    if isinstance(order_id, (int, str)) and not isinstance(order_id, bool):
        return order_id
    return None


def normalize_order(order: dict[str, Any], config: PipelineConfig) -> dict[str, Any]:
    """Extract customer fields from an order.

    Returns a plain dict rather than a ``NormalizedCustomer`` because the email
    may still be empty here; the caller decides how to reject that.
    """
    first_name, last_name, full_name = resolve_names(order, config.name_address_source)
    return {
        "email": resolve_email(order),
        "first_name": first_name,
        "last_name": last_name,
        "full_name": full_name,
        "source_order_id": source_order_id(order),
    }
