from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from ..db.gateway import Gateway, RecordNotFoundError
from ..models.catalog import Product
from .validation import require_fields

"""Product catalog maintenance."""

__all__ = [
    "PRODUCTS_TABLE",
    "DEFAULT_DESCRIPTION",
    "list_products",
    "add_product",
    "update_product",
    "delete_product",
    "find_product",
]

logger = logging.getLogger(__name__)

PRODUCTS_TABLE = "products"
DEFAULT_DESCRIPTION = "ELASTIC"
REQUIRED = ("product_code", "width", "color")


def _payload(form: Mapping[str, Any]) -> dict[str, Any]:
    require_fields(form, REQUIRED, what="product")
    description = str(form.get("description") or "").strip() or DEFAULT_DESCRIPTION
    return {
        "product_code": str(form["product_code"]).strip(),
        "description": description,
        "width": str(form["width"]).strip(),
        "color": str(form["color"]).strip(),
    }


def list_products(gateway: Gateway) -> list[Product]:
    """All products ordered by product code."""
    return [Product.from_row(r) for r in gateway.select(PRODUCTS_TABLE, order_by="product_code")]


def add_product(gateway: Gateway, form: Mapping[str, Any]) -> Product:
    """Validate and insert a product.

    Raises:
        ValidationError: product_code, width or color missing
        GatewayError: insert failed
    """
    stored = gateway.insert(PRODUCTS_TABLE, [_payload(form)])
    product = Product.from_row(stored[0])
    logger.debug("added product %s", product.product_code)
    return product


def update_product(gateway: Gateway, product_id: str, form: Mapping[str, Any]) -> Product:
    """Validate and overwrite an existing product."""
    rows = gateway.update(PRODUCTS_TABLE, _payload(form), filters={"id": product_id})
    if not rows:
        raise RecordNotFoundError(f"product not found: {product_id}")
    return Product.from_row(rows[0])


def delete_product(gateway: Gateway, product_id: str) -> None:
    if not gateway.delete(PRODUCTS_TABLE, filters={"id": product_id}):
        raise RecordNotFoundError(f"product not found: {product_id}")


def find_product(products: Iterable[Product], code: str) -> Product | None:
    for p in products:
        if p.product_code == code:
            return p
    return None
