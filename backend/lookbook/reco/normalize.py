"""
Ingestion boundary: turns raw catalog rows of any accepted shape into Product models.

Catalog rows are loose. Images arrive as a list of urls, a list of {url}/{imageUrl}
dicts, a JSON string holding either of those, or a single url. List fields such as
occasions or style_tags can also arrive JSON-encoded. Everything is resolved here so
the scorer, selector and enrichment only ever see Product.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterable, List, Optional

from ..schemas import Product

logger = logging.getLogger(__name__)

PLACEHOLDER_IMAGE = "/placeholder.svg"

# Catalog category labels -> outfit slot
CATEGORY_ALIASES: Dict[str, str] = {
    "top": "top", "tops": "top",
    "bottom": "bottom", "bottoms": "bottom",
    "shoe": "shoes", "shoes": "shoes", "footwear": "shoes",
}


def parse_json_list(value: Any) -> List[Any]:
    """Return value as a list, decoding JSON-encoded arrays and wrapping scalars."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return []
        if text.startswith("["):
            try:
                decoded = json.loads(text)
            except json.JSONDecodeError:
                logger.debug(f"Undecodable JSON list: {text[:60]}")
                return []
            return decoded if isinstance(decoded, list) else [decoded]
        return [text]
    return [value]


def extract_image_urls(value: Any) -> List[str]:
    """Flatten any accepted image representation into a list of url strings."""
    urls: List[str] = []
    for entry in parse_json_list(value):
        if isinstance(entry, dict):
            entry = entry.get("url") or entry.get("imageUrl")
        if isinstance(entry, str) and entry.strip():
            urls.append(entry.strip())
    return urls


def is_valid_image_url(url: Optional[str]) -> bool:
    return bool(url) and url.strip() != "" and url.strip() != PLACEHOLDER_IMAGE


def has_valid_image(product: Any) -> bool:
    """True iff the product has at least one real image url.

    Accepts a Product or a raw row; for rows both `image` and `images` are checked.
    """
    if isinstance(product, Product):
        return any(is_valid_image_url(url) for url in product.images)
    candidates = extract_image_urls(product.get("image")) + extract_image_urls(product.get("images"))
    return any(is_valid_image_url(url) for url in candidates)


def _first(raw: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = raw.get(key)
        if value not in (None, ""):
            return value
    return None


def _as_price(value: Any) -> float:
    try:
        price = float(value)
    except (TypeError, ValueError):
        return 0.0
    return price if price > 0 else 0.0


def _as_float(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _as_strings(value: Any) -> List[str]:
    return [str(v) for v in parse_json_list(value) if v not in (None, "")]


def normalize_product(raw: Dict[str, Any], category: Optional[str] = None) -> Optional[Product]:
    """Map one raw catalog row onto Product.

    Missing fields fall back to defaults. Rows without an id, or without a
    recognisable category, are dropped (None).
    """
    product_id = raw.get("id")
    if product_id in (None, ""):
        return None

    declared = category or raw.get("category") or raw.get("clothing_category")
    slot = CATEGORY_ALIASES.get(str(declared or "").lower())
    if slot is None:
        logger.debug(f"Dropping product {product_id}: unknown category {declared!r}")
        return None

    images = [u for u in extract_image_urls(raw.get("images")) + extract_image_urls(raw.get("image"))
              if is_valid_image_url(u)]
    availability = raw.get("availability")

    return Product(
        id=product_id,
        name=_first(raw, "product_name", "name") or "Unnamed Product",
        price=_as_price(raw.get("price")),
        brand=raw.get("brand") or "Zara",
        color=_first(raw, "colour", "color") or "N/A",
        category=slot,
        description=raw.get("description") or "",
        images=list(dict.fromkeys(images)),
        url=_first(raw, "product_url", "url", "link") or "#",
        occasions=_as_strings(raw.get("occasions")),
        style_tags=_as_strings(raw.get("style_tags")),
        style_categories=_as_strings(raw.get("style_categories")),
        body_fits=_as_strings(raw.get("body_fits")),
        fabric_properties=_as_strings(_first(raw, "fabric_characteristics", "fabric_properties")),
        formality_level=_as_float(raw.get("formality_level")),
        availability=None if availability is None else availability is not False,
    )


def normalize_products(rows: Iterable[Dict[str, Any]], category: str) -> List[Product]:
    """Normalize a list of rows for one category, keeping catalog order and the first copy of each id."""
    products: List[Product] = []
    seen = set()
    for raw in rows:
        product = normalize_product(raw, category)
        if product is None or str(product.id) in seen:
            continue
        seen.add(str(product.id))
        products.append(product)
    return products
