# RationPack/assembly.py
"""
Ration-pack bundling: for every nearby vendor, pick a listing for each
requested product name and total the bundle.

Matching is a case-insensitive substring test on the product title. When
several in-stock listings match, the tie-break rule is ``first_by_listing_id``:
the listing with the smallest document id wins.
"""

import logging
from decimal import Decimal
from typing import Dict, List, Optional

from MARKET.Search.ranking import SortOrder, sort_bundles
from MARKET.core.config import UNKNOWN_DISTANCE_KM
from MARKET.utils.geo import Point, distance_km, point_from_location
from MARKET.utils.pricing import (
    HUNDRED,
    ZERO,
    compute_final_price,
    discount_from_fields,
    round_money,
)

logger = logging.getLogger("rationpack.assembly")


def first_by_listing_id(candidates: List[dict]) -> Optional[dict]:
    return min(candidates, key=lambda listing: listing["id"]) if candidates else None


def find_listing(name: str, listings: List[dict], products: Dict[str, dict]) -> Optional[dict]:
    needle = name.casefold()
    candidates = [
        listing
        for listing in listings
        if listing.get("in_stock", True)
        and listing.get("product_id") in products
        and needle in str(products[listing["product_id"]].get("title") or "").casefold()
    ]
    return first_by_listing_id(candidates)


def unavailable_item(name: str) -> dict:
    return {
        "productId": None,
        "vendorProductId": None,
        "title": name,
        "imageUrl": None,
        "originalPrice": 0,
        "discountedPrice": 0,
        "discountType": None,
        "discountValue": None,
        "isAvailable": False,
    }


def build_bundle(
    product_names: List[str],
    vendor: dict,
    listings: List[dict],
    products: Dict[str, dict],
) -> Optional[dict]:
    """One vendor's bundle, or None when the vendor has none of the products."""
    items = []
    total_original = ZERO
    total_discounted = ZERO
    available = 0

    for name in product_names:
        listing = find_listing(name, listings, products)
        if listing is None:
            items.append(unavailable_item(name))
            continue

        product = products[listing["product_id"]]
        discount = discount_from_fields(listing.get("discount_type"), listing.get("discount_value"))
        quote = compute_final_price(product.get("price"), discount)
        total_original += quote.base_price
        total_discounted += quote.final_price
        available += 1

        items.append({
            "productId": listing["product_id"],
            "vendorProductId": listing["id"],
            "title": product.get("title"),
            "imageUrl": product.get("image_url"),
            "originalPrice": float(quote.base_price),
            "discountedPrice": float(quote.final_price),
            "discountType": listing.get("discount_type"),
            "discountValue": listing.get("discount_value"),
            "isAvailable": True,
        })

    if available == 0:
        return None

    savings = total_original - total_discounted
    savings_pct = round_money(savings / total_original * HUNDRED) if total_original > ZERO else Decimal(0)

    return {
        "vendor": {"id": vendor["id"], "name": vendor.get("name"), "location": vendor.get("location")},
        "items": items,
        "totalOriginalPrice": float(round_money(total_original)),
        "totalDiscountedPrice": float(round_money(total_discounted)),
        "savings": float(round_money(savings)),
        "savingsPercentage": float(savings_pct),
        "availableProductsCount": available,
        "requestedProductsCount": len(product_names),
    }


def build_ration_packs(
    product_names: List[str],
    center: Point,
    vendors: List[dict],
    listings_by_vendor: Dict[str, List[dict]],
    products: Dict[str, dict],
    sort_by: Optional[str] = SortOrder.CHEAPEST.value,
) -> List[dict]:
    bundles = []
    for vendor in vendors:
        bundle = build_bundle(product_names, vendor, listings_by_vendor.get(vendor["id"], []), products)
        if bundle is None:
            continue
        if SortOrder.parse(sort_by) in (SortOrder.NEAREST, SortOrder.FARTHEST):
            point = point_from_location(vendor.get("location"))
            bundle["distance"] = distance_km(center, point) if point else UNKNOWN_DISTANCE_KM
        bundles.append(bundle)

    logger.debug("Built %d ration packs from %d vendors", len(bundles), len(vendors))
    return sort_bundles(bundles, sort_by)
