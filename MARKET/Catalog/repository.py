# file: MARKET/Catalog/repository.py
"""
Firestore reads behind the catalog search.

Firestore has no spherical-cap operator, so the geo query streams the
active vendors and applies the containment test from ``utils.geo`` to
each stored ``[lng, lat]`` pair. Listing and review lookups are batched
into ``in`` filters of at most ``FIRESTORE_IN_LIMIT`` ids.
"""

import logging
from typing import Dict, Iterable, List, Optional

from MARKET.core.config import (
    CUSTOMERS,
    FIRESTORE_IN_LIMIT,
    PRODUCTS,
    VENDOR_PRODUCT_REVIEWS,
    VENDOR_PRODUCTS,
    VENDORS,
)
from MARKET.utils.geo import Point, is_within_radius, point_from_location

logger = logging.getLogger("catalog.repository")


# ==============================
# Helpers
# ==============================
def matches_text(term: Optional[str], *fields: Optional[str]) -> bool:
    """Case-insensitive substring match against any of the fields."""
    if not term:
        return True
    needle = term.casefold()
    return any(field and needle in str(field).casefold() for field in fields)


def _chunks(ids: List[str], size: int = FIRESTORE_IN_LIMIT) -> Iterable[List[str]]:
    for start in range(0, len(ids), size):
        yield ids[start:start + size]


def location_out(location: Optional[dict]) -> Optional[dict]:
    if not isinstance(location, dict):
        return None
    return {
        "type": location.get("type", "Point"),
        "coordinates": location.get("coordinates"),
        "formattedAddress": location.get("formatted_address"),
        "street": location.get("street"),
        "city": location.get("city"),
        "state": location.get("state"),
        "zipcode": location.get("zipcode"),
        "country": location.get("country"),
    }


def vendor_summary(doc_id: str, data: dict) -> dict:
    # Only public fields; credentials and verification codes never leave the store.
    return {
        "id": doc_id,
        "name": data.get("name"),
        "description": data.get("description"),
        "vendorType": data.get("vendor_type"),
        "isActive": data.get("is_active", False),
        "location": location_out(data.get("location")),
    }


def product_summary(doc_id: str, data: dict) -> dict:
    return {
        "id": doc_id,
        "title": data.get("title"),
        "description": data.get("description"),
        "price": data.get("price"),
        "imageUrl": data.get("image_url"),
        "category": data.get("category_id"),
        "subCategory": data.get("sub_category_id"),
    }


def account_profile(doc_id: str, data: dict) -> dict:
    """Own-account view; password hashes, tokens and verification codes are left out."""
    return {
        "id": doc_id,
        "name": data.get("name"),
        "email": data.get("email"),
        "phone": data.get("phone"),
        "isActive": data.get("is_active", False),
        "location": location_out(data.get("location")),
        "createdAt": data.get("created_at"),
        "updatedAt": data.get("updated_at"),
    }


def review_summary(doc_id: str, data: dict) -> dict:
    return {
        "id": doc_id,
        "customer": data.get("customer_id"),
        "vendorProduct": data.get("vendor_product_id"),
        "order": data.get("order_id"),
        "rating": data.get("rating"),
        "review": data.get("review"),
        "productQuality": data.get("product_quality"),
        "deliveryExperience": data.get("delivery_experience"),
        "valueForMoney": data.get("value_for_money"),
        "isVerified": data.get("is_verified", False),
        "createdAt": data.get("created_at"),
        "updatedAt": data.get("updated_at"),
    }


def listing_summary(listing: dict, vendor: Optional[dict], product: Optional[dict]) -> dict:
    product_id = listing.get("product_id")
    return {
        "id": listing["id"],
        "vendor": vendor,
        "product": product_summary(product_id, product) if product is not None else None,
        "discountType": listing.get("discount_type"),
        "discountValue": listing.get("discount_value", 0),
        "inStock": listing.get("in_stock", True),
        "createdAt": listing.get("created_at"),
        "updatedAt": listing.get("updated_at"),
    }


# ==============================
# Vendors
# ==============================
def find_vendors_within_radius(
    db,
    center: Point,
    radius_km: float,
    vendor_type: Optional[str] = None,
    search_term: Optional[str] = None,
) -> List[dict]:
    """Active vendors inside the spherical cap, with optional type / text filters ANDed in."""
    query = db.collection(VENDORS).where("is_active", "==", True)
    if vendor_type:
        query = query.where("vendor_type", "==", vendor_type)

    vendors = []
    for doc in query.stream():
        data = doc.to_dict() or {}
        point = point_from_location(data.get("location"))
        if point is None or not is_within_radius(center, point, radius_km):
            continue
        if not matches_text(search_term, data.get("name"), data.get("description")):
            continue
        vendors.append(vendor_summary(doc.id, data))

    logger.debug("Geo query r=%skm around %s -> %d vendors", radius_km, center, len(vendors))
    return vendors


def list_vendors(db) -> List[dict]:
    return [vendor_summary(doc.id, doc.to_dict() or {}) for doc in db.collection(VENDORS).stream()]


def get_vendor(db, vendor_id: str) -> Optional[dict]:
    doc = db.collection(VENDORS).document(vendor_id).get()
    if not doc.exists:
        return None
    return vendor_summary(doc.id, doc.to_dict() or {})


# ==============================
# Listings / products / reviews
# ==============================
def find_listings_for_vendors(
    db,
    vendor_ids: List[str],
    in_stock_only: bool = True,
    exclude_id: Optional[str] = None,
) -> List[dict]:
    listings = []
    for chunk in _chunks(list(vendor_ids)):
        query = db.collection(VENDOR_PRODUCTS).where("vendor_id", "in", chunk)
        if in_stock_only:
            query = query.where("in_stock", "==", True)
        for doc in query.stream():
            if exclude_id and doc.id == exclude_id:
                continue
            listings.append({**(doc.to_dict() or {}), "id": doc.id})
    return listings


def get_products(db, product_ids: Iterable[str]) -> Dict[str, dict]:
    products = {}
    for product_id in dict.fromkeys(product_ids):
        if not product_id:
            continue
        doc = db.collection(PRODUCTS).document(product_id).get()
        if doc.exists:
            products[product_id] = doc.to_dict() or {}
    return products


def average_ratings(db, listing_ids: List[str]) -> Dict[str, float]:
    totals: Dict[str, List[float]] = {}
    for chunk in _chunks(list(listing_ids)):
        query = db.collection(VENDOR_PRODUCT_REVIEWS).where("vendor_product_id", "in", chunk)
        for doc in query.stream():
            data = doc.to_dict() or {}
            if data.get("is_reported"):
                continue
            rating = data.get("rating")
            if isinstance(rating, (int, float)):
                totals.setdefault(data.get("vendor_product_id"), []).append(float(rating))
    return {key: sum(values) / len(values) for key, values in totals.items()}


# ==============================
# Customers
# ==============================
def get_customer_location(db, customer_id: str) -> Optional[Point]:
    doc = db.collection(CUSTOMERS).document(customer_id).get()
    if not doc.exists:
        return None
    return point_from_location((doc.to_dict() or {}).get("location"))
