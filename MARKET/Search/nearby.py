# Search/nearby.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from MARKET.Catalog.repository import (
    average_ratings,
    find_listings_for_vendors,
    find_vendors_within_radius,
    get_customer_location,
    get_products,
    listing_summary,
    matches_text,
)
from MARKET.Search.ranking import sort_products, sort_vendors
from MARKET.core.config import DEFAULT_RADIUS_KM, UNKNOWN_DISTANCE_KM
from MARKET.core.errors import ValidationError
from MARKET.core.firebase import get_db
from MARKET.core.security import AuthContext, get_current_customer
from MARKET.utils.geo import Point, distance_km, parse_radius, point_from_location, resolve_radius
from MARKET.utils.pricing import compute_final_price, discount_from_fields

logger = logging.getLogger("search.nearby")

router = APIRouter(prefix="/customers", tags=["search"])

NO_LOCATION_MESSAGE = (
    "No location available. Please provide lat and lng parameters "
    "or update your profile with an address."
)


# ==============================
# Utilities
# ==============================
def resolve_origin(db, auth: AuthContext, lat: Optional[float], lng: Optional[float]) -> Point:
    """Explicit lat/lng wins; otherwise the customer's stored location."""
    if lat is not None and lng is not None:
        return Point(lng=lng, lat=lat)
    point = get_customer_location(db, auth.subject_id)
    if point is None:
        raise ValidationError(NO_LOCATION_MESSAGE)
    return point


def with_distance(origin: Point, vendor: dict) -> dict:
    point = point_from_location(vendor.get("location"))
    distance = distance_km(origin, point) if point else UNKNOWN_DISTANCE_KM
    return {**vendor, "distance": distance}


def _vendor_ref(vendor: dict) -> dict:
    return {"id": vendor["id"], "name": vendor["name"], "location": vendor["location"]}


def _product_matches(
    product: dict,
    category_id: Optional[str],
    sub_category_id: Optional[str],
) -> bool:
    if category_id and product.get("category_id") != category_id:
        return False
    if sub_category_id and product.get("sub_category_id") != sub_category_id:
        return False
    return True


def _priced_listings(origin: Point, vendors: List[dict], listings: List[dict], products: dict) -> List[dict]:
    vendors_by_id = {v["id"]: v for v in vendors}
    priced = []
    for listing in listings:
        product = products.get(listing.get("product_id"))
        if product is None:
            continue
        vendor = vendors_by_id.get(listing.get("vendor_id"))
        item = listing_summary(listing, _vendor_ref(vendor) if vendor else None, product)
        item["distance"] = with_distance(origin, vendor)["distance"] if vendor else UNKNOWN_DISTANCE_KM
        quote = compute_final_price(
            product.get("price"),
            discount_from_fields(listing.get("discount_type"), listing.get("discount_value")),
        )
        item.update(quote.as_dict())
        priced.append(item)
    return priced


# ==============================
# Nearby vendors (fixed 1 km)
# ==============================
@router.get("/nearby-vendors")
async def get_nearby_vendors(
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    current_user: AuthContext = Depends(get_current_customer),
    db=Depends(get_db),
):
    origin = resolve_origin(db, current_user, lat, lng)
    vendors = find_vendors_within_radius(db, origin, DEFAULT_RADIUS_KM)
    return [with_distance(origin, v) for v in vendors]


# ==============================
# Nearby products
# ==============================
@router.get("/nearby-products")
async def get_nearby_products(
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    radius: Optional[str] = Query(None),
    category_id: Optional[str] = Query(None, alias="categoryId"),
    sub_category_id: Optional[str] = Query(None, alias="subCategoryId"),
    current_user: AuthContext = Depends(get_current_customer),
    db=Depends(get_db),
):
    origin = resolve_origin(db, current_user, lat, lng)
    vendors = find_vendors_within_radius(db, origin, parse_radius(radius))
    if not vendors:
        return {"message": "No vendors found nearby", "products": []}

    listings = find_listings_for_vendors(db, [v["id"] for v in vendors])
    products = {
        pid: p
        for pid, p in get_products(db, (l.get("product_id") for l in listings)).items()
        if _product_matches(p, category_id, sub_category_id)
    }
    items = _priced_listings(origin, vendors, listings, products)
    # newest listings first
    return sorted(items, key=lambda item: item.get("createdAt") or "", reverse=True)


# ==============================
# Combined vendor + product search
# ==============================
@router.get("/search-nearby")
async def search_nearby(
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    search_term: Optional[str] = Query(None, alias="searchTerm", max_length=100),
    category_id: Optional[str] = Query(None, alias="categoryId"),
    sub_category_id: Optional[str] = Query(None, alias="subCategoryId"),
    vendor_type: Optional[str] = Query(None, alias="vendorType"),
    radius: Optional[str] = Query(None),
    sort_by: str = Query("nearest", alias="sortBy"),
    current_user: AuthContext = Depends(get_current_customer),
    db=Depends(get_db),
):
    """
    Search vendors and their in-stock listings around a point.
    - Radius is restricted to the allow-list; anything else means 1 km.
    - Vendors honour vendorType and searchTerm; products are drawn from every
      nearby vendor and filtered by category, sub-category and searchTerm.
    """
    radius_km = resolve_radius(radius)
    origin = resolve_origin(db, current_user, lat, lng)

    vendors = find_vendors_within_radius(db, origin, radius_km, vendor_type, search_term)
    vendors = sort_vendors([with_distance(origin, v) for v in vendors], sort_by)

    all_nearby = find_vendors_within_radius(db, origin, radius_km)
    if not all_nearby:
        return {"message": "No vendors found nearby", "vendors": vendors, "products": []}

    listings = find_listings_for_vendors(db, [v["id"] for v in all_nearby])
    products = {
        pid: p
        for pid, p in get_products(db, (l.get("product_id") for l in listings)).items()
        if _product_matches(p, category_id, sub_category_id)
        and matches_text(search_term, p.get("title"), p.get("description"))
    }
    items = _priced_listings(origin, all_nearby, listings, products)

    ratings = average_ratings(db, [item["id"] for item in items])
    for item in items:
        item["averageRating"] = ratings.get(item["id"], 0)

    items = sort_products(items, sort_by)
    logger.info("search-nearby r=%skm -> %d vendors, %d products", radius_km, len(vendors), len(items))

    return {
        "message": f"Found {len(vendors)} vendors and {len(items)} products matching your search",
        "vendors": vendors,
        "products": items,
    }


# ==============================
# Price comparison
# ==============================
@router.get("/price-comparison")
async def price_comparison(
    name: Optional[str] = Query(None),
    exclude_id: Optional[str] = Query(None, alias="excludeId"),
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    radius: Optional[str] = Query(None),
    current_user: AuthContext = Depends(get_current_customer),
    db=Depends(get_db),
):
    """Same product (exact title) at every nearby vendor, with discounted prices."""
    if not name:
        raise ValidationError("Product name is required", [{"field": "name", "message": "Field required"}])

    origin = resolve_origin(db, current_user, lat, lng)
    vendors = find_vendors_within_radius(db, origin, parse_radius(radius))
    if not vendors:
        return {"message": "No nearby vendors found", "products": []}

    listings = find_listings_for_vendors(db, [v["id"] for v in vendors], exclude_id=exclude_id)
    products = {
        pid: p
        for pid, p in get_products(db, (l.get("product_id") for l in listings)).items()
        if p.get("title") == name
    }
    return _priced_listings(origin, vendors, listings, products)
