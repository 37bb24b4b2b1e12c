# RationPack/ration_pack.py
import logging
from collections import defaultdict

from fastapi import APIRouter, Depends, Request

from MARKET.Catalog.models import RationPackRequest
from MARKET.Catalog.repository import find_listings_for_vendors, find_vendors_within_radius, get_products
from MARKET.RationPack.assembly import build_ration_packs
from MARKET.Search.nearby import resolve_origin
from MARKET.core.config import RATION_PACK_RATE_LIMIT
from MARKET.core.errors import ValidationError
from MARKET.core.firebase import get_db
from MARKET.core.rate_limit import limiter
from MARKET.core.security import AuthContext, get_current_customer
from MARKET.utils.geo import parse_radius

logger = logging.getLogger("rationpack.routes")

router = APIRouter(prefix="/customers", tags=["ration-packs"])


@router.post("/ration-packs")
@limiter.limit(RATION_PACK_RATE_LIMIT)
async def create_ration_pack(
    request: Request,
    payload: RationPackRequest,
    current_user: AuthContext = Depends(get_current_customer),
    db=Depends(get_db),
):
    """
    Compare a list of products across nearby vendors.
    Vendors that stock at least one requested product get a bundle;
    missing products show up as unavailable items.
    """
    product_names = [name.strip() for name in payload.products if name and name.strip()]
    if not product_names:
        raise ValidationError(
            "Please select at least one product for your ration pack",
            [{"field": "products", "message": "At least one product name is required"}],
        )

    origin = resolve_origin(db, current_user, payload.lat, payload.lng)
    vendors = find_vendors_within_radius(db, origin, parse_radius(payload.radius))
    if not vendors:
        return {"message": "No vendors found nearby", "rationPacks": []}

    listings_by_vendor = defaultdict(list)
    listings = find_listings_for_vendors(db, [v["id"] for v in vendors])
    for listing in listings:
        listings_by_vendor[listing.get("vendor_id")].append(listing)
    products = get_products(db, (l.get("product_id") for l in listings))

    packs = build_ration_packs(product_names, origin, vendors, listings_by_vendor, products, payload.sort_by)
    logger.info(
        "ration-pack for %s: %d products across %d vendors -> %d packs",
        current_user.subject_id, len(product_names), len(vendors), len(packs),
    )

    return {
        "message": f"Found {len(packs)} vendors with some or all of your ration pack items",
        "rationPacks": packs,
    }
