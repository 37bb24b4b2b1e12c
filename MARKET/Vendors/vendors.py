# Vendors/vendors.py
from typing import Optional

from fastapi import APIRouter, Depends, Query

from MARKET.Catalog.repository import account_profile, find_vendors_within_radius, get_vendor, list_vendors
from MARKET.Search.nearby import with_distance
from MARKET.core.config import DEFAULT_RADIUS_KM, VENDORS
from MARKET.core.errors import NotFoundError, ValidationError
from MARKET.core.firebase import get_db
from MARKET.core.security import AuthContext, get_current_vendor
from MARKET.utils.geo import Point

router = APIRouter(prefix="/vendors", tags=["vendors"])


@router.get("")
async def get_all_vendors(db=Depends(get_db)):
    return list_vendors(db)


@router.get("/nearby")
async def get_nearby_vendors(
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    db=Depends(get_db),
):
    """Public lookup: active vendors within 1 km of the given point."""
    if lat is None or lng is None:
        raise ValidationError("lng and lat query params required")
    origin = Point(lng=lng, lat=lat)
    return [with_distance(origin, v) for v in find_vendors_within_radius(db, origin, DEFAULT_RADIUS_KM)]


@router.get("/profile")
async def get_vendor_profile(
    current_user: AuthContext = Depends(get_current_vendor),
    db=Depends(get_db),
):
    snap = db.collection(VENDORS).document(current_user.subject_id).get()
    if not snap.exists:
        raise NotFoundError("Vendor not found")
    data = snap.to_dict() or {}
    return {
        **account_profile(snap.id, data),
        "description": data.get("description"),
        "vendorType": data.get("vendor_type"),
    }


@router.get("/{vendor_id}")
async def get_vendor_by_id(
    vendor_id: str,
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    db=Depends(get_db),
):
    vendor = get_vendor(db, vendor_id)
    if vendor is None:
        raise NotFoundError("Vendor not found")
    if lat is not None and lng is not None and vendor.get("location"):
        return with_distance(Point(lng=lng, lat=lat), vendor)
    return vendor
