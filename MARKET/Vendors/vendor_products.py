# Vendors/vendor_products.py
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from MARKET.Catalog.models import ListingUpdate, ListingUpsert
from MARKET.Catalog.repository import get_products, listing_summary
from MARKET.core.config import PRODUCTS, VENDOR_PRODUCTS
from MARKET.core.errors import AuthorizationError, NotFoundError, ValidationError
from MARKET.core.firebase import get_db
from MARKET.core.security import AuthContext, get_current_vendor
from MARKET.utils.pricing import validate_discount_fields

logger = logging.getLogger("vendors.vendor_products")

router = APIRouter(prefix="/vendor-products", tags=["vendor-products"])


# ==============================
# Helpers
# ==============================
def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _populated(db, listing: dict) -> dict:
    products = get_products(db, [listing.get("product_id")])
    return listing_summary(listing, {"id": listing.get("vendor_id")}, products.get(listing.get("product_id")))


def _apply_changes(current: dict, payload) -> dict:
    """Merge the set fields of a payload over a stored listing and re-check the discount."""
    changes = {}
    if "discount_type" in payload.model_fields_set:
        changes["discount_type"] = payload.discount_type
    if "discount_value" in payload.model_fields_set:
        changes["discount_value"] = payload.discount_value or 0
    if "in_stock" in payload.model_fields_set and payload.in_stock is not None:
        changes["in_stock"] = payload.in_stock

    merged = {**current, **changes}
    try:
        validate_discount_fields(merged.get("discount_type"), merged.get("discount_value"))
    except ValueError as e:
        raise ValidationError(str(e), [{"field": "discountValue", "message": str(e)}])
    return changes


def _owned_listing(db, listing_id: str, vendor_id: str, hide_foreign: bool = True):
    ref = db.collection(VENDOR_PRODUCTS).document(listing_id)
    snap = ref.get()
    if not snap.exists:
        raise NotFoundError("Vendor product not found")
    data = snap.to_dict() or {}
    if data.get("vendor_id") != vendor_id:
        if hide_foreign:
            raise NotFoundError("Vendor product not found")
        raise AuthorizationError("Not allowed")
    return ref, {**data, "id": snap.id}


# ==============================
# VENDOR: UPSERT LISTING
# ==============================
@router.post("")
async def upsert_vendor_product(
    payload: ListingUpsert,
    current_user: AuthContext = Depends(get_current_vendor),
    db=Depends(get_db),
):
    """Create the vendor's listing for a catalog product, or update it if it exists."""
    vendor_id = current_user.subject_id

    if not db.collection(PRODUCTS).document(payload.product).get().exists:
        raise NotFoundError("Product not found")

    existing = list(
        db.collection(VENDOR_PRODUCTS)
        .where("vendor_id", "==", vendor_id)
        .where("product_id", "==", payload.product)
        .stream()
    )

    if existing:
        snap = existing[0]
        current = {**(snap.to_dict() or {}), "id": snap.id}
        changes = _apply_changes(current, payload)
        changes["updated_at"] = _now()
        db.collection(VENDOR_PRODUCTS).document(snap.id).update(changes)
        logger.info("Vendor %s updated listing %s", vendor_id, snap.id)
        return _populated(db, {**current, **changes})

    listing = {
        "vendor_id": vendor_id,
        "product_id": payload.product,
        "discount_type": None,
        "discount_value": 0,
        "in_stock": True,
        "created_at": _now(),
        "updated_at": _now(),
    }
    listing.update(_apply_changes(listing, payload))
    ref = db.collection(VENDOR_PRODUCTS).document()
    ref.set(listing)
    logger.info("Vendor %s created listing %s", vendor_id, ref.id)
    return JSONResponse(status_code=201, content=_populated(db, {**listing, "id": ref.id}))


# ==============================
# VENDOR: LIST / GET
# ==============================
@router.get("")
async def list_vendor_products(
    current_user: AuthContext = Depends(get_current_vendor),
    db=Depends(get_db),
):
    docs = db.collection(VENDOR_PRODUCTS).where("vendor_id", "==", current_user.subject_id).stream()
    listings = [{**(doc.to_dict() or {}), "id": doc.id} for doc in docs]
    products = get_products(db, (l.get("product_id") for l in listings))
    return [
        listing_summary(l, {"id": l.get("vendor_id")}, products.get(l.get("product_id")))
        for l in listings
    ]


@router.get("/{listing_id}")
async def get_vendor_product(
    listing_id: str,
    current_user: AuthContext = Depends(get_current_vendor),
    db=Depends(get_db),
):
    _, listing = _owned_listing(db, listing_id, current_user.subject_id, hide_foreign=False)
    return _populated(db, listing)


# ==============================
# VENDOR: UPDATE / DELETE
# ==============================
@router.put("/{listing_id}")
async def update_vendor_product(
    listing_id: str,
    payload: ListingUpdate,
    current_user: AuthContext = Depends(get_current_vendor),
    db=Depends(get_db),
):
    ref, listing = _owned_listing(db, listing_id, current_user.subject_id)
    changes = _apply_changes(listing, payload)
    changes["updated_at"] = _now()
    ref.update(changes)
    return _populated(db, {**listing, **changes})


@router.delete("/{listing_id}")
async def delete_vendor_product(
    listing_id: str,
    current_user: AuthContext = Depends(get_current_vendor),
    db=Depends(get_db),
):
    ref, _ = _owned_listing(db, listing_id, current_user.subject_id)
    ref.delete()
    logger.info("Vendor %s removed listing %s", current_user.subject_id, listing_id)
    return {"message": "Vendor product removed"}
