# Reviews/reviews.py
import logging
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from MARKET.Catalog.models import ReviewInput, ReviewUpdate
from MARKET.Catalog.repository import review_summary
from MARKET.core.config import VENDOR_PRODUCT_REVIEWS, VENDOR_PRODUCTS
from MARKET.core.errors import AuthorizationError, NotFoundError, ValidationError
from MARKET.core.firebase import get_db
from MARKET.core.security import AuthContext, get_current_customer

logger = logging.getLogger("reviews.reviews")

router = APIRouter(prefix="/reviews", tags=["reviews"])

EDITABLE_FIELDS = ("rating", "review", "product_quality", "delivery_experience", "value_for_money")


# ==============================
# Helpers
# ==============================
def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _one_decimal(value: float) -> float:
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def _paginate(rows: list, page: int, limit: int) -> tuple:
    start = (page - 1) * limit
    chunk = rows[start:start + limit]
    pagination = {
        "currentPage": page,
        "totalPages": (len(rows) + limit - 1) // limit,
        "totalReviews": len(rows),
        "hasNextPage": start + len(chunk) < len(rows),
        "hasPrevPage": page > 1,
    }
    return chunk, pagination


def _rating_stats(reviews: list) -> dict:
    ratings = [r["rating"] for r in reviews if isinstance(r.get("rating"), int)]
    return {
        "averageRating": _one_decimal(sum(ratings) / len(ratings)) if ratings else 0,
        "totalReviews": len(reviews),
        "ratingDistribution": {str(star): ratings.count(star) for star in range(1, 6)},
    }


def _owned_review(db, review_id: str, customer_id: str):
    ref = db.collection(VENDOR_PRODUCT_REVIEWS).document(review_id)
    snap = ref.get()
    if not snap.exists:
        raise NotFoundError("Review not found")
    data = snap.to_dict() or {}
    if data.get("customer_id") != customer_id:
        raise AuthorizationError("You can only change your own reviews")
    return ref, data


# ==============================
# PUBLIC: REVIEWS FOR A LISTING
# ==============================
@router.get("/product/{vendor_product_id}")
async def get_product_reviews(
    vendor_product_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    rating: Optional[int] = Query(None, ge=1, le=5),
    sort_order: Literal["asc", "desc"] = Query("desc", alias="sortOrder"),
    db=Depends(get_db),
):
    """
    Reviews of one vendor listing, newest first by default.
    Reported reviews are hidden; ``stats`` always covers every visible review
    regardless of the ``rating`` filter.
    """
    if not db.collection(VENDOR_PRODUCTS).document(vendor_product_id).get().exists:
        raise NotFoundError("Vendor product not found")

    docs = db.collection(VENDOR_PRODUCT_REVIEWS).where("vendor_product_id", "==", vendor_product_id).stream()
    rows = [{**(doc.to_dict() or {}), "id": doc.id} for doc in docs]
    visible = [r for r in rows if not r.get("is_reported")]
    visible.sort(key=lambda r: r.get("created_at") or "", reverse=sort_order == "desc")

    filtered = [r for r in visible if rating is None or r.get("rating") == rating]
    chunk, pagination = _paginate(filtered, page, limit)
    return {
        "reviews": [review_summary(r["id"], r) for r in chunk],
        "pagination": pagination,
        "stats": _rating_stats(visible),
    }


# ==============================
# CUSTOMER: SUBMIT / LIST OWN
# ==============================
@router.post("")
async def submit_review(
    payload: ReviewInput,
    current_user: AuthContext = Depends(get_current_customer),
    db=Depends(get_db),
):
    """One review per customer, listing and order; reviews without an order count as one slot."""
    customer_id = current_user.subject_id

    if not db.collection(VENDOR_PRODUCTS).document(payload.vendor_product_id).get().exists:
        raise NotFoundError("Vendor product not found")

    existing = (
        db.collection(VENDOR_PRODUCT_REVIEWS)
        .where("customer_id", "==", customer_id)
        .where("vendor_product_id", "==", payload.vendor_product_id)
        .stream()
    )
    if any((doc.to_dict() or {}).get("order_id") == payload.order_id for doc in existing):
        raise ValidationError("You have already reviewed this product")

    review = {
        "customer_id": customer_id,
        "vendor_product_id": payload.vendor_product_id,
        "order_id": payload.order_id,
        "rating": payload.rating,
        "review": payload.review,
        "product_quality": payload.product_quality,
        "delivery_experience": payload.delivery_experience,
        "value_for_money": payload.value_for_money,
        "is_verified": False,
        "is_reported": False,
        "created_at": _now(),
        "updated_at": _now(),
    }
    ref = db.collection(VENDOR_PRODUCT_REVIEWS).document()
    ref.set(review)
    logger.info("Customer %s reviewed listing %s", customer_id, payload.vendor_product_id)
    return JSONResponse(
        status_code=201,
        content={"message": "Review submitted successfully", "review": review_summary(ref.id, review)},
    )


@router.get("/my-reviews")
async def get_my_reviews(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    current_user: AuthContext = Depends(get_current_customer),
    db=Depends(get_db),
):
    docs = db.collection(VENDOR_PRODUCT_REVIEWS).where("customer_id", "==", current_user.subject_id).stream()
    reviews = [{**(doc.to_dict() or {}), "id": doc.id} for doc in docs]
    reviews.sort(key=lambda r: r.get("created_at") or "", reverse=True)
    chunk, pagination = _paginate(reviews, page, limit)
    return {"reviews": [review_summary(r["id"], r) for r in chunk], "pagination": pagination}


# ==============================
# CUSTOMER: UPDATE / DELETE
# ==============================
@router.put("/{review_id}")
async def update_review(
    review_id: str,
    payload: ReviewUpdate,
    current_user: AuthContext = Depends(get_current_customer),
    db=Depends(get_db),
):
    ref, current = _owned_review(db, review_id, current_user.subject_id)
    changes = {
        field: getattr(payload, field)
        for field in EDITABLE_FIELDS
        if field in payload.model_fields_set and getattr(payload, field) is not None
    }
    changes["updated_at"] = _now()
    ref.update(changes)
    return {"message": "Review updated successfully", "review": review_summary(review_id, {**current, **changes})}


@router.delete("/{review_id}")
async def delete_review(
    review_id: str,
    current_user: AuthContext = Depends(get_current_customer),
    db=Depends(get_db),
):
    ref, _ = _owned_review(db, review_id, current_user.subject_id)
    ref.delete()
    logger.info("Customer %s deleted review %s", current_user.subject_id, review_id)
    return {"message": "Review deleted successfully"}
