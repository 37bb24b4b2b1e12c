# Customers/profile.py
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from MARKET.Catalog.models import LocationUpdate, PushTokenInput
from MARKET.Catalog.repository import account_profile, location_out
from MARKET.core.config import CUSTOMERS
from MARKET.core.errors import NotFoundError, UpstreamError, ValidationError
from MARKET.core.firebase import get_db
from MARKET.core.security import AuthContext, get_current_customer
from MARKET.utils.geocode import geocode_address, reverse_geocode

logger = logging.getLogger("customers.profile")

router = APIRouter(prefix="/customers", tags=["customers"])


@router.get("/profile")
async def get_customer_profile(
    current_user: AuthContext = Depends(get_current_customer),
    db=Depends(get_db),
):
    snap = db.collection(CUSTOMERS).document(current_user.subject_id).get()
    if not snap.exists:
        raise NotFoundError("Customer not found")
    data = snap.to_dict() or {}
    return {**account_profile(snap.id, data), "hasPushToken": bool(data.get("push_token"))}


@router.post("/update-location")
async def update_location(
    payload: LocationUpdate,
    current_user: AuthContext = Depends(get_current_customer),
    db=Depends(get_db),
):
    """
    Store the customer's location used as the default search origin.
    An address is forward-geocoded; a bare lat/lng pair is reverse-geocoded
    for its formatted address.
    """
    try:
        if payload.address:
            location = await geocode_address(payload.address)
        elif payload.lat is not None and payload.lng is not None:
            formatted = await reverse_geocode(payload.lat, payload.lng)
            location = {
                "type": "Point",
                "coordinates": [payload.lng, payload.lat],
                "formatted_address": formatted,
            }
        else:
            raise ValidationError(
                "Please provide either an address or lat and lng",
                [{"field": "address", "message": "address or lat/lng required"}],
            )
    except UpstreamError as e:
        logger.warning("Location update for %s failed: %s", current_user.subject_id, e.message)
        raise ValidationError(e.message)

    db.collection(CUSTOMERS).document(current_user.subject_id).set(
        {"location": location, "updated_at": datetime.now(timezone.utc).isoformat()},
        merge=True,
    )
    logger.info("Location updated for customer %s", current_user.subject_id)
    return {"message": "Location updated successfully", "location": location_out(location)}


@router.post("/push-token")
async def register_push_token(
    payload: PushTokenInput,
    current_user: AuthContext = Depends(get_current_customer),
    db=Depends(get_db),
):
    db.collection(CUSTOMERS).document(current_user.subject_id).set(
        {"push_token": payload.token, "updated_at": datetime.now(timezone.utc).isoformat()},
        merge=True,
    )
    logger.info("Push token saved for customer %s", current_user.subject_id)
    return {"message": "Push token saved"}
