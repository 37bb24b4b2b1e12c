# Notification/notification.py
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from firebase_admin import exceptions as firebase_exceptions
from firebase_admin import messaging

from MARKET.Catalog.models import PushMessage
from MARKET.core.config import CUSTOMERS
from MARKET.core.errors import NotFoundError
from MARKET.core.firebase import get_db
from MARKET.core.logger import log_to_cloud
from MARKET.core.security import AuthContext, get_current_admin

logger = logging.getLogger("notification")

router = APIRouter(prefix="/notification", tags=["notification"])


# -------------------------
# FCM dispatch
# -------------------------
def send_push_notification(
    db,
    customer_id: str,
    title: str,
    body: str,
    data: Optional[Dict[str, Any]] = None,
) -> dict:
    """
    Send one push message to the customer's registered device.
    Failures come back as ``success: False``; nothing is raised or retried.
    """
    snap = db.collection(CUSTOMERS).document(customer_id).get()
    token = (snap.to_dict() or {}).get("push_token") if snap.exists else None
    if not token:
        logger.info("No push token for customer %s", customer_id)
        return {"success": False, "message": "No push token found for customer"}

    message = messaging.Message(
        notification=messaging.Notification(title=title, body=body),
        token=token,
        # FCM data values must be strings
        data={k: str(v) for k, v in (data or {}).items()},
    )
    try:
        message_id = messaging.send(message)
    except (firebase_exceptions.FirebaseError, ValueError) as e:
        logger.error("Push to customer %s failed: %s", customer_id, e)
        log_to_cloud("push", "ERROR", "Push notification failed", {"customer_id": customer_id, "error": str(e)})
        return {"success": False, "error": str(e)}

    logger.info("Push sent to customer %s: %s", customer_id, message_id)
    return {"success": True, "message_id": message_id}


# -------------------------
# Admin: send to one customer
# -------------------------
@router.post("/customers/{customer_id}/send")
async def send_to_customer(
    customer_id: str,
    payload: PushMessage,
    current_user: AuthContext = Depends(get_current_admin),
    db=Depends(get_db),
):
    if not db.collection(CUSTOMERS).document(customer_id).get().exists:
        raise NotFoundError("Customer not found")
    logger.info("Admin %s pushing to customer %s", current_user.subject_id, customer_id)
    return send_push_notification(db, customer_id, payload.title, payload.body, payload.data)
