# file: MARKET/main.py
import logging

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi.middleware import SlowAPIMiddleware

from MARKET.Customers.profile import router as customer_profile_router
from MARKET.Notification.notification import router as notification_router
from MARKET.RationPack.ration_pack import router as ration_pack_router
from MARKET.Reviews.reviews import router as reviews_router
from MARKET.Search.nearby import router as search_router
from MARKET.Vendors.vendor_products import router as vendor_products_router
from MARKET.Vendors.vendors import router as vendors_router
from MARKET.core.errors import register_exception_handlers
from MARKET.core.firebase import get_db
from MARKET.core.logger import setup_logging
from MARKET.core.middleware import RequestLogMiddleware
from MARKET.core.rate_limit import limiter

# Logging setup
setup_logging()
logger = logging.getLogger("main")

# App initialization
app = FastAPI(title="Marketplace API")

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # tighten in prod if needed
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Rate limiter
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)

# Access log
app.add_middleware(RequestLogMiddleware)

register_exception_handlers(app)

# Routers
app.include_router(search_router)
app.include_router(ration_pack_router)
app.include_router(customer_profile_router)
app.include_router(vendor_products_router)
app.include_router(vendors_router)
app.include_router(reviews_router)
app.include_router(notification_router)


# Ping endpoint
@app.get("/ping")
@limiter.limit("5/minute")
async def ping(request: Request):
    return {"message": "pong"}


# ------------------------------
# Health endpoint for Firestore
# ------------------------------
@app.get("/health")
async def health(db=Depends(get_db)):
    project = getattr(db, "project", None)
    return {"ok": True, "firestore_project": project}


logger.info("Marketplace API ready")
