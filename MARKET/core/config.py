# file: MARKET/core/config.py
import os
import logging

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger("core.config")

# ==============================
# Firestore collections
# ==============================
VENDORS = "VENDORS"
CUSTOMERS = "CUSTOMERS"
PRODUCTS = "PRODUCTS"
VENDOR_PRODUCTS = "VENDOR_PRODUCTS"
VENDOR_PRODUCT_REVIEWS = "VENDOR_PRODUCT_REVIEWS"

# ==============================
# Geospatial
# ==============================
# Mean earth radius; used for both the containment test and reported distances.
EARTH_RADIUS_KM = 6371.0

RADIUS_OPTIONS_KM = (1, 3, 5, 10, 15, 20, 25, 50)
DEFAULT_RADIUS_KM = 1
UNKNOWN_DISTANCE_KM = 9999

# Firestore rejects `in` filters with more than 30 values.
FIRESTORE_IN_LIMIT = 30

# ==============================
# Pricing
# ==============================
FALLBACK_BASE_PRICE = os.getenv("FALLBACK_BASE_PRICE", "0")

# ==============================
# Security Settings
# ==============================
SECRET_KEY = os.getenv("SECRET_KEY")  # falls back to Firestore CONFIG/jwt
ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "43200"))

# ==============================
# Firebase
# ==============================
FIREBASE_PROJECT_ID = os.getenv("FIREBASE_PROJECT_ID", "market-geo-catalog")
CREDENTIAL_SOURCE = os.getenv("GOOGLE_APPLICATION_CREDENTIALS")

# ==============================
# Geocoding (Google Maps)
# ==============================
GOOGLE_MAPS_API_KEY = os.getenv("GOOGLE_MAPS_API_KEY")
GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
GEOCODE_COMPONENTS = os.getenv("GEOCODE_COMPONENTS", "country:PK")
GEOCODE_TIMEOUT_SECONDS = float(os.getenv("GEOCODE_TIMEOUT_SECONDS", "10"))

# ==============================
# Rate limiting / logging
# ==============================
RATE_LIMIT_DEFAULT = os.getenv("RATE_LIMIT_DEFAULT", "1000/hour")
RATION_PACK_RATE_LIMIT = os.getenv("RATION_PACK_RATE_LIMIT", "60/minute")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
ENABLE_CLOUD_LOGGING = os.getenv("ENABLE_CLOUD_LOGGING", "false").lower() == "true"
