# tests/conftest.py

"""Shared pytest setup for the marketplace API tests."""

import os

# Must be set before MARKET.core.config is imported.
os.environ.setdefault("SECRET_KEY", "test-secret-key-with-at-least-32-characters")
os.environ.setdefault("GOOGLE_MAPS_API_KEY", "test-maps-key")
os.environ.setdefault("FALLBACK_BASE_PRICE", "0")
os.environ.setdefault("ENABLE_CLOUD_LOGGING", "false")
