# tests/test_geocode.py

"""Tests for the Google geocoding client."""

import unittest
from unittest.mock import patch

import httpx

from MARKET.core import config
from MARKET.core.errors import UpstreamError
from MARKET.utils.geocode import geocode_address, reverse_geocode

RESULT = {
    "formatted_address": "12 Mall Rd, Lahore, Pakistan",
    "geometry": {"location": {"lat": 31.5497, "lng": 74.3436}},
    "address_components": [
        {"long_name": "12", "types": ["street_number"]},
        {"long_name": "Mall Rd", "types": ["route"]},
        {"long_name": "Lahore", "types": ["locality", "political"]},
        {"long_name": "Punjab", "types": ["administrative_area_level_1", "political"]},
        {"long_name": "54000", "types": ["postal_code"]},
        {"long_name": "Pakistan", "types": ["country", "political"]},
    ],
}


def _client(handler) -> httpx.AsyncClient:
    """Build an AsyncClient whose requests go to handler."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestGeocode(unittest.IsolatedAsyncioTestCase):
    """Verify request parameters and response parsing."""

    def setUp(self) -> None:
        patcher = patch.object(config, "GOOGLE_MAPS_API_KEY", "maps-key")
        patcher.start()
        self.addCleanup(patcher.stop)

    async def test_geocode_address(self) -> None:
        """Verify an address becomes a [lng, lat] location with components."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(request.url.params)
            return httpx.Response(200, json={"status": "OK", "results": [RESULT]})

        async with _client(handler) as client:
            location = await geocode_address("12 Mall Road", client)

        self.assertEqual(seen["address"], "12 Mall Road")
        self.assertEqual(seen["key"], "maps-key")
        self.assertEqual(seen["components"], config.GEOCODE_COMPONENTS)
        self.assertEqual(location["coordinates"], [74.3436, 31.5497])
        self.assertEqual(location["street"], "12 Mall Rd")
        self.assertEqual(location["city"], "Lahore")
        self.assertEqual(location["zipcode"], "54000")
        self.assertEqual(location["formatted_address"], "12 Mall Rd, Lahore, Pakistan")

    async def test_reverse_geocode(self) -> None:
        """Verify lat,lng is sent and the formatted address returned."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(request.url.params)
            return httpx.Response(200, json={"status": "OK", "results": [RESULT]})

        async with _client(handler) as client:
            address = await reverse_geocode(31.5497, 74.3436, client)

        self.assertEqual(seen["latlng"], "31.5497,74.3436")
        self.assertEqual(address, "12 Mall Rd, Lahore, Pakistan")

    async def test_provider_status_error(self) -> None:
        """Verify a non-OK status raises with the provider message."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"status": "ZERO_RESULTS", "results": []})

        async with _client(handler) as client:
            with self.assertRaises(UpstreamError) as ctx:
                await geocode_address("nowhere", client)
        self.assertEqual(ctx.exception.message, "ZERO_RESULTS")

    async def test_http_error(self) -> None:
        """Verify HTTP failures raise UpstreamError."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        async with _client(handler) as client:
            with self.assertRaises(UpstreamError):
                await geocode_address("Lahore", client)

    async def test_transport_error(self) -> None:
        """Verify connection failures raise UpstreamError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler) as client:
            with self.assertRaises(UpstreamError):
                await reverse_geocode(31.5, 74.3, client)

    async def test_missing_key(self) -> None:
        """Verify an unconfigured key is reported before any request."""
        with patch.object(config, "GOOGLE_MAPS_API_KEY", None):
            with self.assertRaises(UpstreamError):
                await geocode_address("Lahore")
