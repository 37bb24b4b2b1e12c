# tests/test_customers_profile.py

"""API tests for customer location and push-token updates."""

import unittest
from unittest.mock import AsyncMock, patch

from fakes import ApiTestMixin, auth_header

from MARKET.core.errors import UpstreamError

GEOCODED = {
    "type": "Point",
    "coordinates": [74.3436, 31.5497],
    "formatted_address": "Mall Rd, Lahore, Pakistan",
    "street": "Mall Rd",
    "city": "Lahore",
    "state": "Punjab",
    "zipcode": "54000",
    "country": "Pakistan",
}


class TestUpdateLocation(ApiTestMixin, unittest.TestCase):
    """Verify POST /customers/update-location."""

    def setUp(self) -> None:
        super().setUp()
        self.headers = auth_header("c2", "customer")

    def test_address_is_geocoded(self) -> None:
        """Verify an address is geocoded and stored."""
        with patch("MARKET.Customers.profile.geocode_address", AsyncMock(return_value=GEOCODED)) as geocode:
            response = self.client.post(
                "/customers/update-location",
                json={"address": "Mall Road, Lahore"},
                headers=self.headers,
            )
        self.assertEqual(response.status_code, 200, response.text)
        geocode.assert_awaited_once_with("Mall Road, Lahore")
        body = response.json()
        self.assertEqual(body["message"], "Location updated successfully")
        self.assertEqual(body["location"]["formattedAddress"], "Mall Rd, Lahore, Pakistan")
        self.assertEqual(self.db.raw("CUSTOMERS", "c2")["location"]["coordinates"], [74.3436, 31.5497])
        self.assertEqual(self.db.raw("CUSTOMERS", "c2")["name"], "Bilal")

    def test_coordinates_are_reverse_geocoded(self) -> None:
        """Verify a lat/lng pair is stored as [lng, lat] with its address."""
        with patch("MARKET.Customers.profile.reverse_geocode", AsyncMock(return_value="Model Town, Lahore")):
            response = self.client.post(
                "/customers/update-location",
                json={"lat": 31.48, "lng": 74.32},
                headers=self.headers,
            )
        self.assertEqual(response.status_code, 200)
        stored = self.db.raw("CUSTOMERS", "c2")["location"]
        self.assertEqual(stored["coordinates"], [74.32, 31.48])
        self.assertEqual(stored["formatted_address"], "Model Town, Lahore")

    def test_geocoder_failure_is_400(self) -> None:
        """Verify provider errors surface as a 400 with the provider message."""
        failing = AsyncMock(side_effect=UpstreamError("ZERO_RESULTS"))
        with patch("MARKET.Customers.profile.geocode_address", failing):
            response = self.client.post(
                "/customers/update-location",
                json={"address": "Atlantis"},
                headers=self.headers,
            )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "ZERO_RESULTS")
        self.assertNotIn("location", self.db.raw("CUSTOMERS", "c2"))

    def test_nothing_given_is_400(self) -> None:
        """Verify an empty body is rejected."""
        response = self.client.post("/customers/update-location", json={}, headers=self.headers)
        self.assertEqual(response.status_code, 400)

    def test_markup_is_stripped_from_address(self) -> None:
        """Verify HTML never reaches the geocoder."""
        with patch("MARKET.Customers.profile.geocode_address", AsyncMock(return_value=GEOCODED)) as geocode:
            self.client.post(
                "/customers/update-location",
                json={"address": "<b>Mall Road</b>"},
                headers=self.headers,
            )
        geocode.assert_awaited_once_with("Mall Road")


class TestPushToken(ApiTestMixin, unittest.TestCase):
    """Verify POST /customers/push-token."""

    def test_token_saved(self) -> None:
        """Verify the token is stored on the customer document."""
        response = self.client.post(
            "/customers/push-token",
            json={"token": "fcm:abc<123>"},
            headers=auth_header("c2", "customer"),
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.db.raw("CUSTOMERS", "c2")["push_token"], "fcm:abc<123>")


class TestCustomerProfile(ApiTestMixin, unittest.TestCase):
    """Verify GET /customers/profile."""

    def test_own_profile(self) -> None:
        """Verify the stored location is returned and the push token is not."""
        response = self.client.get("/customers/profile", headers=auth_header("c1", "customer"))
        self.assertEqual(response.status_code, 200, response.text)
        body = response.json()
        self.assertEqual(body["name"], "Ayesha")
        self.assertEqual(body["location"]["formattedAddress"], "Gulberg III, Lahore")
        self.assertTrue(body["hasPushToken"])
        self.assertNotIn("push_token", body)
        self.assertNotIn("pushToken", body)

    def test_profile_without_location(self) -> None:
        """Verify customers without a saved location get a null location."""
        body = self.client.get("/customers/profile", headers=auth_header("c2", "customer")).json()
        self.assertIsNone(body["location"])
        self.assertFalse(body["hasPushToken"])

    def test_vendor_token_rejected(self) -> None:
        """Verify vendors cannot read customer profiles."""
        response = self.client.get("/customers/profile", headers=auth_header("v1", "vendor"))
        self.assertEqual(response.status_code, 403)
