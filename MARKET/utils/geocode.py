# utils/geocode.py
import logging
from typing import Optional

import httpx

from MARKET.core import config
from MARKET.core.errors import UpstreamError

logger = logging.getLogger("utils.geocode")


def _api_key() -> str:
    if not config.GOOGLE_MAPS_API_KEY:
        raise UpstreamError("Geocoding is not configured (GOOGLE_MAPS_API_KEY missing)")
    return config.GOOGLE_MAPS_API_KEY


async def _fetch(params: dict, client: Optional[httpx.AsyncClient] = None) -> dict:
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=config.GEOCODE_TIMEOUT_SECONDS) as own_client:
                response = await own_client.get(config.GEOCODE_URL, params=params)
        else:
            response = await client.get(config.GEOCODE_URL, params=params)
        response.raise_for_status()
        data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("Geocoding request failed: %s", e)
        raise UpstreamError(f"Geocoding request failed: {e}")

    if data.get("status") != "OK" or not data.get("results"):
        raise UpstreamError(data.get("error_message") or data.get("status") or "Geocoding failed")
    return data


def _parse_components(result: dict) -> dict:
    parts = {"street": "", "city": "", "state": "", "zipcode": "", "country": ""}
    for comp in result.get("address_components", []):
        name = comp.get("long_name", "")
        types = comp.get("types", [])
        if "street_number" in types:
            parts["street"] = name + (" " + parts["street"] if parts["street"] else "")
        if "route" in types:
            parts["street"] = (parts["street"] + " " if parts["street"] else "") + name
        if "locality" in types:
            parts["city"] = name
        if "administrative_area_level_1" in types:
            parts["state"] = name
        if "postal_code" in types:
            parts["zipcode"] = name
        if "country" in types:
            parts["country"] = name
    return parts


async def geocode_address(address: str, client: Optional[httpx.AsyncClient] = None) -> dict:
    """
    Forward-geocode an address into a stored location:
    coordinates ``[lng, lat]``, formatted address and parsed components.
    """
    data = await _fetch(
        {"address": address, "key": _api_key(), "components": config.GEOCODE_COMPONENTS},
        client,
    )
    result = data["results"][0]
    loc = result["geometry"]["location"]
    return {
        "type": "Point",
        "coordinates": [loc["lng"], loc["lat"]],
        "formatted_address": result.get("formatted_address"),
        **_parse_components(result),
    }


async def reverse_geocode(lat: float, lng: float, client: Optional[httpx.AsyncClient] = None) -> str:
    data = await _fetch({"latlng": f"{lat},{lng}", "key": _api_key()}, client)
    return data["results"][0].get("formatted_address")
