# barberbook/maps.py
"""
Thin clients for Google Maps (Distance Matrix, Geocoding) and ViaCEP.

Each call opens a short-lived httpx.Client with the configured timeout.
"""

import logging
import re
from typing import List, Optional

import httpx

from barberbook.config import settings
from barberbook.exceptions import MapsError, NotConfiguredError

logger = logging.getLogger(__name__)

DISTANCE_MATRIX_URL = "https://maps.googleapis.com/maps/api/distancematrix/json"
GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
VIACEP_URL = "https://viacep.com.br/ws/{cep}/json/"

NOT_AVAILABLE = {"distance": "N/A", "duration": "N/A"}


def _latlng(point: dict) -> str:
    return f"{point['lat']},{point['lng']}"


def _get_json(url: str, params: Optional[dict] = None) -> dict:
    try:
        with httpx.Client(timeout=settings.HTTP_TIMEOUT_SECONDS) as client:
            resp = client.get(url, params=params)
    except httpx.HTTPError as e:
        logger.error(f"Request to {url} failed: {e}")
        raise MapsError("Upstream request failed")

    if resp.status_code >= 400:
        logger.warning(f"{url} returned HTTP {resp.status_code}: {resp.text[:200]}")
        raise MapsError(f"Upstream returned HTTP {resp.status_code}")

    try:
        return resp.json()
    except ValueError:
        logger.warning(f"{url} returned a non-JSON body: {resp.text[:200]}")
        raise MapsError("Upstream returned an invalid response")


def distance_matrix(origin: dict, destinations: List[dict]) -> List[dict]:
    """
    Travel distance/duration from one origin to each destination.

    Points are {"lat": ..., "lng": ...}. Elements the API could not route
    come back as N/A, in the same order as the destinations.
    """
    if not settings.GOOGLE_MAPS_API_KEY:
        raise NotConfiguredError("Google Maps API key")
    if not destinations:
        return []

    data = _get_json(
        DISTANCE_MATRIX_URL,
        params={
            "origins": _latlng(origin),
            "destinations": "|".join(_latlng(d) for d in destinations),
            "key": settings.GOOGLE_MAPS_API_KEY,
            "units": "metric",
            "language": "pt-BR",
        },
    )

    if data.get("status") != "OK":
        logger.error(f"Distance Matrix API error: {data.get('error_message') or data.get('status')}")
        raise MapsError("Failed to retrieve distance matrix data")

    results = []
    for element in data["rows"][0]["elements"]:
        if element.get("status") == "OK":
            results.append({
                "distance": element["distance"]["text"],
                "duration": element["duration"]["text"],
            })
        else:
            results.append(dict(NOT_AVAILABLE))
    return results


def geocode_address(address: str) -> Optional[dict]:
    """Coordinates for a free-form address, or None when not found or not configured."""
    if not address or not settings.GOOGLE_MAPS_API_KEY:
        return None

    try:
        data = _get_json(GEOCODE_URL, params={"address": address, "key": settings.GOOGLE_MAPS_API_KEY})
    except MapsError as e:
        logger.warning(f"Geocoding failed for '{address}': {e.message}")
        return None

    if data.get("status") == "OK" and data.get("results"):
        location = data["results"][0]["geometry"]["location"]
        return {"lat": location["lat"], "lng": location["lng"]}

    logger.warning(f"Geocoding API warning: {data.get('status')} {data.get('error_message', '')}")
    return None


def normalize_cep(cep: str) -> Optional[str]:
    digits = re.sub(r"\D", "", cep or "")
    return digits if len(digits) == 8 else None


def lookup_cep(cep: str) -> Optional[dict]:
    """Street data for a CEP (already normalized), or None when ViaCEP does not know it."""
    data = _get_json(VIACEP_URL.format(cep=cep))
    if data.get("erro"):
        return None
    return {
        "cep": cep,
        "street": data.get("logradouro", ""),
        "neighborhood": data.get("bairro", ""),
        "city": data.get("localidade", ""),
        "state": data.get("uf", ""),
    }


def locate(address: Optional[dict], coordinates: Optional[dict]) -> Optional[dict]:
    """Explicit coordinates win; otherwise geocode the address when possible."""
    if coordinates is not None:
        return coordinates
    if not address:
        return None
    return geocode_address(address.get("full_address", ""))
