from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx
from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from .config import API_PREFIX, HTTP_TIMEOUT
from .errors import GeocodingError

logger = logging.getLogger(__name__)

router = APIRouter()

REVERSE_URL = "https://nominatim.openstreetmap.org/reverse"
UA = "wandersnap/1.0 (+https://github.com/wandersnap)"
NOM_HEADERS = {"User-Agent": UA, "Accept-Language": "en"}
UNKNOWN_LOCATION = "Unknown Location"
ADDRESS_KEYS = ("city", "town", "village", "county")


def extract_place_name(data: Dict[str, Any]) -> str:
    address = data.get("address") if isinstance(data, dict) else None
    if isinstance(address, dict):
        for key in ADDRESS_KEYS:
            value = address.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    display_name = data.get("display_name") if isinstance(data, dict) else None
    if isinstance(display_name, str):
        first = display_name.split(",")[0].strip()
        if first:
            return first
    return UNKNOWN_LOCATION


async def reverse_geocode(
    lat: float,
    lng: float,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> str:
    params = {"format": "jsonv2", "lat": lat, "lon": lng, "accept-language": "en"}
    try:
        async with httpx.AsyncClient(timeout=HTTP_TIMEOUT, headers=NOM_HEADERS, transport=transport) as c:
            r = await c.get(REVERSE_URL, params=params)
    except httpx.RequestError as exc:
        raise GeocodingError(f"Reverse geocoding request failed: {exc}") from exc
    if not r.is_success:
        raise GeocodingError(f"Nominatim HTTP error! status: {r.status_code}", status=r.status_code)
    try:
        data = r.json()
    except ValueError as exc:
        raise GeocodingError("Nominatim returned invalid JSON") from exc
    return extract_place_name(data)


@router.get(f"{API_PREFIX}/reverse-geocode")
async def reverse_geocode_endpoint(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
):
    try:
        name = await reverse_geocode(lat, lng)
    except GeocodingError as exc:
        logger.error("Reverse geocoding failed: %s", exc, exc_info=True)
        return JSONResponse({"error": str(exc)}, status_code=502)
    return JSONResponse({"lat": lat, "lng": lng, "name": name})
