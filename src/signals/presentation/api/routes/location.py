"""
Turns a device position into an intersection name.
"""
from fastapi import FastAPI, HTTPException
from typing import Optional

from .....common.schemas import ResolveLocationRequest
from ....domain import Coordinates
from ....infrastructure.geolocation import LocationResolver, ReportedPositionProvider

app = FastAPI()

_resolver: Optional[LocationResolver] = None

def init_resolver(resolver: LocationResolver):
    global _resolver
    _resolver = resolver

def get_resolver() -> LocationResolver:
    if _resolver is None:
        raise HTTPException(500, "Location resolver not initialized")
    return _resolver

def build_provider(payload: ResolveLocationRequest) -> Optional[ReportedPositionProvider]:
    if payload.error_code is not None:
        return ReportedPositionProvider(error_code=payload.error_code, message=payload.message)
    if payload.latitude is None or payload.longitude is None:
        # Nothing reported: the device has no geolocation support
        return None
    return ReportedPositionProvider(Coordinates(payload.latitude, payload.longitude))

@app.post("/location/resolve")
async def resolve_location(payload: ResolveLocationRequest):
    """
    Body example:
    {"latitude": 25.0330, "longitude": 121.5654}
    or, when the device could not get a fix:
    {"error_code": 1, "message": "User denied Geolocation"}
    """
    resolver = get_resolver()
    return await resolver.resolve(build_provider(payload))
