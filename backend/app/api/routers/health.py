# app/api/routers/health.py
import time

from fastapi import APIRouter

from app.core.timestamps import isoformat_utc, utc_now

router = APIRouter(tags=["health"])

_STARTED = time.monotonic()

@router.get("/health")
def health():
    """
    Liveness probe. Does not touch the database.

    Returns:
        dict: {status: "OK", timestamp: ISO-8601, uptime: seconds since start}
    """
    return {
        "status": "OK",
        "timestamp": isoformat_utc(utc_now()),
        "uptime": round(time.monotonic() - _STARTED, 3),
    }
