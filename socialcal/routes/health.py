"""
SocialCal health check routes
"""
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import __version__
from ..database import get_db
from ..posting.circuit_breaker import OPEN, circuit_breaker
from ..posting.platforms import Platform

router = APIRouter(prefix="/api/health", tags=["health"])

START_TIME = datetime.now(timezone.utc)


def get_uptime() -> str:
    """Uptime as a human-readable string"""
    delta = datetime.now(timezone.utc) - START_TIME
    hours, remainder = divmod(delta.seconds, 3600)
    minutes, seconds = divmod(remainder, 60)

    if delta.days > 0:
        return f"{delta.days}d {hours}h {minutes}m"
    elif hours > 0:
        return f"{hours}h {minutes}m {seconds}s"
    else:
        return f"{minutes}m {seconds}s"


def check_database(db: Session) -> Dict[str, Any]:
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        return {"status": "unhealthy", "error": str(e)}
    return {"status": "healthy"}


def check_platforms() -> Dict[str, Any]:
    """Circuit state of every platform; an open circuit degrades, never fails, readiness"""
    states = {p.value: circuit_breaker.status(p.value)["state"] for p in Platform}
    open_circuits = [name for name, state in states.items() if state == OPEN]
    return {
        "status": "degraded" if open_circuits else "healthy",
        "circuits": states,
        "open": open_circuits,
    }


@router.get("")
@router.get("/live")
async def health_live():
    """Liveness check"""
    return {
        "ok": True,
        "status": "alive",
        "version": __version__,
        "uptime": get_uptime(),
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    }


@router.get("/ready")
def health_ready(db: Session = Depends(get_db)):
    """Readiness check: database reachable, platform circuits reported"""
    database = check_database(db)
    platforms = check_platforms()
    ready = database["status"] == "healthy"

    return {
        "ok": ready,
        "status": "ready" if ready else "not_ready",
        "checks": {
            "database": database,
            "platforms": platforms,
        },
    }
