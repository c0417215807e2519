# This project was developed with assistance from AI tools.
"""Liveness and readiness checks."""

from db import DatabaseService, get_db_service
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..core.config import settings

router = APIRouter()


@router.get("/")
async def health() -> dict[str, str]:
    """Liveness: the process is up."""
    return {"status": "ok", "service": settings.APP_NAME}


@router.get("/ready")
async def ready(db: DatabaseService = Depends(get_db_service)) -> JSONResponse:
    """Readiness: the database answers. 503 when it does not."""
    database = await db.health_check()
    healthy = database["status"] == "healthy"
    return JSONResponse(
        status_code=200 if healthy else 503,
        content={"status": "ok" if healthy else "degraded", "database": database},
    )
