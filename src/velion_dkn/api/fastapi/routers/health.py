from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Response, status

from velion_dkn.db.health import db_healthcheck
from velion_dkn.db.integration import EngineDep

from ..deps import SettingsDep

ROUTER_PREFIX = "/health"
ROUTER_TAG = "Health"

router = APIRouter()


@router.get("")
async def health(settings: SettingsDep) -> dict:
    return {
        "success": True,
        "message": f"{settings.name} is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/db", include_in_schema=False)
async def db_health(engine: EngineDep) -> Response:
    async with engine.session() as s:
        ok = await db_healthcheck(s)
    return Response(status_code=status.HTTP_200_OK if ok else status.HTTP_503_SERVICE_UNAVAILABLE)
