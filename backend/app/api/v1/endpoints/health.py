"""
Health check endpoint.

Reports the MongoDB connection state. Responds 503 while the database is
unhealthy so load balancers stop routing traffic here.
"""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from datetime import datetime, timezone

from app.core.logging_config import logger


router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(request: Request):
    db_manager = getattr(request.app.state, "db_manager", None)
    if db_manager is None:
        database = {"status": "unhealthy", "db_status": "disconnected"}
    else:
        database = await db_manager.health_check()

    body = {
        "status": "ok",
        "database": database,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

    if database["status"] != "healthy":
        logger.warning(f"[HealthCheck] Database unhealthy: {database}")
        return JSONResponse(status_code=503, content=body)
    return body
