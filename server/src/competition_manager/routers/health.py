from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException
from sqlmodel import Session, text

from competition_manager.config import config
from competition_manager.models.database import engine

health = APIRouter()

SERVICE_NAME = "competition-manager"


@health.get("/health")
async def health_check():
    """Basic health check endpoint"""
    return {
        "status": "healthy",
        "service": SERVICE_NAME,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": config["environment"],
    }


@health.get("/health/detailed")
async def detailed_health_check():
    """Health check including database connectivity and mail configuration"""
    health_status = {
        "status": "healthy",
        "service": SERVICE_NAME,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": config["environment"],
        "checks": {},
    }

    try:
        with Session(engine) as session:
            result = session.exec(text("SELECT 1")).first()
            health_status["checks"]["database"] = "healthy" if result else "unhealthy"
    except Exception as e:
        health_status["checks"]["database"] = f"unhealthy: {str(e)}"
        health_status["status"] = "unhealthy"

    # Mail is degraded rather than fatal: registrations still succeed without it
    missing = [
        key
        for key in ("mailgun_api_key", "mailgun_domain", "sender_email")
        if not config.get(key)
    ]
    health_status["checks"]["email"] = (
        f"not configured: {', '.join(missing)}" if missing else "configured"
    )

    if health_status["checks"]["database"] != "healthy":
        health_status["status"] = "unhealthy"

    if health_status["status"] == "unhealthy":
        raise HTTPException(status_code=503, detail=health_status)

    return health_status
