"""Health check endpoints."""

import asyncio
import logging
from datetime import UTC, datetime

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from adapters.payments.razorpay_adapter import get_razorpay_adapter
from adapters.sms.twilio_adapter import get_twilio_adapter
from api.dependencies import AdminUser
from infrastructure.config import get_settings
from infrastructure.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter()
settings = get_settings()


@router.get("/health")
async def health_check():
    """Basic health check."""
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
        "timestamp": datetime.now(UTC).isoformat(),
    }


@router.get("/health/db")
async def health_check_db(db: AsyncSession = Depends(get_db)):
    """Health check with database connectivity."""
    try:
        result = await asyncio.wait_for(db.execute(text("SELECT 1")), timeout=5.0)
        result.scalar()
        db_status = "connected"
    except TimeoutError:
        logger.error("Health check DB timeout")
        db_status = "error: database timeout"
    except Exception as e:
        logger.error("Health check DB error: %s", str(e))
        db_status = "error: database check failed"

    return {
        "status": "healthy" if db_status == "connected" else "degraded",
        "database": db_status,
        "timestamp": datetime.now(UTC).isoformat(),
    }


@router.get("/health/live")
async def liveness_check():
    return {"alive": True}


@router.get("/health/services")
async def services_check(admin_user: AdminUser):
    """Which third-party integrations are live versus simulated."""
    services = {
        "razorpay": {"configured": get_razorpay_adapter().is_configured},
        "twilio": {
            "configured": get_twilio_adapter().is_configured,
            "dry_run": get_twilio_adapter().dry_run,
        },
        "resend": {"configured": bool(settings.resend_api_key)},
    }
    return {
        "status": "healthy" if all(s["configured"] for s in services.values()) else "degraded",
        "services": services,
        "timestamp": datetime.now(UTC).isoformat(),
    }
