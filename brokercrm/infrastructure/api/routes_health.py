"""Health check endpoint."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from brokercrm.adapters.persistence.database import get_session
from brokercrm.adapters.persistence.repositories import SqlSmartAssignmentSettingsRepository

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(session: AsyncSession = Depends(get_session)):
    """Database connectivity plus whether auto-assignment is switched on globally."""
    smart_assignment = "unknown"
    try:
        global_setting = await SqlSmartAssignmentSettingsRepository(session).get_global()
        db_status = "connected"
        if global_setting is None:
            smart_assignment = "not_configured"
        else:
            smart_assignment = "enabled" if global_setting.is_enabled else "disabled"
    except Exception as e:
        logger.warning("Health check failed: %s", e)
        db_status = f"error: {e}"

    return {
        "status": "ok" if db_status == "connected" else "degraded",
        "database": db_status,
        "smart_assignment": smart_assignment,
        "service": "Broker CRM - Smart Assignment",
    }
