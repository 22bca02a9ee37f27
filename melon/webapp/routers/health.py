"""
Health check endpoint.
"""

from fastapi import APIRouter
from sqlalchemy import text

from db.database import get_db_session
from utils.logger import get_logger

router = APIRouter(tags=["health"])
logger = get_logger(__name__)


@router.get("/api/health")
async def health_check():
    """Health check endpoint. Reports the database as unreachable instead of failing."""
    database = "ok"
    try:
        with get_db_session() as session:
            session.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Health check database query failed: {e}")
        database = "unavailable"
    return {"status": "healthy", "service": "melon-webapp", "database": database}
