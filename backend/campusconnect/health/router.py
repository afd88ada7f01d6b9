import time
import logging
from datetime import datetime
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from campusconnect.config.settings import settings
from campusconnect.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["health"]
)


class HealthResponse(BaseModel):
    status: str
    environment: str
    timestamp: float


@router.get("/health", response_model=HealthResponse)
def health_check():
    """Health check endpoint to verify the API is running"""
    logger.info(f"Health check called - Environment: {settings.APP_ENV}")
    return {
        'status': 'healthy',
        'environment': settings.APP_ENV,
        'timestamp': time.time()
    }


@router.get("/health/db")
def check_database_health(db: Session = Depends(get_db)):
    """Database connectivity check; 503 when the database cannot be reached."""
    health_status = {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat(),
        "checks": {}
    }

    try:
        db.execute(text("SELECT 1"))
        health_status["checks"]["database"] = {"connected": True}
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        health_status["checks"]["database"] = {"connected": False, "error": str(e)}
        health_status["status"] = "unhealthy"

    status_code = 200 if health_status["status"] == "healthy" else 503
    return JSONResponse(content=health_status, status_code=status_code)
