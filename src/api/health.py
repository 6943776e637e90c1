"""Health check endpoint."""

from typing import Union

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.core.logging import get_logger
from src.db.database import get_db
from src.db.models import ScenarioModel

logger = get_logger(__name__)

router = APIRouter()


@router.get("/health")
def health_check(db: Session = Depends(get_db)) -> dict[str, Union[str, int]]:
    """Return database status and the number of imported scenarios."""
    try:
        scenarios = db.scalar(select(func.count()).select_from(ScenarioModel)) or 0
    except SQLAlchemyError as e:
        logger.warning("Health check failed: %s", e)
        return {"status": "error", "database": "disconnected"}
    return {"status": "ok", "database": "connected", "scenarios": scenarios}
