"""Health check endpoint."""

from typing import Any

from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.orm import Session

from zealandia.core.logging import get_logger
from zealandia.db.database import get_db

logger = get_logger(__name__)

router = APIRouter()


@router.get("/health")
def health_check(request: Request, db: Session = Depends(get_db)) -> dict[str, Any]:
    """Database connectivity plus the size of the loaded world."""
    engine = getattr(request.app.state, "reputation_engine", None)
    world = (
        {"slices": len(engine.catalog), "players": len(engine.players)}
        if engine is not None
        else None
    )
    try:
        db.execute(text("SELECT 1"))
        return {"status": "ok", "database": "connected", "world": world}
    except Exception as e:
        logger.warning(f"Health check: database unreachable ({e})")
        return {"status": "error", "database": "disconnected", "world": world}
