"""
Top-level API router.

Aggregates the domain routers under their resource prefixes.  When a
new resource is added, include its router here.
"""

from fastapi import APIRouter, Depends

from ..core.db import Database, get_db
from .endpoints import todos, users

router = APIRouter()

router.include_router(todos.router, prefix="/todos", tags=["todos"])
router.include_router(users.router, prefix="/users", tags=["users"])


@router.get("/health", tags=["health"])
async def health_check(db: Database = Depends(get_db)) -> dict:
    """Liveness check.  Reports whether the datastore has been opened."""
    return {"status": "ok" if db.is_open else "starting"}
