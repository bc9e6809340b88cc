"""Health check endpoint."""

from fastapi import APIRouter
from sqlalchemy import text

from news_api.dependencies import SessionDep

router = APIRouter(tags=["health"])


@router.get("/health")
def health(session: SessionDep):
    """Report service health, including database reachability."""
    session.execute(text("SELECT 1"))
    return {"status": "ok"}
