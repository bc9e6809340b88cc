"""FastAPI dependencies shared by the routers."""

import logging
import uuid
from typing import Annotated, Iterator

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from common.config import PipelineConfig, get_config
from feed_db.connection import get_session
from retrieve_articles.retrieve_articles import ArticleRetrievalService

logger = logging.getLogger(__name__)


def get_db_session() -> Iterator[Session]:
    with get_session() as session:
        yield session


def get_user_id(
    x_user_id: Annotated[str | None, Header(description="Reader id set by the auth gateway")] = None,
) -> uuid.UUID | None:
    """The reader's id, forwarded by the upstream gateway after authentication.

    A malformed header counts as anonymous; only a personalized request then
    fails, with AUTHENTICATION_REQUIRED.
    """
    if not x_user_id:
        return None
    try:
        return uuid.UUID(x_user_id)
    except ValueError:
        logger.warning("Ignoring malformed X-User-Id header")
        return None


def get_retrieval_service(session: Annotated[Session, Depends(get_db_session)]) -> ArticleRetrievalService:
    return ArticleRetrievalService(session)


ConfigDep = Annotated[PipelineConfig, Depends(get_config)]
SessionDep = Annotated[Session, Depends(get_db_session)]
RetrievalServiceDep = Annotated[ArticleRetrievalService, Depends(get_retrieval_service)]
UserIdDep = Annotated[uuid.UUID | None, Depends(get_user_id)]
