"""Scheduler trigger endpoint."""

import logging
import secrets
from typing import Annotated

from fastapi import APIRouter, Header

from fetch_cycle.run_fetch_cycle import run_configured_cycle
from news_api.dependencies import ConfigDep, SessionDep
from news_api.models import CycleSummaryResponse
from retrieve_articles.errors import AuthenticationRequiredError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cron", tags=["cron"])


def _check_cron_secret(authorization: str | None, expected: str | None) -> None:
    if not expected:
        logger.warning("Cron trigger rejected: CRON_SECRET is not configured")
        raise AuthenticationRequiredError("Cron trigger is not configured")
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not secrets.compare_digest(token, expected):
        raise AuthenticationRequiredError("Invalid cron credentials")


@router.post("/fetch-rss", response_model=CycleSummaryResponse)
def fetch_rss(
    config: ConfigDep,
    session: SessionDep,
    authorization: Annotated[str | None, Header()] = None,
):
    """Run one fetch cycle and return its summary."""
    _check_cron_secret(authorization, config.api.cron_secret)
    summary = run_configured_cycle(session, config)
    return CycleSummaryResponse.model_validate(summary)
