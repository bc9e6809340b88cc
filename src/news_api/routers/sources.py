"""RSS source API endpoints."""

import uuid

from fastapi import APIRouter, Response

from ingest_articles.sources import create_source, delete_source, get_source, list_sources, update_source
from news_api.dependencies import SessionDep
from news_api.models import CreateSourceRequest, SourceListResponse, SourceResponse, UpdateSourceRequest

router = APIRouter(prefix="/rss-sources", tags=["rss-sources"])


@router.get("", response_model=SourceListResponse)
def get_sources(session: SessionDep):
    return SourceListResponse(data=[SourceResponse.model_validate(s) for s in list_sources(session)])


@router.post("", response_model=SourceResponse, status_code=201)
def add_source(body: CreateSourceRequest, session: SessionDep):
    """Register a feed. Responds 409 if the URL is already registered."""
    source = create_source(session, body.name, str(body.url))
    return SourceResponse.model_validate(source)


@router.get("/{source_id}", response_model=SourceResponse)
def get_one_source(source_id: uuid.UUID, session: SessionDep):
    return SourceResponse.model_validate(get_source(session, source_id))


@router.patch("/{source_id}", response_model=SourceResponse)
def patch_source(source_id: uuid.UUID, body: UpdateSourceRequest, session: SessionDep):
    """Rename, re-point or (de)activate a feed. Responds 409 if the new URL is taken."""
    source = update_source(
        session,
        source_id,
        name=body.name,
        url=str(body.url) if body.url is not None else None,
        is_active=body.is_active,
    )
    return SourceResponse.model_validate(source)


@router.delete("/{source_id}", status_code=204)
def remove_source(source_id: uuid.UUID, session: SessionDep):
    """Delete a feed together with its articles."""
    delete_source(session, source_id)
    return Response(status_code=204)
