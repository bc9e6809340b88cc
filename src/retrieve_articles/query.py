"""Article listing filters and the statements built from them."""

import uuid
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import Select, func, select
from sqlalchemy.orm import selectinload

from feed_db.models import Article


@dataclass(frozen=True)
class ArticleFilterSpec:
    """Every filter, sort and page setting for one article query."""
    sentiment: Optional[str] = None
    article_ids: Optional[tuple[uuid.UUID, ...]] = None
    source_id: Optional[uuid.UUID] = None
    sort_by: str = "publication_date"
    sort_order: str = "desc"
    offset: int = 0
    fetch_size: int = 20


def _apply_filters(stmt: Select, spec: ArticleFilterSpec) -> Select:
    if spec.sentiment is not None:
        stmt = stmt.where(Article.sentiment == spec.sentiment)
    if spec.article_ids is not None:
        stmt = stmt.where(Article.id.in_(spec.article_ids))
    if spec.source_id is not None:
        stmt = stmt.where(Article.source_id == spec.source_id)
    return stmt


def build_articles_statement(spec: ArticleFilterSpec) -> Select:
    """Filtered, sorted, paged article rows with source and topics loaded."""
    sort_column = getattr(Article, spec.sort_by)
    if spec.sort_order == "asc":
        order_by = (sort_column.asc(), Article.id.asc())
    else:
        order_by = (sort_column.desc(), Article.id.desc())

    stmt = select(Article).options(selectinload(Article.source), selectinload(Article.topics))
    return (
        _apply_filters(stmt, spec)
        .order_by(*order_by)
        .offset(spec.offset)
        .limit(spec.fetch_size)
    )


def build_count_statement(spec: ArticleFilterSpec) -> Select:
    """Row count for the same filters, ignoring sort and paging."""
    return _apply_filters(select(func.count(Article.id)), spec)
