"""Text and date cleanup for feed items."""

import logging
import re
from datetime import datetime, timedelta, timezone

from dateutil.parser import parse as parse_date

from common.utils import collapse_whitespace, truncate

logger = logging.getLogger(__name__)

MAX_DESCRIPTION_LENGTH = 5000

# Timezone abbreviations for date parsing
TZINFOS = {
    "EST": timezone(timedelta(hours=-5)),
    "EDT": timezone(timedelta(hours=-4)),
    "CST": timezone(timedelta(hours=-6)),
    "CDT": timezone(timedelta(hours=-5)),
    "MST": timezone(timedelta(hours=-7)),
    "MDT": timezone(timedelta(hours=-6)),
    "PST": timezone(timedelta(hours=-8)),
    "PDT": timezone(timedelta(hours=-7)),
    "GMT": timezone.utc,
    "UTC": timezone.utc,
    "BST": timezone(timedelta(hours=1)),
}

_CDATA_RE = re.compile(r"<!\[CDATA\[(.*?)\]\]>", re.DOTALL)
_TAG_RE = re.compile(r"<[^>]+>")

# &amp; goes last so "&amp;lt;" becomes "&lt;" rather than "<"
_ENTITIES = (
    ("&nbsp;", " "),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&amp;", "&"),
)


def clean_text(value: str | None) -> str:
    """Strip CDATA markers and HTML tags, decode common entities, collapse whitespace."""
    if not value:
        return ""
    text = _CDATA_RE.sub(r"\1", value)
    text = _TAG_RE.sub(" ", text)
    for entity, replacement in _ENTITIES:
        text = text.replace(entity, replacement)
    return collapse_whitespace(text)


def clean_description(value: str | None) -> str | None:
    """Clean a description and cap it at MAX_DESCRIPTION_LENGTH; empty becomes None."""
    text = clean_text(value)
    if not text:
        return None
    return truncate(text, MAX_DESCRIPTION_LENGTH)


def parse_publication_date(value: str | None, now: datetime | None = None) -> datetime:
    """Parse a feed date string, falling back to now (UTC) if missing or invalid."""
    fallback = now or datetime.now(timezone.utc)
    if not value or not value.strip():
        return fallback

    try:
        dt = parse_date(value.strip(), tzinfos=TZINFOS)
    except (ValueError, OverflowError) as e:
        logger.warning("Unparseable publication date %r: %s", value, e)
        return fallback

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt
