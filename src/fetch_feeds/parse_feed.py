"""RSS 2.0, RSS 1.0 (RDF) and Atom parsing with a regex fallback for broken XML."""

import logging
import re
from datetime import datetime, timezone

from lxml import etree

from fetch_feeds.helpers import clean_description, clean_text, parse_publication_date
from fetch_feeds.models import FeedItem

logger = logging.getLogger(__name__)

ITEM_TAGS = ("item", "entry")
DESCRIPTION_TAGS = ("description", "summary", "content", "encoded")
DATE_TAGS = ("pubDate", "published", "updated", "date", "issued")
ID_TAGS = ("guid", "id")


class FeedParseError(Exception):
    """Raised when a payload is neither well-formed XML nor recoverable by regex."""


def parse_feed(text: str, now: datetime | None = None) -> list[FeedItem]:
    """Parse a decoded feed document into cleaned items.

    Items missing a title or link are dropped. A well-formed document with no
    items yields an empty list.

    Raises:
        FeedParseError: If the XML is malformed and no items can be salvaged.
    """
    now = now or datetime.now(timezone.utc)
    try:
        root = _parse_xml(text)
    except (etree.XMLSyntaxError, ValueError) as e:
        logger.warning("Malformed feed XML, falling back to regex extraction: %s", e)
        items = _parse_with_regex(text, now)
        if not items:
            raise FeedParseError(f"Invalid XML and no items recovered: {e}") from e
        return items

    return _parse_dom(root, now)


def _parse_xml(text: str) -> etree._Element:
    parser = etree.XMLParser(
        encoding="utf-8",
        resolve_entities=False,
        no_network=True,
        remove_comments=True,
    )
    return etree.fromstring(text.strip().encode("utf-8"), parser)


def _localname(element: etree._Element) -> str:
    return etree.QName(element).localname


def _parse_dom(root: etree._Element, now: datetime) -> list[FeedItem]:
    items = []
    skipped = 0
    for element in root.iter(tag=etree.Element):
        if _localname(element) not in ITEM_TAGS:
            continue
        item = _item_from_element(element, now)
        if item is None:
            skipped += 1
            continue
        items.append(item)

    if skipped:
        logger.warning("Skipped %d feed items missing title or link", skipped)
    return items


def _children(element: etree._Element, name: str) -> list[etree._Element]:
    return [child for child in element.iterchildren(tag=etree.Element) if _localname(child) == name]


def _first_text(element: etree._Element, names: tuple[str, ...]) -> str | None:
    for name in names:
        for child in _children(element, name):
            text = "".join(child.itertext())
            if text.strip():
                return text
    return None


def _resolve_link(element: etree._Element) -> str:
    links = _children(element, "link")

    for link in links:
        text = clean_text("".join(link.itertext()))
        if text:
            return text

    hrefs = [(link.get("rel"), link.get("href")) for link in links if link.get("href")]
    for rel, href in hrefs:
        if rel in (None, "alternate"):
            return clean_text(href)
    if hrefs:
        return clean_text(hrefs[0][1])

    identifier = clean_text(_first_text(element, ID_TAGS))
    if identifier.startswith(("http://", "https://")):
        return identifier
    return ""


def _item_from_element(element: etree._Element, now: datetime) -> FeedItem | None:
    title = clean_text(_first_text(element, ("title",)))
    link = _resolve_link(element)
    if not title or not link:
        return None

    return FeedItem(
        title=title,
        link=link,
        description=clean_description(_first_text(element, DESCRIPTION_TAGS)),
        publication_date=parse_publication_date(_first_text(element, DATE_TAGS), now),
    )


_ITEM_BLOCK_RE = re.compile(r"<((?:[\w-]+:)?(?:item|entry))(?=[\s>])[^>]*>(.*?)</\1\s*>", re.DOTALL)
_HREF_RE = re.compile(r"""href\s*=\s*["']([^"']+)["']""")
_REL_RE = re.compile(r"""rel\s*=\s*["']([^"']+)["']""")


def _regex_field(block: str, name: str) -> str | None:
    pattern = rf"<((?:[\w-]+:)?{name})(?=[\s>])[^>]*>(.*?)</\1\s*>"
    match = re.search(pattern, block, re.DOTALL)
    if match:
        return match.group(2)
    return None


def _regex_first(block: str, names: tuple[str, ...]) -> str | None:
    for name in names:
        value = _regex_field(block, name)
        if value is not None and value.strip():
            return value
    return None


def _regex_link(block: str) -> str:
    text = clean_text(_regex_field(block, "link"))
    if text:
        return text

    hrefs = []
    for match in re.finditer(r"<(?:[\w-]+:)?link\b([^>]*)>", block):
        attrs = match.group(1)
        href = _HREF_RE.search(attrs)
        if href:
            rel = _REL_RE.search(attrs)
            hrefs.append((rel.group(1) if rel else None, href.group(1)))
    for rel, href in hrefs:
        if rel in (None, "alternate"):
            return clean_text(href)
    if hrefs:
        return clean_text(hrefs[0][1])

    identifier = clean_text(_regex_first(block, ID_TAGS))
    if identifier.startswith(("http://", "https://")):
        return identifier
    return ""


def _parse_with_regex(text: str, now: datetime) -> list[FeedItem]:
    items = []
    for match in _ITEM_BLOCK_RE.finditer(text):
        block = match.group(2)
        title = clean_text(_regex_field(block, "title"))
        link = _regex_link(block)
        if not title or not link:
            continue
        items.append(
            FeedItem(
                title=title,
                link=link,
                description=clean_description(_regex_first(block, DESCRIPTION_TAGS)),
                publication_date=parse_publication_date(clean_text(_regex_first(block, DATE_TAGS)), now),
            )
        )
    logger.info("Regex fallback recovered %d items", len(items))
    return items
