"""HTTP fetching of syndication feeds."""

import logging

import requests

from common.config import FetchConfig
from fetch_feeds.decode import decode_body
from fetch_feeds.models import FetchResult
from fetch_feeds.parse_feed import FeedParseError, parse_feed

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "pulsereader/1.0 (RSS reader)"
ACCEPT_HEADER = "application/rss+xml, application/atom+xml, application/xml;q=0.9, text/xml;q=0.8, */*;q=0.5"


def fetch_feed(url: str, timeout: int = 30, user_agent: str = DEFAULT_USER_AGENT) -> FetchResult:
    """Fetch one feed URL and parse it into items.

    Never raises: network errors, non-2xx statuses and unparseable payloads
    all come back as a failed FetchResult.
    """
    try:
        response = requests.get(
            url,
            timeout=timeout,
            headers={"User-Agent": user_agent, "Accept": ACCEPT_HEADER},
        )
    except requests.Timeout:
        logger.warning("Feed request timed out after %ss: %s", timeout, url)
        return FetchResult(success=False, error=f"Request timeout after {timeout}s")
    except requests.RequestException as e:
        logger.warning("Feed request failed for %s: %s", url, e)
        return FetchResult(success=False, error=f"Network error: {e}")

    if not 200 <= response.status_code < 300:
        error = f"HTTP {response.status_code}: {response.reason}"
        logger.warning("Feed %s returned %s", url, error)
        return FetchResult(success=False, error=error)

    text = decode_body(response.content, response.headers.get("Content-Type"))

    try:
        items = parse_feed(text)
    except FeedParseError as e:
        logger.error("Failed to parse feed %s: %s", url, e)
        return FetchResult(success=False, error=str(e))

    logger.info("Fetched %d items from %s", len(items), url)
    return FetchResult(success=True, items=items)


class FeedFetcher:
    """Feed fetcher bound to the fetch section of the pipeline config."""

    def __init__(self, config: FetchConfig | None = None):
        self.config = config or FetchConfig()

    def fetch(self, url: str) -> FetchResult:
        return fetch_feed(url, timeout=self.config.timeout, user_agent=self.config.user_agent)
