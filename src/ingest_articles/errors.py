"""Errors raised while ingesting articles and managing feed sources."""


class IngestError(Exception):
    """Base class for ingestion errors. Every subclass carries a stable code."""

    code = "ARTICLE_INSERT_FAILED"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class SourceNotFoundError(IngestError):
    code = "RSS_SOURCE_NOT_FOUND"

    def __init__(self, source_id):
        super().__init__(f"RSS source not found: {source_id}")
        self.source_id = source_id


class SourceInactiveError(IngestError):
    code = "RSS_SOURCE_INACTIVE"

    def __init__(self, source_id):
        super().__init__(f"RSS source is inactive: {source_id}")
        self.source_id = source_id


class DuplicateSourceError(IngestError):
    code = "DUPLICATE_URL"

    def __init__(self, url: str):
        super().__init__(f"An RSS source with this URL already exists: {url}")
        self.url = url


class ArticleExistsError(IngestError):
    code = "ARTICLE_ALREADY_EXISTS"

    def __init__(self, link: str):
        super().__init__(f"An article with this link already exists: {link}")
        self.link = link


class InvalidTopicIdsError(IngestError):
    code = "INVALID_TOPIC_IDS"

    def __init__(self, topic_ids):
        super().__init__(f"Unknown topic ids: {', '.join(str(t) for t in topic_ids)}")
        self.topic_ids = list(topic_ids)
