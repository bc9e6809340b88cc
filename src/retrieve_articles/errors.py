"""Errors raised by the retrieval service. Each carries a stable code."""


class RetrievalError(Exception):
    code = "INTERNAL_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthenticationRequiredError(RetrievalError):
    code = "AUTHENTICATION_REQUIRED"

    def __init__(self, message: str = "Authentication required for personalized filtering"):
        super().__init__(message)


class ProfileNotFoundError(RetrievalError):
    code = "PROFILE_NOT_FOUND"

    def __init__(self, user_id):
        super().__init__(f"Profile not found for user {user_id}")
        self.user_id = user_id


class ArticleNotFoundError(RetrievalError):
    code = "ARTICLE_NOT_FOUND"

    def __init__(self, article_id):
        super().__init__(f"Article not found: {article_id}")
        self.article_id = article_id


class TopicNotFoundError(RetrievalError):
    code = "TOPIC_NOT_FOUND"

    def __init__(self, topic_id):
        super().__init__(f"Topic not found: {topic_id}")
        self.topic_id = topic_id
