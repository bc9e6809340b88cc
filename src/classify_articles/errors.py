"""Errors raised by the OpenRouter client and response parsing."""


class AIClientError(Exception):
    """Base class for classification service failures."""

    code = "AI_REQUEST_FAILED"
    retryable = False

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AIConfigurationError(AIClientError):
    code = "AI_NOT_CONFIGURED"


class AIRateLimitError(AIClientError):
    code = "AI_RATE_LIMIT_EXCEEDED"
    retryable = True


class AIInsufficientCreditsError(AIClientError):
    code = "AI_INSUFFICIENT_CREDITS"


class AITimeoutError(AIClientError):
    code = "AI_REQUEST_TIMEOUT"
    retryable = True


class AIRequestError(AIClientError):
    code = "AI_REQUEST_FAILED"


class AIResponseError(AIClientError):
    """The service answered, but not with a usable classification."""

    INVALID_JSON = "AI_RESPONSE_INVALID_JSON"
    VALIDATION_FAILED = "AI_RESPONSE_VALIDATION_FAILED"

    def __init__(self, message: str, code: str):
        super().__init__(message)
        self.code = code
