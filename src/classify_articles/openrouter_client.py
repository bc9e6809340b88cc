"""Thin OpenRouter chat-completion client built on the OpenAI SDK."""

import logging

import openai
from openai import OpenAI

from classify_articles.errors import (
    AIConfigurationError,
    AIInsufficientCreditsError,
    AIRateLimitError,
    AIRequestError,
    AITimeoutError,
)
from common.config import ClassificationConfig

logger = logging.getLogger(__name__)


class OpenRouterClient:
    """JSON-mode chat completions against OpenRouter.

    Every SDK failure is translated into an AIClientError subclass, so callers
    only ever handle one exception hierarchy. SDK-level retries are disabled;
    the fetch cycle is the retry loop.
    """

    def __init__(self, config: ClassificationConfig, client: OpenAI | None = None):
        if client is None and not config.api_key:
            raise AIConfigurationError("OPENROUTER_API_KEY is not set")
        self.config = config
        self.client = client or OpenAI(
            api_key=config.api_key,
            base_url=config.base_url,
            timeout=config.timeout,
            max_retries=0,
            default_headers={
                "HTTP-Referer": config.referer,
                "X-Title": config.app_title,
            },
        )

    def chat_completion(self, messages: list[dict[str, str]]) -> str:
        """Send messages and return the content of the first choice.

        Raises:
            AITimeoutError: The request exceeded the configured timeout.
            AIRateLimitError: HTTP 429.
            AIInsufficientCreditsError: HTTP 402.
            AIRequestError: Any other failure, including an empty response.
        """
        try:
            response = self.client.chat.completions.create(
                model=self.config.model,
                messages=messages,
                response_format={"type": "json_object"},
                temperature=self.config.temperature,
                max_tokens=self.config.max_tokens,
            )
        except openai.APITimeoutError as e:
            raise AITimeoutError(f"Request timeout after {self.config.timeout}s") from e
        except openai.RateLimitError as e:
            raise AIRateLimitError("Rate limit exceeded", status_code=429) from e
        except openai.APIStatusError as e:
            if e.status_code == 402:
                raise AIInsufficientCreditsError("Insufficient credits", status_code=402) from e
            raise AIRequestError(f"HTTP {e.status_code}: {e.message}", status_code=e.status_code) from e
        except openai.APIError as e:
            raise AIRequestError(f"Request failed: {e}") from e

        if not response.choices or response.choices[0].message.content is None:
            raise AIRequestError("Response contained no choices")

        return response.choices[0].message.content
