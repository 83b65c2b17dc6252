"""
OpenAI API Client for Whispers.

Handles OpenAI API connections, error handling, retries, and rate limiting.
Contains no game logic - purely API interaction utilities.
"""

import time
import logging
from typing import Optional, Dict, Any, List
from dataclasses import dataclass

import openai
from openai import OpenAI

from config import settings

logger = logging.getLogger(__name__)

class AIError(Exception):
    """Base exception for AI-related errors."""
    pass

class RateLimitError(AIError):
    """Raised when OpenAI rate limit is exceeded."""
    pass

class ContentFilterError(AIError):
    """Raised when content is filtered by OpenAI."""
    pass

@dataclass
class AIResponse:
    """Response from OpenAI API."""
    content: str
    tokens_used: int
    model_used: str
    success: bool = True
    error_message: Optional[str] = None

class OpenAIClient:
    """
    OpenAI API client with error handling and retry logic.

    Handles all OpenAI API interactions with proper error handling,
    rate limiting, and retry logic. Never raises to its callers: failures
    come back as an unsuccessful AIResponse.
    """

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None,
                 timeout: Optional[float] = None, max_retries: Optional[int] = None):
        """
        Initialize OpenAI client.

        Args:
            api_key: OpenAI API key (defaults to settings)
            model: OpenAI model to use
            timeout: Per-request timeout in seconds
            max_retries: Attempts before giving up
        """
        self.api_key = api_key or settings.OPENAI_API_KEY
        self.model = model or settings.OPENAI_MODEL
        self.timeout = timeout if timeout is not None else settings.OPENAI_TIMEOUT_SECONDS
        self.max_retries = max(1, max_retries if max_retries is not None else settings.OPENAI_MAX_RETRIES)
        self.base_delay = 1.0  # seconds
        self.client = None

        if not self.api_key:
            logger.warning("OpenAI API key not provided, narrative features will use fallbacks")
            return

        try:
            # Retries are handled here, not by the SDK
            self.client = OpenAI(api_key=self.api_key, timeout=self.timeout, max_retries=0)
            logger.info("OpenAI client initialized successfully")
        except Exception as e:
            logger.error(f"Failed to initialize OpenAI client: {e}")

    def is_available(self) -> bool:
        """Check if OpenAI client is available and configured."""
        return self.client is not None and self.api_key is not None

    def generate_completion(self, messages: List[Dict[str, str]],
                            max_tokens: int = 150,
                            temperature: float = 0.7) -> AIResponse:
        """
        Generate a completion from OpenAI API with error handling.

        Args:
            messages: List of message dictionaries for the conversation
            max_tokens: Maximum tokens to generate
            temperature: Temperature for randomness (0.0 to 1.0)

        Returns:
            AIResponse with content and metadata
        """
        if not self.is_available():
            return AIResponse(
                content="AI service unavailable",
                tokens_used=0,
                model_used=self.model,
                success=False,
                error_message="OpenAI client not available"
            )

        last_error = None

        for attempt in range(self.max_retries):
            try:
                logger.debug(f"OpenAI API attempt {attempt + 1}/{self.max_retries}")

                response = self.client.chat.completions.create(
                    model=self.model,
                    messages=messages,
                    max_tokens=max_tokens,
                    temperature=temperature,
                    timeout=self.timeout
                )

                content = response.choices[0].message.content
                if not content:
                    raise ContentFilterError("Empty response from OpenAI")

                tokens_used = response.usage.total_tokens if response.usage else 0
                logger.debug(f"OpenAI API success: {tokens_used} tokens used")

                return AIResponse(
                    content=content.strip(),
                    tokens_used=tokens_used,
                    model_used=self.model,
                    success=True
                )

            except openai.RateLimitError as e:
                last_error = RateLimitError(f"Rate limit exceeded: {e}")
                delay = self.base_delay * (2 ** attempt)  # Exponential backoff
                logger.warning(f"Rate limit hit, waiting {delay}s before retry {attempt + 1}")
                time.sleep(delay)

            except openai.AuthenticationError as e:
                # Don't retry authentication errors
                return AIResponse(
                    content="AI authentication failed",
                    tokens_used=0,
                    model_used=self.model,
                    success=False,
                    error_message=f"API key invalid: {e}"
                )

            except openai.BadRequestError as e:
                # Bad requests won't succeed on retry
                return AIResponse(
                    content="AI request rejected",
                    tokens_used=0,
                    model_used=self.model,
                    success=False,
                    error_message=f"Bad request: {e}"
                )

            except Exception as e:
                last_error = AIError(f"Unexpected error: {e}")
                delay = self.base_delay * (attempt + 1)
                logger.warning(f"API error, waiting {delay}s before retry {attempt + 1}: {e}")
                time.sleep(delay)

        error_msg = f"Failed after {self.max_retries} attempts: {last_error}"
        logger.error(error_msg)

        return AIResponse(
            content="AI service temporarily unavailable",
            tokens_used=0,
            model_used=self.model,
            success=False,
            error_message=error_msg
        )

    def get_status(self) -> Dict[str, Any]:
        """
        Get current client status.

        Returns:
            Status information dictionary
        """
        return {
            'available': self.is_available(),
            'model': self.model,
            'has_api_key': bool(self.api_key),
            'max_retries': self.max_retries,
            'timeout': self.timeout
        }
