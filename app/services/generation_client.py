"""Client for the chat-completion endpoint used to generate problems."""

import logging
from typing import Optional

import httpx
from openai import APIConnectionError, APIStatusError, APITimeoutError, AsyncOpenAI

from app.utils.config import Settings, get_settings
from app.utils.errors import ConfigurationError, MalformedResponseError, UpstreamError

logger = logging.getLogger(__name__)

GENERATION_TEMPERATURE = 0.7
_LOG_BODY_LIMIT = 500


class GenerationClient:
    """
    Sends one chat-completion request per call and returns the raw reply text.

    The OpenAI SDK client is created on first use and reused afterwards.
    Transient failures (timeouts, 408/409/429/5xx) are retried by the SDK up
    to ``openai_max_retries`` times with exponential backoff and jitter.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings or get_settings()
        self._http_client = http_client
        self._client: Optional[AsyncOpenAI] = None
        self._client_key: Optional[str] = None

    def _get_client(self, api_key: str) -> AsyncOpenAI:
        if self._client is None or self._client_key != api_key:
            self._client = AsyncOpenAI(
                api_key=api_key,
                base_url=self.settings.openai_base_url,
                timeout=self.settings.openai_timeout_seconds,
                max_retries=self.settings.openai_max_retries,
                http_client=self._http_client,
            )
            self._client_key = api_key
        return self._client

    async def request_completion(
        self, system_prompt: str, user_prompt: str, api_key: Optional[str] = None
    ) -> str:
        """Request a JSON-object completion and return its message content."""
        key = api_key or self.settings.openai_api_key
        if not key:
            raise ConfigurationError("OpenAI API key not configured")

        client = self._get_client(key)
        try:
            response = await client.chat.completions.create(
                model=self.settings.openai_model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=GENERATION_TEMPERATURE,
                max_tokens=self.settings.openai_max_tokens,
                response_format={"type": "json_object"},
            )
        except APIStatusError as e:
            body = e.response.text
            logger.error(
                "OpenAI API returned %s: %s", e.status_code, body[:_LOG_BODY_LIMIT]
            )
            raise UpstreamError(
                f"OpenAI API error: {body}",
                upstream_status=e.status_code,
                upstream_body=body,
            ) from e
        except APITimeoutError as e:
            logger.error(
                "OpenAI API timed out after %ss", self.settings.openai_timeout_seconds
            )
            raise UpstreamError("OpenAI API request timed out") from e
        except APIConnectionError as e:
            logger.error("OpenAI API connection failed: %s", e)
            raise UpstreamError(f"OpenAI API connection failed: {e}") from e

        if not response.choices:
            raise MalformedResponseError("Completion reply contained no choices")
        content = response.choices[0].message.content
        if content is None:
            raise MalformedResponseError("Completion reply contained no content")
        return content

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.close()
            self._client = None
            self._client_key = None


# Global generation client instance
generation_client = GenerationClient()
