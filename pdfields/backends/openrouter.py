"""OpenRouter chat-completions backend.

Uses httpx with configurable timeouts and tenacity for retry with
exponential backoff on 429/5xx and connection errors.
"""

import logging
import os
from typing import Any, Optional

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from pdfields.core.config import OpenRouterConfig
from pdfields.core.errors import BackendError, BackendUnavailable, ConfigError

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS = {408, 429, 500, 502, 503, 504}


class OpenRouterBackend:
    """Sends the PDF plus prompt to OpenRouter with a strict JSON-schema response format."""

    def __init__(
        self,
        api_key: str,
        model: str = "google/gemini-2.5-flash",
        base_url: str = "https://openrouter.ai/api/v1",
        timeout: float = 300.0,
        connect_timeout: float = 30.0,
        retry_attempts: int = 3,
        retry_delay: float = 2.0,
        retry_backoff: float = 2.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.model = model
        self._retry_attempts = retry_attempts
        self._retry_delay = retry_delay
        self._retry_backoff = retry_backoff

        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=httpx.Timeout(timeout, connect=connect_timeout),
            transport=transport,
        )

    @classmethod
    def from_config(cls, config: OpenRouterConfig) -> "OpenRouterBackend":
        api_key = os.environ.get(config.api_key_env)
        if not api_key:
            raise ConfigError(f"{config.api_key_env} environment variable not set")
        return cls(
            api_key=api_key,
            model=config.model,
            base_url=config.base_url,
            timeout=config.timeout_seconds,
            connect_timeout=config.connect_timeout,
            retry_attempts=config.retry_attempts,
            retry_delay=config.retry_delay,
            retry_backoff=config.retry_backoff,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    def build_request(
        self, document: str, prompt: str, contract: dict[str, Any]
    ) -> dict[str, Any]:
        """Chat-completions body: prompt text part, PDF file part, strict schema."""
        return {
            "model": self.model,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt},
                        {
                            "type": "file",
                            "file": {
                                "filename": "document.pdf",
                                "file_data": document,
                            },
                        },
                    ],
                }
            ],
            "response_format": {
                "type": "json_schema",
                "json_schema": {
                    "name": "extraction",
                    "strict": True,
                    "schema": contract,
                },
            },
        }

    async def extract(
        self, document: str, prompt: str, contract: dict[str, Any]
    ) -> str:
        """Return the model's answer text for one batch.

        Raises BackendUnavailable once retries are exhausted, or BackendError
        for non-retryable failures.
        """
        body = self.build_request(document, prompt, contract)

        @retry(
            retry=retry_if_exception_type(BackendUnavailable),
            stop=stop_after_attempt(self._retry_attempts),
            wait=wait_exponential(
                multiplier=self._retry_delay,
                exp_base=self._retry_backoff,
                max=60,
            ),
            reraise=True,
            before_sleep=lambda state: logger.warning(
                "OpenRouter unavailable, retrying in %.1fs (attempt %d/%d)",
                state.next_action.sleep,  # type: ignore[union-attr]
                state.attempt_number,
                self._retry_attempts,
            ),
        )
        async def _do_extract() -> str:
            return await self._send(body)

        return await _do_extract()

    async def _send(self, body: dict[str, Any]) -> str:
        """Send a single chat-completions request."""
        try:
            resp = await self._client.post("/chat/completions", json=body)
        except (httpx.ConnectError, httpx.ConnectTimeout, httpx.ReadTimeout) as e:
            logger.warning("OpenRouter connection failed: %s", e)
            raise BackendUnavailable(f"Cannot reach OpenRouter: {e}") from e
        except httpx.HTTPError as e:
            logger.error("OpenRouter HTTP error: %s", e)
            raise BackendError(f"OpenRouter HTTP error: {e}") from e

        if resp.status_code in _RETRYABLE_STATUS:
            logger.warning("OpenRouter returned %d", resp.status_code)
            raise BackendUnavailable(
                f"OpenRouter returned {resp.status_code}: {_error_detail(resp)}"
            )
        if resp.status_code != 200:
            detail = _error_detail(resp)
            logger.error("OpenRouter error %d: %s", resp.status_code, detail)
            raise BackendError(f"OpenRouter returned {resp.status_code}: {detail}")

        try:
            data = resp.json()
        except ValueError as e:
            raise BackendError(f"OpenRouter response is not JSON: {e}") from e

        if isinstance(data, dict) and "error" in data:
            raise BackendError(f"OpenRouter error: {data['error']}")

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise BackendError(f"Unexpected OpenRouter response layout: {e!r}") from e

        if not isinstance(content, str):
            raise BackendError("Expected string content in OpenRouter response")
        return content


def _error_detail(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return resp.text[:200]
    if isinstance(data, dict) and isinstance(data.get("error"), dict):
        return str(data["error"].get("message", data["error"]))
    return str(data)[:200]
