"""Local extraction backend: page images sent to a vision model via Ollama."""

import asyncio
import logging
from typing import Any, Optional

import httpx
import ollama
from pydantic import ValidationError

from pdfields.core.config import OllamaConfig
from pdfields.core.errors import BackendError, BackendUnavailable
from pdfields.parsers.pdf import decode_data_url, render_page_images

logger = logging.getLogger(__name__)


class OllamaBackend:
    """Renders the PDF to page images and asks Ollama for structured output."""

    def __init__(
        self,
        model: str = "qwen2.5vl:7b",
        host: Optional[str] = None,
        page_dpi: int = 150,
        temperature: float = 0.0,
    ):
        self.model = model
        self.page_dpi = page_dpi
        self.temperature = temperature
        self._client = ollama.AsyncClient(host=host)
        # document -> pending or finished render, shared by concurrent batches
        self._renders: dict[str, asyncio.Future] = {}

    @classmethod
    def from_config(cls, config: OllamaConfig) -> "OllamaBackend":
        return cls(
            model=config.model,
            host=config.host,
            page_dpi=config.page_dpi,
            temperature=config.temperature,
        )

    def _render(self, document: str) -> list[str]:
        try:
            return render_page_images(decode_data_url(document), self.page_dpi)
        except (ValueError, RuntimeError) as exc:
            raise BackendError(f"Cannot render document pages: {exc}") from exc

    async def _page_images(self, document: str) -> list[str]:
        """Render pages in a worker thread, once per document."""
        render = self._renders.get(document)
        if render is None:
            render = asyncio.ensure_future(asyncio.to_thread(self._render, document))
            self._renders[document] = render
        return await render

    async def extract(
        self, document: str, prompt: str, contract: dict[str, Any]
    ) -> str:
        images = await self._page_images(document)

        try:
            response = await self._client.chat(
                model=self.model,
                messages=[
                    {
                        "role": "system",
                        "content": (
                            "You are a document data extractor. "
                            "Respond ONLY with the requested JSON."
                        ),
                    },
                    {"role": "user", "content": prompt, "images": images},
                ],
                format=contract,
                options={"temperature": self.temperature},
            )
        except ollama.ResponseError as exc:
            logger.error("Ollama error %s: %s", exc.status_code, exc.error)
            raise BackendError(f"Ollama error: {exc.error}") from exc
        except (ollama.RequestError, ValidationError) as exc:
            logger.error("Invalid Ollama request: %s", exc)
            raise BackendError(f"Invalid Ollama request: {exc}") from exc
        except (ConnectionError, httpx.TransportError) as exc:
            logger.error("Ollama unreachable: %s", exc)
            raise BackendUnavailable(f"Cannot reach Ollama: {exc}") from exc

        return response.message.content or ""
