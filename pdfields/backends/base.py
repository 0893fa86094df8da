"""Extraction backend protocol and factory."""

from typing import Any, Protocol

from pdfields.core.config import ExtractionConfig


class ExtractionBackend(Protocol):
    """Anything that can answer one extraction request.

    ``extract`` returns the raw answer text and raises ``BackendError`` on
    transport or protocol failure. Implementations may also provide an
    ``async aclose()`` that releases connections.
    """

    async def extract(
        self, document: str, prompt: str, contract: dict[str, Any]
    ) -> str: ...


def build_backend(config: ExtractionConfig) -> ExtractionBackend:
    """Instantiate the backend selected by ``config.backend``."""
    if config.backend == "ollama":
        from pdfields.backends.ollama_vision import OllamaBackend

        return OllamaBackend.from_config(config.ollama)

    from pdfields.backends.openrouter import OpenRouterBackend

    return OpenRouterBackend.from_config(config.openrouter)
