"""
Gemini chat model client.

Treats generation as prompt text in, text plus token usage out, with a hard
timeout around the network call.

Dependencies: langchain_google_genai, pydantic
System role: Generative model adapter for the chat orchestrator
"""

import asyncio
import logging
from typing import Any

from dotenv import load_dotenv
from langchain_google_genai import ChatGoogleGenerativeAI
from pydantic import BaseModel

from portfolio_backend.core.exceptions import ModelGenerationError

load_dotenv()
logger = logging.getLogger(__name__)


class GenerationResult(BaseModel):
    """Model output with provider token usage."""

    text: str
    usage: dict[str, Any] | None = None


def _content_to_text(content: Any) -> str:
    """Flatten LangChain message content (str or list of parts) to text."""
    if isinstance(content, str):
        return content
    parts = []
    for part in content or []:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type") == "text":
            parts.append(part.get("text", ""))
    return "".join(parts)


class GeminiChatClient:
    """Single-shot text generation against a Gemini chat model."""

    def __init__(
        self,
        model_id: str = "gemini-2.5-flash-lite",
        temperature: float = 0.3,
        timeout_seconds: float = 60.0,
        model: ChatGoogleGenerativeAI | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            model_id: Gemini model identifier
            temperature: Sampling temperature
            timeout_seconds: Upper bound for one generation call
            model: Preconfigured chat model (tests inject fakes here)
        """
        self._model_id = model_id
        self._timeout_seconds = timeout_seconds
        self._model = model or ChatGoogleGenerativeAI(
            model=model_id,
            temperature=temperature,
        )

    async def generate(self, prompt: str) -> GenerationResult:
        """
        Generate a completion for a fully assembled prompt.

        Args:
            prompt: Prompt text

        Returns:
            GenerationResult: Response text and usage metadata

        Raises:
            ModelGenerationError: On provider error or timeout
        """
        logger.info(f"{__name__}:generate - model={self._model_id}, prompt_len={len(prompt)}")
        try:
            message = await asyncio.wait_for(
                self._model.ainvoke(prompt),
                timeout=self._timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            logger.error(f"{__name__}:generate - Timed out after {self._timeout_seconds}s")
            raise ModelGenerationError(
                "Generation timed out",
                details={"model": self._model_id, "timeout_seconds": self._timeout_seconds},
            ) from e
        except Exception as e:
            logger.error(f"{__name__}:generate - {type(e).__name__}: {e}")
            raise ModelGenerationError(
                f"Generation failed: {e}",
                details={"model": self._model_id},
            ) from e

        usage = getattr(message, "usage_metadata", None)
        result = GenerationResult(
            text=_content_to_text(message.content),
            usage=dict(usage) if usage else None,
        )
        logger.info(f"{__name__}:generate - OK response_len={len(result.text)}")
        return result
