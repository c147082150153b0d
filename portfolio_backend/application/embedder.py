"""
Gemini embedding generator.

Turns one text into one fixed-length vector. The synchronous LangChain
client runs in the threadpool under a timeout; anything short of a
correctly sized vector is an EmbeddingProviderError.

Dependencies: langchain-google-genai, fastapi.concurrency, portfolio_backend.configs
System role: Embedding generation adapter
"""

import asyncio
import logging

from fastapi.concurrency import run_in_threadpool
from langchain_core.embeddings import Embeddings

from portfolio_backend.core.exceptions import EmbeddingProviderError

logger = logging.getLogger(__name__)


class GeminiEmbedder:
    """Async embedding adapter with dimension validation."""

    def __init__(
        self,
        embeddings: Embeddings | None = None,
        model_id: str = "models/text-embedding-004",
        dimension: int = 768,
        timeout_seconds: float = 30.0,
    ) -> None:
        """
        Initialize Gemini embeddings client.

        Args:
            embeddings: LangChain embeddings implementation (defaults to FixedDimensionEmbeddings)
            model_id: Gemini embedding model ID
            dimension: Required vector length
            timeout_seconds: Upper bound for one embedding call
        """
        if embeddings is None:
            from portfolio_backend.boundary.vdb.embeddings_wrapper import FixedDimensionEmbeddings

            embeddings = FixedDimensionEmbeddings(model=model_id, output_dimensionality=dimension)
        self._embeddings = embeddings
        self.dimension = dimension
        self._timeout_seconds = timeout_seconds

    async def embed(self, text: str) -> list[float]:
        """
        Generate embedding for text.

        Args:
            text: Chunk or query text

        Returns:
            list[float]: Vector of exactly `dimension` floats

        Raises:
            EmbeddingProviderError: On provider error, timeout or wrong vector length
        """
        try:
            vector = await asyncio.wait_for(
                run_in_threadpool(self._embeddings.embed_query, text),
                timeout=self._timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            logger.error(f"{__name__}:embed - Timed out after {self._timeout_seconds}s")
            raise EmbeddingProviderError(
                "Embedding call timed out",
                details={"timeout_seconds": self._timeout_seconds},
            ) from e
        except Exception as e:
            logger.error(f"{__name__}:embed - {type(e).__name__}: {e}")
            raise EmbeddingProviderError(f"Embedding call failed: {e}") from e

        if vector is None or len(vector) != self.dimension:
            actual = None if vector is None else len(vector)
            logger.error(f"{__name__}:embed - Dimension mismatch expected={self.dimension} actual={actual}")
            raise EmbeddingProviderError(
                "Embedding has the wrong dimension",
                details={"expected": self.dimension, "actual": actual},
            )
        return [float(value) for value in vector]
