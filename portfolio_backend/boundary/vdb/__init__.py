"""
Embedding provider boundary layer.

- FixedDimensionEmbeddings: Gemini embeddings pinned to the index dimension

Vectors are stored in PostgreSQL (pgvector); see boundary.db.CRUD.embedding_crud.

Dependencies: langchain_google_genai
System role: Embedding provider adapter for indexing and retrieval
"""

from portfolio_backend.boundary.vdb.embeddings_wrapper import FixedDimensionEmbeddings

__all__ = ["FixedDimensionEmbeddings"]
