"""
Text chunker for index documents.

Splits an entity's rendered text into ordered, non-overlapping chunks no
longer than the configured length. Paragraph and sentence boundaries are
preferred; words and finally characters are the fallback.

Dependencies: langchain_text_splitters
System role: Chunking stage of the indexing pipeline
"""

from langchain_text_splitters import RecursiveCharacterTextSplitter

SEPARATORS = ["\n\n", "\n", ". ", "! ", "? ", "; ", " ", ""]


class TextChunker:
    """Deterministic RecursiveCharacterTextSplitter wrapper with zero overlap."""

    def __init__(self, max_chunk_length: int = 1000) -> None:
        """
        Initialize chunker.

        Args:
            max_chunk_length: Default maximum characters per chunk

        Raises:
            ValueError: When max_chunk_length is not positive
        """
        if max_chunk_length <= 0:
            raise ValueError("max_chunk_length must be positive")
        self.max_chunk_length = max_chunk_length
        self._splitters: dict[int, RecursiveCharacterTextSplitter] = {}

    def _splitter(self, max_chunk_length: int) -> RecursiveCharacterTextSplitter:
        if max_chunk_length not in self._splitters:
            self._splitters[max_chunk_length] = RecursiveCharacterTextSplitter(
                chunk_size=max_chunk_length,
                chunk_overlap=0,
                separators=SEPARATORS,
                keep_separator="end",
                strip_whitespace=True,
                length_function=len,
            )
        return self._splitters[max_chunk_length]

    def chunk(self, text: str, max_chunk_length: int | None = None) -> list[str]:
        """
        Split text into chunks.

        Args:
            text: Rendered entity text
            max_chunk_length: Override of the default maximum length

        Returns:
            list[str]: Chunks in source order; empty for blank input
        """
        if not text or not text.strip():
            return []
        length = max_chunk_length or self.max_chunk_length
        return [piece for piece in self._splitter(length).split_text(text) if piece.strip()]
