"""
Test suite for TextChunker.

System role: Verification of the chunking stage
"""

import pytest

from portfolio_backend.application.chunker import TextChunker

ARTICLE = (
    "Retrieval starts with good chunks. Each chunk should carry one idea.\n\n"
    "Paragraph boundaries are the best split points. Sentences come next, "
    "then words, and only as a last resort single characters.\n\n"
    "This paragraph exists to push the text past the chunk limit so that the "
    "splitter has to make a decision about where to cut."
)


class TestTextChunker:
    """Test suite for TextChunker.chunk."""

    def test_init_should_reject_non_positive_length(self) -> None:
        with pytest.raises(ValueError):
            TextChunker(max_chunk_length=0)

    @pytest.mark.parametrize("text", ["", "   ", "\n\n\t"])
    def test_chunk_should_return_nothing_for_blank_text(self, text: str) -> None:
        assert TextChunker(100).chunk(text) == []

    def test_chunk_should_keep_short_text_whole(self) -> None:
        assert TextChunker(100).chunk("A short note.") == ["A short note."]

    def test_chunk_should_respect_max_length(self) -> None:
        # Act
        chunks = TextChunker(80).chunk(ARTICLE)

        # Assert
        assert len(chunks) > 1
        assert all(len(chunk) <= 80 for chunk in chunks)

    def test_chunk_should_be_deterministic(self) -> None:
        # Arrange
        chunker = TextChunker(60)

        # Act / Assert
        assert chunker.chunk(ARTICLE) == chunker.chunk(ARTICLE)
        assert TextChunker(60).chunk(ARTICLE) == chunker.chunk(ARTICLE)

    def test_chunk_should_preserve_order_and_content(self) -> None:
        # Act
        chunks = TextChunker(80).chunk(ARTICLE)

        # Assert
        assert chunks[0].startswith("Retrieval starts with good chunks.")
        assert "".join(chunks).replace(" ", "").replace("\n", "") == ARTICLE.replace(" ", "").replace("\n", "")

    def test_chunk_should_prefer_paragraph_boundaries(self) -> None:
        # Arrange
        text = "First paragraph here.\n\nSecond paragraph here."

        # Act
        chunks = TextChunker(30).chunk(text)

        # Assert
        assert chunks == ["First paragraph here.", "Second paragraph here."]

    def test_chunk_should_hard_cut_unbroken_text(self) -> None:
        # Act
        chunks = TextChunker(10).chunk("x" * 25)

        # Assert
        assert chunks == ["x" * 10, "x" * 10, "x" * 5]

    def test_chunk_should_accept_length_override(self) -> None:
        # Act
        chunks = TextChunker(1000).chunk("x" * 25, max_chunk_length=10)

        # Assert
        assert len(chunks) == 3
