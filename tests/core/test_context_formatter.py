"""
Test suite for prompt context formatting.

System role: Verification of RAG context layout
"""

import pytest

from crm_rag.core.context_formatter import (
    BLOCK_SEPARATOR,
    CONTEXT_HEADER,
    format_rag_context,
    format_source_block,
    score_percent,
)
from crm_rag.models.retrieval import RagSource


def _source(name: str, content: str, score: float, index: int = 0) -> RagSource:
    return RagSource(
        document_id=f"id-{name}",
        document_name=name,
        chunk_content=content,
        chunk_index=index,
        score=score,
    )


class TestScorePercent:
    """Test suite for score_percent()."""

    @pytest.mark.parametrize(
        "score,expected",
        [(1.0, 100), (0.0, 0), (0.875, 88), (0.7249, 72), (0.125, 13), (0.9999, 100)],
    )
    def test_should_round_half_up(self, score: float, expected: int) -> None:
        """Test percentages are whole numbers rounded half up."""
        assert score_percent(score) == expected


class TestFormatSourceBlock:
    """Test suite for format_source_block()."""

    def test_should_render_header_and_content(self) -> None:
        """Test block header carries position, name and percentage."""
        block = format_source_block(2, _source("合約.pdf", "付款條件為 30 天", 0.8312))

        assert block == "[文件 2: 合約.pdf (相關度: 83%)]\n付款條件為 30 天"


class TestFormatRagContext:
    """Test suite for format_rag_context()."""

    def test_no_sources_should_return_empty_string(self) -> None:
        """Test empty input yields empty context."""
        assert format_rag_context([]) == ""

    def test_should_number_blocks_in_rank_order(self) -> None:
        """Test header, numbering and separators."""
        context = format_rag_context(
            [_source("a.pdf", "first", 0.95), _source("b.pdf", "second", 0.81)]
        )

        assert context == (
            f"{CONTEXT_HEADER}\n\n"
            "[文件 1: a.pdf (相關度: 95%)]\nfirst"
            f"{BLOCK_SEPARATOR}"
            "[文件 2: b.pdf (相關度: 81%)]\nsecond"
        )

    def test_single_source_should_have_no_separator(self) -> None:
        """Test separator only appears between blocks."""
        context = format_rag_context([_source("a.pdf", "only", 1.0)])

        assert BLOCK_SEPARATOR not in context
        assert context.endswith("[文件 1: a.pdf (相關度: 100%)]\nonly")
