"""
Prompt context formatting.

Turns ranked sources into the text block injected into the assistant's
prompt.

Dependencies: None
System role: Context formatting for RAG prompts
"""

import math
from typing import Sequence

from crm_rag.models.retrieval import RagSource

CONTEXT_HEADER = "以下是與查詢相關的文件內容："
BLOCK_SEPARATOR = "\n\n---\n\n"


def score_percent(score: float) -> int:
    """Similarity score as a whole percentage, rounding halves up."""
    return math.floor(score * 100 + 0.5)


def format_source_block(position: int, source: RagSource) -> str:
    """
    Format one source as a headed block.

    Args:
        position: 1-based rank of the source
        source: Source to format

    Returns:
        str: "[文件 N: name (相關度: P%)]" followed by the chunk text
    """
    return (
        f"[文件 {position}: {source.document_name} (相關度: {score_percent(source.score)}%)]\n"
        f"{source.chunk_content}"
    )


def format_rag_context(sources: Sequence[RagSource]) -> str:
    """
    Build the prompt context for a list of ranked sources.

    Args:
        sources: Sources in rank order

    Returns:
        str: Header plus one block per source, or "" when there are none
    """
    if not sources:
        return ""

    blocks = [format_source_block(i, source) for i, source in enumerate(sources, 1)]
    return f"{CONTEXT_HEADER}\n\n{BLOCK_SEPARATOR.join(blocks)}"
