"""
Retrieval event logging.

Every retrieval log line is scoped to a tenant and carries its fields as
record attributes. Values that would flood a log line (query vectors,
document id lists, long chunk text) are summarized.

Dependencies: logging (stdlib), numpy
System role: Structured logging for the retrieval path
"""

import logging
from typing import Any

import numpy as np

MAX_TEXT_LENGTH = 200
SCORE_PRECISION = 4


def summarize_log_value(value: Any, max_length: int = MAX_TEXT_LENGTH) -> Any:
    """
    Reduce a value to something that fits on one log line.

    Scores keep a fixed precision, vectors and id collections become a size,
    and long strings are truncated. Booleans, ints and None pass through.

    Args:
        value: Value to summarize
        max_length: Maximum string length before truncating

    Returns:
        Any: Loggable value
    """
    if value is None or isinstance(value, (bool, int)):
        return value
    if isinstance(value, float):
        return round(value, SCORE_PRECISION)
    if isinstance(value, np.ndarray):
        return f"vector(dim={value.size})"
    if isinstance(value, (list, tuple, set, frozenset)):
        return f"{type(value).__name__}({len(value)} items)"
    if isinstance(value, dict):
        return f"dict({len(value)} keys)"

    text = value if isinstance(value, str) else str(value)
    if len(text) > max_length:
        return text[:max_length] + f"... (truncated, {len(text)} total)"
    return text


def log_retrieval_event(
    logger: logging.Logger,
    level: int,
    message: str,
    organization_id: str,
    **fields: Any,
) -> None:
    """
    Log a tenant-scoped retrieval event.

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, etc.)
        message: Log message
        organization_id: Tenant the event belongs to
        **fields: Event attributes, summarized before logging
    """
    extra = {key: summarize_log_value(val) for key, val in fields.items()}
    extra["organization_id"] = organization_id
    logger.log(level, message, extra=extra)
