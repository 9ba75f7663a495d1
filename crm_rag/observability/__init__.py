"""Logging configuration and tenant-scoped retrieval logging."""

from crm_rag.observability.logger import configure_logging, get_logger
from crm_rag.observability.log_utils import log_retrieval_event, summarize_log_value

__all__ = [
    "configure_logging",
    "get_logger",
    "log_retrieval_event",
    "summarize_log_value",
]
