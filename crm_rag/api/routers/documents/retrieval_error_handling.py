"""
Retrieval error handling utilities.

Provides a decorator translating retrieval engine exceptions into
HTTPExceptions for the document search endpoints.
"""

import functools
import logging
from typing import Any, Callable, TypeVar

from fastapi import HTTPException, status

from crm_rag.core.exceptions import (
    AIFeatureDisabledError,
    AINotConfiguredError,
    ChunkStoreError,
    DocumentCatalogError,
    RetrievalTimeoutError,
    ValidationError,
)

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def handle_retrieval_errors(func: F) -> F:
    """
    Decorator to map retrieval errors to HTTP status codes.

    ValidationError, AINotConfiguredError and AIFeatureDisabledError -> 400,
    RetrievalTimeoutError -> 504,
    ChunkStoreError / DocumentCatalogError -> 503, anything else -> 500.
    """
    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)

        except HTTPException:
            raise

        except ValidationError as e:
            logger.warning("Invalid search request", extra={"error": str(e)})
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

        except (AINotConfiguredError, AIFeatureDisabledError) as e:
            logger.info("AI feature unavailable", extra={"details": e.details})
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

        except RetrievalTimeoutError as e:
            logger.warning(
                "Document search timed out",
                extra={"stage": e.stage, "timeout_seconds": e.timeout_seconds},
            )
            raise HTTPException(status_code=status.HTTP_504_GATEWAY_TIMEOUT, detail=e.message)

        except (ChunkStoreError, DocumentCatalogError) as e:
            logger.error("Document store unavailable", extra={"error": str(e)})
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)

        except Exception as e:
            logger.exception("Unexpected failure in document search", extra={"error": str(e)})
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Document search failed: {str(e)}",
            )

    return wrapper  # type: ignore
