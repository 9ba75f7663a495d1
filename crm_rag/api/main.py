"""
FastAPI application with assembled routers.

Initializes FastAPI app with all API routers and configures uvicorn server.

Dependencies: fastapi, crm_rag.api.routers, uvicorn
System role: API entry point with router assembly and server launch
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from crm_rag.application.services.retrieval_service import build_retrieval_service
from crm_rag.boundary.db.connection import get_async_engine, get_async_session_factory
from crm_rag.boundary.embeddings.feature_gate import AIFeatureGate
from crm_rag.configs import get_settings
from crm_rag.observability import configure_logging

from .routers import documents_router, health_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Builds the process-wide RetrievalService and AI feature gate on startup;
    closes provider clients and disposes the database engine on shutdown.
    """
    settings = get_settings()
    configure_logging(settings.log_level)
    logger = logging.getLogger("uvicorn")

    # Startup
    engine = get_async_engine()
    session_factory = get_async_session_factory(engine)
    app.state.retrieval_service = build_retrieval_service(settings, session_factory)
    app.state.ai_feature_gate = AIFeatureGate(session_factory)
    logger.info(
        f"{settings.service_name} ready "
        f"(cache_ttl={settings.retrieval.cache_ttl_seconds}s, "
        f"max_cached_orgs={settings.retrieval.max_cached_orgs})"
    )

    yield

    # Shutdown
    app.state.retrieval_service.retriever.cache.clear()
    await app.state.retrieval_service.provider.aclose()
    await engine.dispose()
    logger.info(f"{settings.service_name} stopped")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Returns:
        FastAPI: Configured application instance with all routers registered
    """
    app = FastAPI(
        title="CRM RAG API",
        description="Organization-scoped semantic retrieval for the CRM assistant",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register all routers with /api/v1 prefix for versioning
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(documents_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "crm_rag.api.main:app",
        host="0.0.0.0",
        port=8000,
    )
