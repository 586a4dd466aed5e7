"""FastAPI application factory and configuration.

Main application entry point with lifespan management, middleware,
and router registration.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from born_analyst.agent.analyst import AnalystService
from born_analyst.api.routes import router as chat_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application startup and shutdown lifecycle.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the application while it runs.
    """
    logger.info("Starting Hotel The Born analysis API...")
    if not app.state.analyst.credentials.is_configured:
        logger.warning("No Gemini API key in environment; API chat endpoints will return 503")
    yield
    logger.info("Shutting down Hotel The Born analysis API...")


def create_app(analyst: AnalystService | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        analyst: Service backing the API. Built from the environment if not provided.

    Returns:
        Configured FastAPI application instance.
    """
    application = FastAPI(
        title="Hotel The Born Analysis API",
        description=(
            "Management-analysis chat for Hotel The Born backed by Google Gemini. "
            "Streams replies as Server-Sent Events and exports the conversation."
        ),
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    application.state.analyst = analyst or AnalystService()

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

    application.include_router(chat_router)

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        """Check service health status."""
        return {"status": "healthy", "service": "born-analyst"}

    return application


app = create_app()
