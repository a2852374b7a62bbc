"""
Virtual Card Platform API Application Factory
"""

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from .cards import router as cards_router
from .system import close_card_platform
from .. import __version__


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Close the shared card platform on shutdown"""
    yield
    close_card_platform()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application"""
    app = FastAPI(
        title="Virtual Card Platform API",
        description="Virtual card balances with an append-only transaction ledger",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )

    app.include_router(cards_router, prefix="/cards", tags=["Cards"])

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "card_platform_api",
            "version": __version__
        }

    return app


app = create_app()


def run_server(host: str = "0.0.0.0", port: int = 8090, debug: bool = False):
    """Run the FastAPI server"""
    uvicorn.run(
        "card_platform.api:app",
        host=host,
        port=port,
        reload=debug,
        log_level="info"
    )
