"""FastAPI application entry point."""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.dependencies import get_ranking_service
from .api.router import api_router
from .config import get_settings
from .core.logging import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load saved preferences on startup, release clients on shutdown."""
    settings = get_settings()
    logger = setup_logging()
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")

    service = get_ranking_service()
    state = await service.initialize()
    logger.info(f"Selected category {state.category_id}, cache directory '{settings.cache_dir}'")

    yield

    logger.info("Shutting down, closing Torn API client and preferences store")
    await service.close()


def create_app() -> FastAPI:
    """Build the application with CORS and the API router."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Ranked, filterable and cached views over Torn companies",
        lifespan=lifespan,
    )

    # The UI runs on its own dev server
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "X-API-Key"],
    )

    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get("/")
    async def root():
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "docs": app.docs_url,
            "api": settings.api_prefix,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("company_ranker.main:app", host="127.0.0.1", port=8000)
