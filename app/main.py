import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core import models as _models  # noqa: F401  registers every mapper
from app.api.v1.leaves.router import router as leaves_router
from app.core.config import settings
from app.core.logging import setup_logging

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    setup_logging()
    app = FastAPI(title="Agency Leave Backend")

    # CORS: allow frontend to call this API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(leaves_router)

    @app.get("/health", tags=["health"])
    async def health() -> dict:
        return {"status": "up"}

    logger.info("Application created")
    return app


app = create_app()
