"""
Main FastAPI Application for TreeShop Ops.

Serves the pricing engine and document pipeline as a REST API.
"""
import logging

from fastapi import FastAPI

from treeshop import __version__
from treeshop.api.v1 import api_router as v1_router
from treeshop.config import get_config
from treeshop.models import init_db

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    config = get_config()
    logging.basicConfig(level=config.logging_level, format=config.logging_format)


# Initialize FastAPI app
app = FastAPI(
    title="TreeShop Ops",
    description="Pricing, cost rollups and the lead-to-invoice document pipeline",
    version=__version__,
)

app.include_router(v1_router)


# Initialize database on startup
@app.on_event("startup")
async def startup_event():
    configure_logging()
    init_db()
    logger.info(f"TreeShop Ops {__version__} started (config {get_config().path})")


@app.get("/health")
async def health_check():
    return {"status": "healthy", "version": __version__}
