"""
Main FastAPI application bootstrap.
Validates configuration and includes routers.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from stackcost.core.config import config
from stackcost.api.pricing import router as pricing_router, shutdown_pricing_service


logger = logging.getLogger(__name__)

# Validate configuration on startup
try:
    config.validate()
except ValueError as error:
    raise RuntimeError(f"Configuration error: {error}") from error

logger.info(
    "Price cache %s (dir=%s, namespace=%s, ttl=%ss)",
    "enabled" if config.PRICING_CACHE_ENABLED else "disabled",
    config.PRICING_CACHE_DIR,
    config.PRICING_CACHE_NAMESPACE,
    config.PRICING_CACHE_TTL_SECONDS,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await shutdown_pricing_service()


app = FastAPI(
    title="Stack Cost Estimation",
    description="Monthly cost estimates for infrastructure template resources and changes",
    lifespan=lifespan,
)

app.include_router(pricing_router)
