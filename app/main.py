from contextlib import asynccontextmanager
from fastapi import FastAPI
import logging

from app.api.analytics import router as analytics_router
from app.api.health import router as health_router
from app.api.videos import router as videos_router
from core.db import init_db_schema
from core.logging import setup_json_logging
from service.health_service import VERSION

# Setup logging
setup_json_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db_schema()
    yield


app = FastAPI(title="Video Tracker API", version=VERSION, lifespan=lifespan)

# Include routers
app.include_router(health_router)  # Health at root level
app.include_router(videos_router, prefix="/api/v1")
app.include_router(analytics_router, prefix="/api/v1")
