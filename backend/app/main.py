# main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.endpoints import analytics, feedback, health
from app.core.config import settings
from app.core.errors import register_error_handlers
from app.core.log_config import configure_logging
from app.db import mongo

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


# DB connect / disconnect around the app's lifetime
@asynccontextmanager
async def lifespan(app: FastAPI):
    await mongo.connect_to_mongo()
    await mongo.ensure_indexes(mongo.get_db())
    logger.info("Feedback backend started (%s)", settings.ENVIRONMENT)
    yield
    await mongo.close_mongo_connection()


app = FastAPI(title="Feedback Analytics Backend", lifespan=lifespan)

# Admin dashboard and public feedback form
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)


@app.get("/")
async def read_root():
    return {"message": "Backend is running!"}


app.include_router(health.router, prefix="/api")
app.include_router(feedback.router, prefix="/api")
app.include_router(analytics.router, prefix="/api")
