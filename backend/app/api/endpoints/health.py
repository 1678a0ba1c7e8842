# backend/app/api/endpoints/health.py

import logging

from fastapi import APIRouter
from pymongo.errors import PyMongoError

from app.db.mongo import get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check():
    """
    Liveness plus a Mongo ping, for load balancers and monitoring.
    """
    mongo_ok = False

    try:
        await get_db().command("ping")
        mongo_ok = True
    except (PyMongoError, RuntimeError) as e:
        logger.warning("Health check: mongo unreachable: %s", e)

    return {
        "status": "ok" if mongo_ok else "degraded",
        "mongo": mongo_ok,
    }
