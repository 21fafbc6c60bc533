import logging
from fastapi import APIRouter, Request

from colearn import __version__
from colearn.utils import iso_now

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/system", tags=["System"])


@router.get("/health")
async def health(request: Request):
    """
    Service status
    Store reachability plus per-key Gemini usage
    """
    record = {
        "timestamp": iso_now(),
        "version": __version__,
        "status": {},
    }

    store = request.app.state.store
    try:
        await store.get("__health__")
        record["status"]["store"] = "UP"
    except Exception as e:
        logger.warning("Store health check failed: %s", e)
        record["status"]["store"] = "DOWN"

    ai = request.app.state.ai
    record["status"]["ai"] = "UP" if ai.manager.configured else "NOT_CONFIGURED"
    record["ai_keys"] = ai.get_stats()
    return record
