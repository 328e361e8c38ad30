import logging

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from ...core.errors import StoreError
from ...core.redis_manager import RedisManager
from ...services.counter import VisitCounterService

logger = logging.getLogger(__name__)

router = APIRouter()

ERROR_MESSAGE = "Error connecting to Redis"

_redis_manager = None

def get_redis_manager():
    """
    Dependency that returns a singleton instance of RedisManager
    """
    global _redis_manager
    if _redis_manager is None:
        _redis_manager = RedisManager()
    return _redis_manager

def get_visit_counter_service(
    redis_manager: RedisManager = Depends(get_redis_manager)
):
    return VisitCounterService(redis_manager)

@router.get("/", response_class=PlainTextResponse)
async def count_visit(
    counter_service: VisitCounterService = Depends(get_visit_counter_service)
):
    """
    Record a visit and report the running total

    - Opens a Redis connection for this request only
    - Increments the `visits` counter
    - Any store failure yields the same plain-text error message
    """
    try:
        count = await counter_service.record_visit()
    except StoreError as e:
        logger.error(f"Failed to record visit: {str(e)}", exc_info=e)
        return PlainTextResponse(ERROR_MESSAGE)

    return PlainTextResponse(f"Number of visits is {count.visits}")
