import logging
import re
from typing import Optional

from ..core.config import settings
from ..core.errors import CounterParseError, StoreWriteError
from ..core.redis_manager import RedisManager
from ..schemas.counter import VisitCount

logger = logging.getLogger(__name__)

# Redis stores counters as signed 64-bit integers
MAX_VISITS = 2**63 - 1

_DECIMAL = re.compile(r"[0-9]+")


def parse_visits(raw: Optional[str]) -> int:
    """
    Parse a stored counter value

    Args:
        raw: Value read from the store, None when the key is absent

    Returns:
        The counter as an int, 0 for an absent key

    Raises:
        CounterParseError: If the value is not plain ASCII decimal digits
            or does not fit in a Redis integer
    """
    if raw is None:
        return 0
    digits = raw.strip()
    if not _DECIMAL.fullmatch(digits):
        raise CounterParseError(f"Stored visit count is not an integer: {raw!r}")
    value = int(digits)
    if value > MAX_VISITS:
        raise CounterParseError(f"Stored visit count is out of range: {raw!r}")
    return value


class VisitCounterService:
    def __init__(self, redis_manager: RedisManager, atomic: Optional[bool] = None):
        """
        Increment the shared visit counter

        With atomic=False the counter is read, incremented locally and written
        back, so concurrent requests may lose updates. atomic=True uses INCR.
        """
        self.redis_manager = redis_manager
        self.atomic = settings.ATOMIC_INCREMENT if atomic is None else atomic
        self.key = settings.VISITS_KEY

    async def record_visit(self) -> VisitCount:
        """Increment the counter and return the new value"""
        async with self.redis_manager.connect() as store:
            if self.atomic:
                visits = await store.incr(self.key)
            else:
                current = parse_visits(await store.get(self.key))
                if current == MAX_VISITS:
                    raise StoreWriteError(f"Incrementing {self.key} would overflow")
                visits = current + 1
                await store.set(self.key, str(visits))

        logger.debug(f"Recorded visit {visits}")
        return VisitCount(visits=visits)
