import asyncio
import logging
from typing import Awaitable, Callable, Dict, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class InFlightRegistry:
    """
    At most one running call per key.

    The first caller for a key runs the work; callers arriving while it is
    still running await the same result (or exception). The key is released
    as soon as the work finishes, successfully or not.
    """

    def __init__(self):
        self._pending: Dict[str, asyncio.Future] = {}

    async def run(self, key: str, work: Callable[[], Awaitable[T]]) -> T:
        pending = self._pending.get(key)
        if pending is not None:
            logger.info("Joining in-flight extraction for %s", key)
            # Shield so a cancelled follower does not cancel the shared call
            return await asyncio.shield(pending)

        future = asyncio.get_running_loop().create_future()
        self._pending[key] = future
        try:
            result = await work()
        except Exception as e:
            future.set_exception(e)
            future.exception()  # mark retrieved when nobody else is waiting
            raise
        else:
            future.set_result(result)
            return result
        finally:
            self._pending.pop(key, None)
            if not future.done():
                future.cancel()

    def __contains__(self, key: str) -> bool:
        return key in self._pending

    def __len__(self) -> int:
        return len(self._pending)
