"""
Playtime tracking while a game is running.

Every tick re-reads seconds_run from the store and writes back the increment,
instead of keeping a counter in memory. Updates made by someone else in the
meantime survive; a tick can be lost if two writers race, which is fine for
a play-time counter.
"""
import time
import asyncio
import logging
from typing import Awaitable, Callable, Optional

from ..registry.caves_registry import CAVES

logger = logging.getLogger(__name__)

UPDATE_PLAYTIME_INTERVAL = 10  # seconds


def now_ms() -> int:
    return int(time.time() * 1000)


class PlaytimeHandle:
    """Running tracker for one cave; stop() it on every exit path"""

    def __init__(self, tracker: 'PlaytimeTracker', cave_id: str, task: asyncio.Task):
        self.tracker = tracker
        self.cave_id = cave_id
        self._task = task
        self._stopped = False

    @property
    def running(self) -> bool:
        return not self._stopped and not self._task.done()

    async def stop(self) -> None:
        """Stop ticking and record a final last_touched. Safe to call twice."""
        if self._stopped:
            return
        self._stopped = True
        self._task.cancel()
        caller_cancelled = None
        try:
            await self._task
        except asyncio.CancelledError as e:
            # Expected from the ticker, but the caller may be cancelled as well
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                caller_cancelled = e
        except Exception as e:
            logger.error(f"[Playtime] Ticker for {self.cave_id} failed: {e}")
        try:
            self.tracker.touch(self.cave_id)
        except Exception as e:
            logger.error(f"[Playtime] Could not record last_touched for {self.cave_id}: {e}")
        if caller_cancelled is not None:
            raise caller_cancelled


class PlaytimeTracker:
    """Accumulates seconds_run on a cave while it is being played"""

    def __init__(
        self,
        store,
        interval: int = UPDATE_PLAYTIME_INTERVAL,
        clock: Callable[[], int] = now_ms,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.store = store
        self.interval = interval
        self.clock = clock
        self.sleep = sleep

    def touch(self, cave_id: str) -> None:
        self.store.save_entity(CAVES, cave_id, {"last_touched": self.clock()})

    async def tick(self, cave_id: str) -> Optional[int]:
        """Add one interval to the stored play time.

        Returns:
            The new seconds_run, or None if the cave is gone
        """
        cave = self.store.get_entity(CAVES, cave_id)
        if cave is None:
            logger.warning(f"[Playtime] Cave {cave_id} disappeared, skipping tick")
            return None
        seconds_run = (cave.seconds_run or 0) + self.interval
        self.store.save_entity(CAVES, cave_id, {
            "seconds_run": seconds_run,
            "last_touched": self.clock(),
        })
        return seconds_run

    async def _run(self, cave_id: str) -> None:
        while True:
            await self.sleep(self.interval)
            try:
                await self.tick(cave_id)
            except Exception as e:
                # A failed write loses one tick, nothing more
                logger.error(f"[Playtime] Could not update play time for {cave_id}: {e}")

    def start(self, cave) -> PlaytimeHandle:
        """Start ticking for a cave on the running event loop"""
        task = asyncio.create_task(self._run(cave.id))
        logger.debug(f"[Playtime] Tracking cave {cave.id} every {self.interval}s")
        return PlaytimeHandle(self, cave.id, task)
