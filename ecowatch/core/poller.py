"""
Interval-driven fetch scheduler that feeds a StateChannel
"""

import asyncio
import itertools
from typing import Any, Awaitable, Callable, Optional, Set
import logging

from .channel import StateChannel, StateUpdate
from .errors import EcoWatchError, TransportError

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_MS = 3000

FetchOnce = Callable[[], Awaitable[Any]]
Transform = Callable[[Any], Any]

_handle_ids = itertools.count(1)


class PollHandle:
    """Owned timer of one running poll loop"""

    def __init__(self, interval_ms: int):
        self.id = next(_handle_ids)
        self.interval_ms = interval_ms
        self.alive = True
        self.task: Optional[asyncio.Task] = None
        self.in_flight: Set[asyncio.Task] = set()


class Poller:
    """
    Calls a fetch function at start and then every ``interval_ms``.

    Ticks are not chained: a slow request does not delay the next tick, so
    several requests may be in flight at once. Each tick is tagged with its
    number and the channel drops results older than what it already shows.
    Once stopped, results of requests still in flight are discarded.
    """

    def __init__(
        self,
        channel: StateChannel,
        transform: Optional[Transform] = None,
        timeout: Optional[float] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        self.channel = channel
        self.transform = transform or (lambda raw: raw)
        self.timeout = timeout
        self.sleep = sleep
        self.stats = {
            "ticks_started": 0,
            "ticks_failed": 0,
            "discarded_after_stop": 0
        }

    def start(self, fetch_once: FetchOnce, interval_ms: int = DEFAULT_INTERVAL_MS) -> PollHandle:
        """Start polling; must be called from a running event loop"""
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")

        handle = PollHandle(interval_ms)
        handle.task = asyncio.create_task(self._run(handle, fetch_once))
        logger.info(f"Poller {handle.id} started for {self.channel.kind.value} every {interval_ms}ms")
        return handle

    def stop(self, handle: PollHandle):
        """Stop the timer; safe to call more than once"""
        if not handle.alive:
            return
        handle.alive = False
        if handle.task is not None:
            handle.task.cancel()
        logger.info(f"Poller {handle.id} stopped ({len(handle.in_flight)} requests still in flight)")

    async def drain(self, handle: PollHandle):
        """Wait for the loop and any in-flight ticks to settle"""
        tasks = list(handle.in_flight)
        if handle.task is not None:
            tasks.append(handle.task)
        await asyncio.gather(*tasks, return_exceptions=True)

    async def _run(self, handle: PollHandle, fetch_once: FetchOnce):
        while handle.alive:
            task = asyncio.create_task(self._tick(handle, self.channel.next_tick(), fetch_once))
            handle.in_flight.add(task)
            task.add_done_callback(handle.in_flight.discard)
            self.stats["ticks_started"] += 1
            await self.sleep(handle.interval_ms / 1000)

    async def _fetch(self, fetch_once: FetchOnce) -> Any:
        if self.timeout is None:
            return await fetch_once()
        try:
            return await asyncio.wait_for(fetch_once(), self.timeout)
        except asyncio.TimeoutError:
            raise TransportError(f"No response within {self.timeout}s")

    async def _tick(self, handle: PollHandle, tick: int, fetch_once: FetchOnce):
        data, error = None, None
        try:
            data = self.transform(await self._fetch(fetch_once))
        except EcoWatchError as e:
            error = str(e)
            logger.warning(f"Poll tick {tick} for {self.channel.kind.value} failed: {e}")
        except Exception as e:
            error = f"Unexpected error: {e}"
            logger.error(f"Poll tick {tick} for {self.channel.kind.value} crashed: {e}")

        if error is not None:
            self.stats["ticks_failed"] += 1

        if not handle.alive:
            self.stats["discarded_after_stop"] += 1
            logger.debug(f"Discarding tick {tick} of stopped poller {handle.id}")
            return

        self.channel.publish(StateUpdate(tick=tick, kind=self.channel.kind, data=data, error=error))
