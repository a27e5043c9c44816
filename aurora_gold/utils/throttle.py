# -*- coding: utf-8 -*-
"""
Request throttle queue for outbound LLM calls.

One queue per owning service. A single worker task drains jobs in FIFO
order and keeps at least ``min_interval`` seconds between dispatches.
Enqueueing while a drain is running only appends to the queue.

    Idle ──enqueue──▶ Draining ──queue empty──▶ Idle
"""
from __future__ import annotations

import asyncio
import time
from collections import deque
from typing import Any, Awaitable, Callable, Deque, Optional, Tuple

from aurora_gold.utils.logger import get_logger

logger = get_logger(__name__)

Job = Callable[[], Awaitable[Any]]


class ThrottleQueue:

    def __init__(
        self,
        min_interval: float,
        name:         str = "llm",
        clock:        Callable[[], float] = time.monotonic,
    ):
        self.min_interval      = min_interval
        self.name              = name
        self._clock            = clock
        self.last_request_time: Optional[float] = None
        self._pending: Deque[Tuple[Job, asyncio.Future]] = deque()
        self._processing       = False
        self._worker: Optional[asyncio.Task] = None

    @property
    def processing(self) -> bool:
        return self._processing

    @property
    def pending(self) -> int:
        return len(self._pending)

    def seconds_since_last(self) -> Optional[float]:
        if self.last_request_time is None:
            return None
        return self._clock() - self.last_request_time

    def ready(self) -> bool:
        """True when a call dispatched now would not need to wait."""
        elapsed = self.seconds_since_last()
        return elapsed is None or elapsed >= self.min_interval

    async def enqueue(self, job: Job) -> Any:
        """Queue ``job`` and wait for its result (or its exception)."""
        loop   = asyncio.get_running_loop()
        future = loop.create_future()
        self._pending.append((job, future))

        if not self._processing:
            self._processing = True
            self._worker = loop.create_task(self._drain())

        return await future

    async def _drain(self) -> None:
        try:
            while self._pending:
                elapsed = self.seconds_since_last()
                if elapsed is not None and elapsed < self.min_interval:
                    wait = self.min_interval - elapsed
                    logger.debug("[%s] throttling %.2fs before next call", self.name, wait)
                    await asyncio.sleep(wait)

                job, future = self._pending.popleft()
                self.last_request_time = self._clock()
                try:
                    result = await job()
                except Exception as e:
                    if not future.done():
                        future.set_exception(e)
                else:
                    if not future.done():
                        future.set_result(result)
        finally:
            self._processing = False
            self._worker = None
