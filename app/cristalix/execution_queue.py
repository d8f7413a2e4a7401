import asyncio
from collections import deque
from typing import Any, Awaitable, Callable

from app.logger import logger

TaskFactory = Callable[[], Awaitable[Any]]


class ExecutionQueue:
    """
    Runs at most ``limit`` tasks at once, admitting the rest in FIFO order.

    ``submit`` returns a future that resolves with the task's result (or error)
    whenever the task eventually runs. The queue does not retry.
    """

    def __init__(self, limit: int = 3):
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self.limit = limit
        self.peak = 0
        self._active = 0
        self._waiting: deque[tuple[TaskFactory, asyncio.Future]] = deque()
        self._running: set[asyncio.Task] = set()

    @property
    def active(self) -> int:
        return self._active

    @property
    def pending(self) -> int:
        return len(self._waiting)

    def submit(self, factory: TaskFactory) -> asyncio.Future:
        future = asyncio.get_running_loop().create_future()
        if self._active < self.limit:
            self._start(factory, future)
        else:
            self._waiting.append((factory, future))
            logger.debug("Queue full (%d active), %d task(s) waiting", self._active, len(self._waiting))
        return future

    def _start(self, factory: TaskFactory, future: asyncio.Future) -> None:
        self._active += 1
        self.peak = max(self.peak, self._active)
        task = asyncio.create_task(self._run(factory, future))
        self._running.add(task)
        task.add_done_callback(self._running.discard)

    async def _run(self, factory: TaskFactory, future: asyncio.Future) -> None:
        try:
            result = await factory()
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as e:
            if not future.done():
                future.set_exception(e)
        else:
            if not future.done():
                future.set_result(result)
        finally:
            self._active -= 1
            self._admit_next()

    def _admit_next(self) -> None:
        while self._waiting and self._active < self.limit:
            factory, future = self._waiting.popleft()
            if future.cancelled():
                continue
            self._start(factory, future)
