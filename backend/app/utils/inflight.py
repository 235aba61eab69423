"""Single-flight registry for coalescing concurrent identical work.

While a coroutine for a key is running, later callers with the same key
await the same task instead of starting their own. The entry is dropped
as soon as the task finishes, so the next call after completion starts
fresh.
"""

import asyncio
from typing import Awaitable, Callable, TypeVar

T = TypeVar("T")


class InFlightRegistry:
    """Pending tasks keyed by string."""

    def __init__(self) -> None:
        self._pending: dict[str, asyncio.Task] = {}

    def __len__(self) -> int:
        return len(self._pending)

    async def run(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        task = self._pending.get(key)
        if task is None:
            task = asyncio.ensure_future(factory())
            self._pending[key] = task
            task.add_done_callback(lambda done: self._forget(key, done))
        # A cancelled waiter must not cancel the shared task
        return await asyncio.shield(task)

    def _forget(self, key: str, task: asyncio.Task) -> None:
        if self._pending.get(key) is task:
            del self._pending[key]
