# /search/async_lazy.py

import asyncio
from enum import Enum
from typing import Awaitable, Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class LazyState(Enum):
    UNBUILT = "unbuilt"
    BUILDING = "building"
    READY = "ready"
    FAILED = "failed"


class AsyncLazy(Generic[T]):
    """
    A value produced by a coroutine factory on first demand.

    The factory runs at most once. Every caller, concurrent or later, receives
    the same value or the same exception. A failed build is final.

    Waiting callers can be cancelled (or time out) without affecting the
    shared build, since they only await a shielded view of it.
    """
    def __init__(self, factory: Callable[[], Awaitable[T]]):
        self._factory = factory
        self._task: Optional[asyncio.Task] = None

    @property
    def state(self) -> LazyState:
        if self._task is None:
            return LazyState.UNBUILT
        if not self._task.done():
            return LazyState.BUILDING
        if self._task.cancelled() or self._task.exception() is not None:
            return LazyState.FAILED
        return LazyState.READY

    async def get(self, timeout: Optional[float] = None) -> T:
        if self._task is None:
            self._task = asyncio.ensure_future(self._factory())
        if timeout is None:
            return await asyncio.shield(self._task)
        return await asyncio.wait_for(asyncio.shield(self._task), timeout)
