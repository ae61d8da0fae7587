from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Hashable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

DEFAULT_BATCH_CAPACITY = 10


@dataclass
class LoadResult(Generic[V]):
    value: V | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class BatchLoader(Generic[K, V]):
    """Resolves each distinct key once, a bounded batch at a time.

    Keys inside a batch are loaded concurrently and the batch is joined before
    any of its results are handed back. Results come back in request order,
    duplicates sharing one result. A key whose load raises gets an error
    result without disturbing its siblings.
    """

    def __init__(
        self,
        load_fn: Callable[[K], Awaitable[V]],
        capacity: int = DEFAULT_BATCH_CAPACITY,
    ):
        if capacity < 1:
            raise ValueError("batch capacity must be at least 1")
        self.load_fn = load_fn
        self.capacity = capacity
        self._cache: dict[K, LoadResult[V]] = {}

    async def load_many(self, keys: Sequence[K]) -> list[LoadResult[V]]:
        pending = [key for key in dict.fromkeys(keys) if key not in self._cache]

        for start in range(0, len(pending), self.capacity):
            batch = pending[start : start + self.capacity]
            self._cache.update(await self._dispatch(batch))

        return [self._cache[key] for key in keys]

    async def load(self, key: K) -> LoadResult[V]:
        (result,) = await self.load_many([key])
        return result

    async def _dispatch(self, batch: list[K]) -> dict[K, LoadResult[V]]:
        lock = asyncio.Lock()
        result_map: dict[K, LoadResult[V]] = {}

        async def worker(key: K) -> None:
            try:
                result = LoadResult(value=await self.load_fn(key))
            except Exception as exc:
                logger.exception("Loading %r failed", key)
                result = LoadResult(error=exc)
            async with lock:
                result_map[key] = result

        logger.debug("Dispatching batch of %d keys", len(batch))
        await asyncio.gather(*(worker(key) for key in batch))
        return result_map
