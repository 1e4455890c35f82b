import asyncio
from collections.abc import Awaitable, Callable, Iterable
from typing import TypeVar

from osrs_icons.config.logger_config import logger

T = TypeVar("T")


def _drain(task: asyncio.Task) -> None:
    if not task.cancelled() and task.exception() is not None:
        logger.debug("Task finished after the pool had already failed: {}", task.exception())


async def limit_concurrency(factories: Iterable[Callable[[], Awaitable[T]]], limit: int) -> list[T]:
    """Run task factories with at most ``limit`` of them in flight.

    Results are collected in completion order, not submission order. The first
    failure propagates to the caller and no further factory is started; tasks
    already running are left to finish.
    """
    if limit < 1:
        raise ValueError(f"Concurrency limit must be positive, got {limit}")

    results: list[T] = []
    queued = iter(factories)
    running: set[asyncio.Task] = set()

    async def _run(factory: Callable[[], Awaitable[T]]) -> None:
        results.append(await factory())

    def _fill() -> None:
        while len(running) < limit:
            factory = next(queued, None)
            if factory is None:
                return
            running.add(asyncio.ensure_future(_run(factory)))

    _fill()
    while running:
        done, _ = await asyncio.wait(running, return_when=asyncio.FIRST_COMPLETED)
        running.difference_update(done)

        errors = [task.exception() for task in done if task.exception() is not None]
        if errors:
            for task in running:
                task.add_done_callback(_drain)
            raise errors[0]
        _fill()

    return results
