import asyncio
import logging
from typing import Any, Awaitable, Callable, List

logger = logging.getLogger(__name__)


async def gather_all(*aws: Awaitable) -> List[Any]:
    """
    Runs awaitables concurrently and waits for all of them.

    Fails fast: the first exception cancels the siblings that are still running,
    waits for them to unwind and is then re-raised. Results keep argument order.
    """
    if not aws:
        return []

    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
    except asyncio.CancelledError:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

    failed = [t for t in tasks if t.done() and not t.cancelled() and t.exception() is not None]
    if failed:
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        # Retrieve every exception so none is reported as never retrieved
        for task in failed[1:]:
            task.exception()
        raise failed[0].exception()

    return [t.result() for t in tasks]


def series(*steps: Callable[[], Awaitable]) -> Callable[[], Awaitable]:
    """Composes step factories that run one after another."""
    async def run():
        results = []
        for step in steps:
            results.append(await step())
        return results
    return run


def parallel(*steps: Callable[[], Awaitable]) -> Callable[[], Awaitable]:
    """Composes step factories that run concurrently behind a fail-fast join."""
    async def run():
        return await gather_all(*[step() for step in steps])
    return run
