# streamrent/core/tasks.py
import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def discard_result(task: asyncio.Task) -> None:
    """
    Drop the outcome of a finished task whose result nobody wants anymore.

    Used as a done-callback for the losing branch of a race. Retrieving the
    exception keeps asyncio from reporting it as never retrieved.
    """
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug("Late result discarded (error): %r", exc)
    else:
        logger.debug("Late result discarded")


async def first_completed(
    aw: Awaitable[T],
    timeout: float,
) -> asyncio.Task[T] | None:
    """
    Race `aw` against a timeout.

    Returns:
        The finished task if `aw` settled within `timeout` seconds
        (call `.result()` on it; it may raise), or None if the timeout won.

    The slower branch is NOT cancelled: when the timeout wins, the task keeps
    running to completion and its result is discarded.
    """
    task = asyncio.ensure_future(aw)
    done, _ = await asyncio.wait({task}, timeout=timeout)
    if task in done:
        return task

    task.add_done_callback(discard_result)
    return None
