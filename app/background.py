"""Helpers for blocking calls and supervised background tasks.

Blocking work (wkhtmltopdf, smtplib) is pushed to the default executor with
``run_sync``. Deferred book delivery runs through ``spawn`` so failures are
logged instead of vanishing, and ``drain`` lets shutdown wait for it.
"""
import asyncio
import logging
from functools import partial
from typing import Any, Awaitable, Callable, Optional, Set

logger = logging.getLogger(__name__)

# Strong references so running tasks are not garbage collected.
_background_tasks: Set["asyncio.Task[Any]"] = set()


def spawn(coro: Awaitable[Any], *, name: Optional[str] = None) -> "asyncio.Task[Any]":
    """Schedule ``coro`` on the running loop and log its failure, if any."""
    task = asyncio.ensure_future(coro)
    if name:
        task.set_name(name)
    _background_tasks.add(task)

    def _finished(t: "asyncio.Task[Any]") -> None:
        _background_tasks.discard(t)
        if t.cancelled():
            logger.debug("Background task %s cancelled", t.get_name())
            return
        exc = t.exception()
        if exc is None:
            return
        logger.error("Background task %s failed", t.get_name(), exc_info=exc)

    task.add_done_callback(_finished)
    return task


def pending_tasks() -> int:
    return len(_background_tasks)


async def drain(timeout: Optional[float] = None) -> None:
    """Wait for every supervised task still running."""
    if not _background_tasks:
        return
    await asyncio.wait(set(_background_tasks), timeout=timeout)


async def run_sync(func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Execute blocking code in the default executor and await the result."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, partial(func, *args, **kwargs))


__all__ = ["spawn", "pending_tasks", "drain", "run_sync"]
