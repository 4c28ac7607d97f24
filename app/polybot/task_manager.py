# -*- coding: utf-8 -*-
"""
Centralized task management system for non-blocking bot operations
"""
import asyncio
import functools
from typing import Any, Awaitable, Callable, List, Sequence, Set

from loguru import logger


# Global task registry for all bot operations
_active_tasks: Set[asyncio.Task] = set()


def get_active_tasks_count() -> int:
    """Get the number of currently active background tasks"""
    return len(_active_tasks)


def non_blocking_handler(handler_name: str = "unknown"):
    """
    Decorator to run a bot handler as an independent background task.

    Every inbound update gets its own task, so a slow translation never blocks
    other updates and a failing one never affects its siblings.
    """

    def decorator(handler_func: Callable):
        @functools.wraps(handler_func)
        async def wrapper(update, context):
            task = asyncio.create_task(
                _execute_handler_task(handler_func, update, context, handler_name)
            )

            # Keep a strong reference until the task finishes
            _active_tasks.add(task)
            task.add_done_callback(_active_tasks.discard)

            logger.debug(
                f"Started non-blocking {handler_name} task (Active tasks: {len(_active_tasks)})"
            )
            return task

        return wrapper

    return decorator


async def _execute_handler_task(handler_func: Callable, update, context, handler_name: str):
    try:
        await handler_func(update, context)
        logger.debug(f"Completed {handler_name} task")
    except Exception as e:
        logger.exception(f"Error in {handler_name} handler: {e}")


async def gather_isolated(coros: Sequence[Awaitable[Any]]) -> List[Any]:
    """
    Run coroutines concurrently; a failing coroutine yields its exception
    in the result list instead of cancelling or failing the others.
    """
    results = await asyncio.gather(*coros, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            logger.error(f"Isolated task failed: {result!r}")
    return list(results)


async def wait_for_all_tasks(timeout: float = 30.0) -> bool:
    """
    Wait for all active tasks to complete, with timeout.
    Useful for graceful shutdown.

    Returns:
        True if all tasks completed, False if timeout occurred
    """
    if not _active_tasks:
        return True

    logger.info(f"Waiting for {len(_active_tasks)} active tasks to complete...")

    try:
        await asyncio.wait_for(
            asyncio.gather(*_active_tasks, return_exceptions=True), timeout=timeout
        )
        logger.info("All tasks completed successfully")
        return True

    except asyncio.TimeoutError:
        logger.warning(
            f"Timeout waiting for tasks to complete, {len(_active_tasks)} tasks still running"
        )
        return False
