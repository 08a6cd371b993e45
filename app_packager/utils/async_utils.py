# app_packager/utils/async_utils.py
"""Asynchronous operation utilities"""

import asyncio
import concurrent.futures
import functools
import threading
from typing import Any, Callable, Coroutine, Optional, TypeVar

T = TypeVar('T')


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """
    Run async coroutine in sync context

    Args:
        coro: Coroutine to run

    Returns:
        Coroutine result
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        loop = None

    if loop and loop.is_running():
        # Already in async context, run on a fresh loop in another thread
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as executor:
            return executor.submit(asyncio.run, coro).result()

    return asyncio.run(coro)


async def run_cancellable(func: Callable[..., T],
                          *args,
                          executor: Optional[concurrent.futures.Executor] = None,
                          **kwargs) -> T:
    """
    Run a blocking function on an executor with cooperative cancellation

    ``func`` must accept a ``cancel_event`` keyword. When the awaiting task
    is cancelled the event is set, so the blocking call stops at its next
    checkpoint.

    Args:
        func: Blocking function
        *args: Function arguments
        executor: Executor to run on, the loop default if None
        **kwargs: Function keyword arguments

    Returns:
        Function result
    """
    cancel_event = threading.Event()
    loop = asyncio.get_running_loop()
    call = functools.partial(func, *args, cancel_event=cancel_event, **kwargs)
    try:
        return await loop.run_in_executor(executor, call)
    except asyncio.CancelledError:
        cancel_event.set()
        raise


def sync_to_async(func: Callable[..., T]) -> Callable[..., Coroutine[Any, Any, T]]:
    """
    Decorator to convert sync function to async

    Args:
        func: Sync function

    Returns:
        Async wrapper function
    """

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(func, *args, **kwargs))

    return wrapper
