"""Utility functions for the Kubernetes infrastructure layer."""

from __future__ import annotations

import asyncio
import concurrent.futures
from collections.abc import Coroutine
from typing import Any


def run_sync[T](coro: Coroutine[Any, Any, T], timeout: float | None = None) -> T:
    """Run an async coroutine in a blocking sync context.

    Args:
        coro: The coroutine to execute
        timeout: Optional limit in seconds; ``TimeoutError`` is raised when
            the coroutine takes longer

    Returns:
        The result of the coroutine
    """
    if timeout is not None:
        coro = asyncio.wait_for(coro, timeout=timeout)

    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)

    # Inside a running loop (e.g. the HTTP server), use a private loop in a thread
    with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
        return pool.submit(asyncio.run, coro).result()
