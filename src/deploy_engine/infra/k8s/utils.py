"""Bridging the async cluster controllers into synchronous deployers."""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from concurrent.futures import ThreadPoolExecutor
from typing import Any


def run_sync[T](coro: Coroutine[Any, Any, T]) -> T:
    """Block until ``coro`` finishes and return its result.

    Deployers run on the calling thread while a reporter thread polls the
    cluster, and neither owns an event loop. When one is already running
    (for instance under an async test) the coroutine gets its own loop on
    a worker thread.

    Example:
        pods = run_sync(KubectlController().get_pods("env-123"))
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)

    with ThreadPoolExecutor(max_workers=1) as pool:
        return pool.submit(asyncio.run, coro).result()
