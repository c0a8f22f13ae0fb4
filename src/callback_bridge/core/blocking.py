"""
Synchronous bridge for driving adapted functions from blocking code.

Adapted functions return futures bound to a running event loop. Scripts and
other synchronous call sites can use :class:`BlockingCaller` instead of
managing a loop themselves: it keeps an anyio blocking portal alive and runs
each call inside the portal's loop.
"""

from __future__ import annotations

import asyncio
from functools import partial
from typing import Any, Callable

from anyio.from_thread import BlockingPortal, start_blocking_portal

from .logging import get_logger

LOGGER = get_logger(__name__)


async def _await_adapted(adapted: Callable[..., asyncio.Future[Any]], *args: Any, **kwargs: Any) -> Any:
    return await adapted(*args, **kwargs)


class BlockingCaller:
    """
    Run future-returning functions from synchronous code.

    Instantiate once and reuse for many calls; the portal thread lives until
    :meth:`close`.
    """

    def __init__(self) -> None:
        self._portal_cm = start_blocking_portal(backend="asyncio")
        self._portal: BlockingPortal = self._portal_cm.__enter__()
        self._closed = False

    def call(self, adapted: Callable[..., asyncio.Future[Any]], *args: Any, **kwargs: Any) -> Any:
        """
        Invoke ``adapted`` inside the portal loop and wait for its settlement.

        Returns the resolved payload or raises the rejection.
        """

        if self._closed:
            raise RuntimeError("Cannot use BlockingCaller after close()")
        return self._portal.call(partial(_await_adapted, adapted, *args, **kwargs))

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._portal_cm.__exit__(None, None, None)
        LOGGER.debug("Blocking portal closed")

    def __enter__(self) -> "BlockingCaller":
        if self._closed:
            raise RuntimeError("Cannot enter a closed BlockingCaller")
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["BlockingCaller"]
