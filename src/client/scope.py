"""
Lifetime scope for the asynchronous work started by one view.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Set

logger = logging.getLogger(__name__)


class ScopeClosedError(RuntimeError):
    """Work was submitted to a scope that has already been closed."""


class ViewScope:
    """
    Owns every task a view starts and cancels them on teardown.

    - spawn()/run() schedule coroutines inside the scope
    - call_soon() schedules callbacks that are dropped once closed
    - close() cancels whatever is still running

    Example:
        async with ViewScope("ticket-detail") as scope:
            controller = TicketDetailController(api, session, ticket_id, scope)
            await controller.load()
    """

    def __init__(self, name: str = "view"):
        self.name = name
        self._tasks: Set[asyncio.Task] = set()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        return sum(1 for task in self._tasks if not task.done())

    async def __aenter__(self) -> "ViewScope":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def spawn(self, coro: Awaitable) -> asyncio.Task:
        """
        Start a coroutine as a task owned by this scope.

        Raises:
            ScopeClosedError: If the scope is closed (the coroutine is discarded)
        """
        if self._closed:
            coro.close()
            raise ScopeClosedError(f"Scope '{self.name}' is closed")

        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def run(self, coro: Awaitable) -> Any:
        """Run a coroutine inside the scope and wait for its result."""
        return await self.spawn(coro)

    def call_soon(self, callback: Callable, *args) -> Optional[asyncio.Handle]:
        """
        Schedule a callback; it is dropped if the scope closes first.

        Outside a running event loop the callback runs immediately.
        """
        if self._closed:
            return None
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            callback(*args)
            return None
        return loop.call_soon(self._invoke, callback, args)

    def _invoke(self, callback: Callable, args: tuple) -> None:
        if not self._closed:
            callback(*args)

    async def close(self) -> None:
        """Cancel outstanding tasks and wait until they have finished."""
        if self._closed:
            return
        self._closed = True

        current = asyncio.current_task()
        tasks = [task for task in self._tasks if task is not current and not task.done()]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.debug(f"Scope '{self.name}' cancelled {len(tasks)} task(s)")
