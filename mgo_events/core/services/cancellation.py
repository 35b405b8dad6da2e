"""
Cooperative cancellation for pipeline runs.
"""

import asyncio
from typing import Awaitable, Optional, TypeVar

from mgo_events.core.interfaces import PipelineCancelledError

T = TypeVar('T')


class CancellationToken:
    """
    Cancellation flag shared between a pipeline run and its caller.

    The pipeline checks the token between steps and races long renderer waits
    against it with ``guard()``, so a cancel aborts an in-flight wait promptly.
    """

    def __init__(self):
        self._event = asyncio.Event()
        self.reason: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "Pipeline cancelled"):
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    def raise_if_cancelled(self):
        if self.cancelled:
            raise PipelineCancelledError(self.reason or "Pipeline cancelled")

    async def guard(self, awaitable: Awaitable[T]) -> T:
        """
        Await ``awaitable`` unless the token is cancelled first.

        Raises:
            PipelineCancelledError: If the token fired before the awaitable finished
        """
        if self.cancelled:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            self.raise_if_cancelled()

        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            task.cancel()
            waiter.cancel()
            raise

        if task.done():
            waiter.cancel()
            return task.result()

        task.cancel()
        # Let the aborted operation unwind before reporting
        await asyncio.gather(task, return_exceptions=True)
        raise PipelineCancelledError(self.reason or "Pipeline cancelled")
