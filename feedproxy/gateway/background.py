import asyncio
import logging
from typing import Any, Callable, Dict, Set

logger = logging.getLogger("feedproxy.gateway")


class BackgroundWriter:
    """Runs blocking writes off the response path and tracks them until done.

    ``spawn`` returns immediately; ``shutdown`` waits for every outstanding
    write instead of cancelling it, so nothing scheduled before shutdown is lost.
    """

    def __init__(self):
        self.running_tasks: Set[asyncio.Task] = set()
        self._results: Dict[str, int] = {'completed': 0, 'failed': 0}
        self._shutdown = False

    def spawn(self, func: Callable, *args: Any) -> asyncio.Task:
        """Schedule ``func(*args)`` in a worker thread without awaiting it"""
        if self._shutdown:
            logger.warning("Background write scheduled after shutdown started", extra={
                'context': {
                    'function': getattr(func, '__name__', repr(func)),
                    'component': 'gateway.background'
                }
            })

        task = asyncio.create_task(self._run(func, *args))
        self.running_tasks.add(task)
        task.add_done_callback(self.running_tasks.discard)
        return task

    async def _run(self, func: Callable, *args: Any):
        try:
            await asyncio.to_thread(func, *args)
            self._results['completed'] += 1
        except Exception as e:
            # The response has already gone out, so the failure can only be logged
            self._results['failed'] += 1
            logger.error(f"Background write failed: {str(e)}", exc_info=True, extra={
                'context': {
                    'function': getattr(func, '__name__', repr(func)),
                    'component': 'gateway.background'
                }
            })

    async def drain(self):
        """Wait until every write scheduled so far has finished"""
        while self.running_tasks:
            await asyncio.gather(*list(self.running_tasks))

    async def shutdown(self):
        self._shutdown = True
        pending = len(self.running_tasks)
        if pending:
            logger.info(f"Waiting for {pending} background writes", extra={
                'context': {
                    'pending': pending,
                    'component': 'gateway.background'
                }
            })
        await self.drain()

    def get_status(self) -> Dict[str, int]:
        return {
            'pending_writes': len(self.running_tasks),
            'completed_writes': self._results['completed'],
            'failed_writes': self._results['failed'],
        }
