"""
Process-wide state of one qfind run.
"""

import asyncio
import enum
from typing import Optional


class StopReason(enum.Enum):
    DRAINED = "drained"
    LIMIT_REACHED = "limit-reached"
    FATAL = "fatal"


class RunState:
    """
    Counters and flags shared by every root task.

    Updates that await (output, fatal errors, root failures) hold ``lock``.
    The barrier's token count and ``stop()`` run without it; they never
    await, so no other task can interleave. The first stop reason wins and
    later ones are ignored.
    """

    def __init__(self, outstanding_roots: int = 0):
        self.lock = asyncio.Lock()
        self.emitted = 0
        self.outstanding_roots = outstanding_roots
        self.root_failed = False
        self.last_error: Optional[BaseException] = None
        self.stop_reason: Optional[StopReason] = None
        self.finished = asyncio.Event()

    @property
    def stopped(self) -> bool:
        return self.stop_reason is not None

    def stop(self, reason: StopReason) -> bool:
        """Record why the run ends. Returns False if it had already ended."""
        if self.stop_reason is not None:
            return False
        self.stop_reason = reason
        self.finished.set()
        return True

    async def record_root_failure(self, error: BaseException):
        async with self.lock:
            self.root_failed = True

    async def record_fatal(self, error: BaseException) -> bool:
        """Abort the run. Returns False if the run had already ended."""
        async with self.lock:
            if self.stopped:
                return False
            self.last_error = error
            return self.stop(StopReason.FATAL)

    async def wait(self) -> StopReason:
        await self.finished.wait()
        return self.stop_reason

    def exit_code(self) -> int:
        if self.stop_reason is StopReason.FATAL:
            return 1
        if self.stop_reason is StopReason.LIMIT_REACHED:
            return 0
        return 1 if self.root_failed else 0
