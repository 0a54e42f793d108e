"""
Completion tracking for qfind roots.

Every root holds one token. When the last token is released the run moves
from RUNNING to DRAINING; it becomes DONE once the connection is closed.
"""

import enum
from typing import Dict, List

from .state import RunState, StopReason


class BarrierState(enum.Enum):
    RUNNING = "running"
    DRAINING = "draining"
    DONE = "done"


class CompletionBarrier:
    """Track one outstanding unit of work per root path."""

    def __init__(self, state: RunState, roots: List[str]):
        self.state = state
        self.tokens: Dict[int, str] = dict(enumerate(roots))
        self.status = BarrierState.RUNNING
        self.state.outstanding_roots = len(self.tokens)
        if not self.tokens:
            self._drain()

    def release(self, token: int):
        """Release a root's token; releasing the last one drains the run."""
        if token not in self.tokens:
            raise KeyError(f"Unknown or already released token: {token}")

        del self.tokens[token]
        self.state.outstanding_roots = len(self.tokens)
        if not self.tokens:
            self._drain()

    def _drain(self):
        self.status = BarrierState.DRAINING
        self.state.stop(StopReason.DRAINED)

    def mark_done(self):
        if self.status is BarrierState.DRAINING:
            self.status = BarrierState.DONE

    @property
    def drained(self) -> bool:
        return self.status is not BarrierState.RUNNING
