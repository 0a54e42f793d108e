"""
Output handling classes for qfind.

This module contains the OutputMultiplexer, which funnels entries from every
root task into stdout, and the ProgressTracker used for --verbose reporting.
"""

import enum
import sys
import time
from collections import Counter
from typing import Optional, TextIO

from .models import Entry
from .state import RunState, StopReason
from .utils import format_time

# Try to use ujson for faster encoding
try:
    import ujson as json_parser
except ImportError:
    import json as json_parser


class Decision(enum.Enum):
    CONTINUE = "continue"
    # Also returned for entries dropped because the run already ended
    LIMIT_REACHED = "limit-reached"


def format_entry(entry: Entry, json_output: bool = False) -> str:
    """Render an entry as one output line."""
    if json_output:
        return json_parser.dumps(entry.to_dict())
    return entry.path


class ProgressTracker:
    """Track per-root results of a run for the --verbose summary."""

    def __init__(self, verbose: bool = False, limit: Optional[int] = None):
        self.verbose = verbose
        self.limit = limit
        self.start_time = time.time()
        self.entries_by_root = Counter()
        self.failed_roots = []

    def record_entry(self, root: Optional[str]):
        self.entries_by_root[root] += 1

    def record_failure(self, root: str):
        self.failed_roots.append(root)

    def root_started(self, root: str):
        if self.verbose:
            print(f"\r[INFO] Searching {root}", file=sys.stderr, flush=True)

    def limit_reached(self, emitted: int):
        if self.verbose:
            print(
                f"\r[INFO] Limit reached: {emitted} results (limit: {self.limit})",
                file=sys.stderr,
                flush=True,
            )

    def final_report(self, state: RunState, roots_total: int):
        """Print final summary."""
        if not self.verbose:
            return

        elapsed = time.time() - self.start_time
        for root, count in self.entries_by_root.items():
            print(f"[INFO] {root}: {count:,} results", file=sys.stderr)

        reason = state.stop_reason.value if state.stop_reason else "interrupted"
        print(
            f"[INFO] FINAL: {roots_total:,} roots | "
            f"{len(self.failed_roots):,} failed | "
            f"{state.emitted:,} results | "
            f"stopped: {reason} | "
            f"Run time: {format_time(elapsed)}",
            file=sys.stderr,
        )


class OutputMultiplexer:
    """
    Write entries from all concurrently running roots to one output stream.

    The emitted-entries counter lives in the shared RunState and is only
    touched here, under the state lock. Writing happens under the same lock,
    so every entry is printed as a whole line.
    """

    def __init__(
        self,
        state: RunState,
        limit: Optional[int] = None,
        json_output: bool = False,
        stream: Optional[TextIO] = None,
        progress: Optional[ProgressTracker] = None,
    ):
        self.state = state
        self.limit = limit
        self.json_output = json_output
        self.stream = stream
        self.progress = progress

    def write(self, entry: Entry):
        stream = self.stream or sys.stdout
        stream.write(format_entry(entry, self.json_output) + "\n")
        stream.flush()

    async def accept(self, entry: Entry, root: Optional[str] = None) -> Decision:
        """Print an entry unless the run has ended; trip the limit when it is met."""
        async with self.state.lock:
            if self.state.stopped:
                return Decision.LIMIT_REACHED

            self.state.emitted += 1
            self.write(entry)
            if self.progress:
                self.progress.record_entry(root)

            if self.limit and self.state.emitted >= self.limit:
                self.state.stop(StopReason.LIMIT_REACHED)
                if self.progress:
                    self.progress.limit_reached(self.state.emitted)
                return Decision.LIMIT_REACHED

        return Decision.CONTINUE
