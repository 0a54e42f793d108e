"""
Multi-root search orchestration for qfind.

One task per root path opens a stream from the walker and forwards its
entries to the OutputMultiplexer. The run ends when every root has finished,
when the result limit is met, or when a root fails with a fatal error;
whichever happens first decides the exit code.
"""

import asyncio
import sys
import traceback
from typing import Awaitable, Callable, List, Optional, TextIO

import aiohttp

from .barrier import CompletionBarrier
from .errors import ErrorClass, NotFoundError, classify_error
from .models import Entry, SearchCriteria, TYPE_OBJECT
from .output import Decision, OutputMultiplexer, ProgressTracker
from .state import RunState
from .utils import format_http_error


def describe_error(error: BaseException, path: str, debug: bool = False) -> str:
    """One-line description of a root's failure, or its traceback in debug mode."""
    if debug:
        return "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        ).rstrip()
    if isinstance(error, aiohttp.ClientResponseError):
        return format_http_error(error.status, str(error.request_info.url), path)
    return str(error) or type(error).__name__


class SearchOrchestrator:
    """Run one walker stream per root path and multiplex their results."""

    def __init__(
        self,
        walker,
        criteria: SearchCriteria,
        command: str = "qfind",
        stream: Optional[TextIO] = None,
        err_stream: Optional[TextIO] = None,
        debug: bool = False,
        closer: Optional[Callable[[], Awaitable]] = None,
    ):
        self.walker = walker
        self.criteria = criteria
        self.command = command
        self.err_stream = err_stream
        self.debug = debug
        self.closer = closer

        self.state = RunState()
        self.progress = ProgressTracker(verbose=criteria.verbose, limit=criteria.limit)
        self.multiplexer = OutputMultiplexer(
            self.state,
            limit=criteria.limit,
            json_output=criteria.json_output,
            stream=stream,
            progress=self.progress,
        )
        self.barrier: Optional[CompletionBarrier] = None

    def report(self, root: str, error: BaseException):
        print(
            f"{self.command}: in {root}: {describe_error(error, root, self.debug)}",
            file=self.err_stream or sys.stderr,
            flush=True,
        )

    async def run(self, roots: List[str]) -> int:
        """Search every root and return the process exit code."""
        if not roots:
            raise ValueError("At least one root path is required")

        self.barrier = CompletionBarrier(self.state, roots)
        tasks = [
            asyncio.create_task(self.run_root(token, root))
            for token, root in enumerate(roots)
        ]

        try:
            await self.state.wait()
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            if self.closer:
                await self.closer()
            self.barrier.mark_done()
            self.progress.final_report(self.state, len(roots))

        return self.state.exit_code()

    async def run_root(self, token: int, root: str):
        self.progress.root_started(root)

        try:
            stream = await self.walker.walk(root)
        except Exception as e:
            await self.handle_open_error(token, root, e)
            return

        try:
            async for entry in stream:
                decision = await self.multiplexer.accept(entry, root)
                if decision is Decision.LIMIT_REACHED:
                    return
        except NotFoundError as e:
            # Only raised when the root vanished between opening and listing
            await self.handle_open_error(token, root, e)
            return
        except Exception as e:
            await self.fail(root, e)
            return
        finally:
            await stream.aclose()

        self.barrier.release(token)

    async def handle_open_error(self, token: int, root: str, error: Exception):
        kind = classify_error(error)

        if kind is ErrorClass.LEAF_ROOT:
            entry = getattr(error, "entry", None) or Entry(
                parent=root, name="", type=TYPE_OBJECT, size=0, depth=0
            )
            await self.multiplexer.accept(entry._replace(name=""), root)
            self.barrier.release(token)
        elif kind is ErrorClass.MISSING_ROOT:
            self.report(root, error)
            self.progress.record_failure(root)
            await self.state.record_root_failure(error)
            self.barrier.release(token)
        else:
            await self.fail(root, error)

    async def fail(self, root: str, error: BaseException):
        if await self.state.record_fatal(error):
            self.report(root, error)
