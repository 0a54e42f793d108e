"""
Concurrent tree walker for qfind.

TreeWalker.walk() opens one root and returns an EntryStream: an async
iterator over the matching entries below that root. Directory listings run as
background tasks, at most ``criteria.parallel`` at a time per root, and feed
a bounded queue that the stream reads from.
"""

import asyncio
import sys
from typing import List, Set

import aiohttp

from .client import AsyncQumuloClient
from .errors import InvalidDirectoryError, NotFoundError
from .filters import create_entry_filter
from .models import (
    API_DIRECTORY_TYPE,
    Entry,
    SearchCriteria,
    TYPE_DIRECTORY,
    entry_from_api,
)
from .utils import join_path, normalize_path

QUEUE_SIZE = 1000

_END = object()


class EntryStream:
    """One-shot stream of the entries found under a single root directory."""

    def __init__(self, walker: "TreeWalker", root: str):
        self.walker = walker
        self.root = root
        self.semaphore = asyncio.Semaphore(walker.criteria.parallel)
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=QUEUE_SIZE)
        self.tasks: Set[asyncio.Task] = set()
        self.pending = 0
        self.closed = False
        self.finished = False

    def start(self):
        self._spawn(self.root, 0)

    def _spawn(self, path: str, depth: int):
        if self.closed:
            return
        self.pending += 1
        task = asyncio.create_task(self._list_directory(path, depth))
        self.tasks.add(task)
        task.add_done_callback(self.tasks.discard)

    def _should_descend(self, depth: int) -> bool:
        maxdepth = self.walker.criteria.maxdepth
        return maxdepth is None or depth < maxdepth

    async def _list_directory(self, path: str, depth: int):
        child_depth = depth + 1

        async def process_page(items: List[dict]):
            for item in items:
                entry = entry_from_api(path, item, child_depth)

                if entry.type == TYPE_DIRECTORY and self._should_descend(child_depth):
                    child_path = item.get("path") or join_path(path, entry.name)
                    self._spawn(normalize_path(child_path), child_depth)

                if self.walker.entry_filter(entry):
                    await self.queue.put(entry)

        try:
            async with self.semaphore:
                await self.walker.client.enumerate_directory_streaming(
                    self.walker.session,
                    path,
                    process_page,
                    should_continue=lambda: not self.closed,
                )
        except (NotFoundError, InvalidDirectoryError) as e:
            if depth == 0:
                # The root itself went away after it was opened
                await self.queue.put(e)
                return
            # Changed underneath us since its parent was listed
            if self.walker.criteria.verbose:
                print(f"\r[WARN] Skipping {path}: {e}", file=sys.stderr)
        except Exception as e:
            await self.queue.put(e)
            return

        self.pending -= 1
        if self.pending == 0:
            await self.queue.put(_END)

    def __aiter__(self):
        return self

    async def __anext__(self) -> Entry:
        if self.finished:
            raise StopAsyncIteration

        item = await self.queue.get()
        if item is _END:
            self.finished = True
            raise StopAsyncIteration
        if isinstance(item, BaseException):
            self.finished = True
            raise item
        return item

    async def aclose(self):
        """Stop listing and wait for every outstanding listing task to exit."""
        self.closed = True
        self.finished = True
        tasks = list(self.tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()


class TreeWalker:
    """Open roots on a Qumulo cluster and stream the entries beneath them."""

    def __init__(
        self,
        client: AsyncQumuloClient,
        session: aiohttp.ClientSession,
        criteria: SearchCriteria,
    ):
        self.client = client
        self.session = session
        self.criteria = criteria
        self.entry_filter = create_entry_filter(criteria)

    async def walk(self, root: str) -> EntryStream:
        """
        Start walking ``root``.

        Raises:
            NotFoundError: If the root does not exist
            InvalidDirectoryError: If the root is not a directory; the error
                carries an Entry describing the root itself
        """
        path = normalize_path(root)
        attrs = await self.client.get_file_attr(self.session, path)

        if attrs.get("type") != API_DIRECTORY_TYPE:
            entry = entry_from_api(root, attrs, 0)._replace(name="")
            raise InvalidDirectoryError(root, entry)

        stream = EntryStream(self, path)
        stream.start()
        return stream
