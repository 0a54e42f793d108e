"""Shared fakes for qfind tests."""

from __future__ import annotations

import asyncio
import posixpath
from types import SimpleNamespace
from typing import Dict, Iterable, List, Optional

import aiohttp
import pytest

from qfind_modules import AsyncQumuloClient, Entry, InvalidDirectoryError, NotFoundError

DIR = "FS_FILE_TYPE_DIRECTORY"
FILE = "FS_FILE_TYPE_FILE"


def http_error(status: int, path: str = "/") -> aiohttp.ClientResponseError:
    url = f"https://cluster.test:8000/v1/files/{path}"
    request_info = SimpleNamespace(url=url, real_url=url, method="GET", headers={})
    return aiohttp.ClientResponseError(request_info, (), status=status, message="boom")


class FakeStream:
    """Entry stream that yields canned entries, optionally pausing between them."""

    def __init__(self, entries: Iterable, delay: float = 0.0):
        self.entries = list(entries)
        self.delay = delay
        self.closed = False
        self.yielded = 0

    def __aiter__(self):
        return self

    async def __anext__(self) -> Entry:
        if self.delay:
            await asyncio.sleep(self.delay)
        else:
            await asyncio.sleep(0)
        if self.closed or not self.entries:
            raise StopAsyncIteration
        item = self.entries.pop(0)
        if isinstance(item, BaseException):
            raise item
        self.yielded += 1
        return item

    async def aclose(self):
        self.closed = True


class FakeWalker:
    """Walker whose roots map to an entry list, a FakeStream or an exception."""

    def __init__(self, roots: Dict[str, object]):
        self.roots = roots
        self.streams: Dict[str, FakeStream] = {}
        self.walked: List[str] = []

    async def walk(self, root: str) -> FakeStream:
        self.walked.append(root)
        value = self.roots[root]
        if isinstance(value, BaseException):
            raise value
        stream = value if isinstance(value, FakeStream) else FakeStream(value)
        self.streams[root] = stream
        return stream


def child_entries(parent: str, names: Iterable[str], depth: int = 1, type_: str = "o") -> List[Entry]:
    return [Entry(parent=parent, name=name, type=type_, size=1, depth=depth) for name in names]


class FakeQumuloClient(AsyncQumuloClient):
    """
    In-memory Qumulo cluster.

    ``tree`` maps absolute paths to attribute dicts with at least a 'type'.
    Listing goes through the real pagination code in enumerate_directory_streaming.
    """

    def __init__(
        self,
        tree: Dict[str, dict],
        page_size: int = 1000,
        broken: Optional[Iterable[str]] = None,
        vanished: Optional[Iterable[str]] = None,
        delay: float = 0.0,
    ):
        super().__init__("cluster.test", 8000, "token")
        self.tree = tree
        self.page_size = page_size
        self.broken = set(broken or ())
        self.vanished = set(vanished or ())
        self.delay = delay
        self.listed: List[str] = []
        self.active = 0
        self.max_active = 0

    def children(self, path: str) -> List[str]:
        return sorted(p for p in self.tree if p != "/" and posixpath.dirname(p) == path)

    def attrs(self, path: str) -> dict:
        attrs = dict(self.tree[path])
        attrs.setdefault("size", "0")
        attrs["name"] = posixpath.basename(path)
        attrs["path"] = path + "/" if attrs["type"] == DIR else path
        return attrs

    async def get_file_attr(self, session, path: str) -> dict:
        if path not in self.tree:
            raise NotFoundError(path)
        return self.attrs(path)

    async def get_directory_page(self, session, path: str, limit: int = 1000, after_token=None) -> dict:
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(self.delay)
            self.listed.append(path)
            if path in self.broken:
                raise http_error(500, path)
            if path in self.vanished or path not in self.tree:
                raise NotFoundError(path)
            if self.tree[path]["type"] != DIR:
                raise InvalidDirectoryError(path)

            children = self.children(path)
            start = int(after_token or 0)
            end = start + self.page_size
            response = {
                "files": [self.attrs(child) for child in children[start:end]],
                "paging": {"next": None},
            }
            if end < len(children):
                response["paging"]["next"] = f"/v1/files/x/entries/?limit={self.page_size}&after={end}"
            return response
        finally:
            self.active -= 1


SAMPLE_TREE = {
    "/a": {"type": DIR},
    "/a/f1": {"type": FILE, "size": "10"},
    "/a/sub": {"type": DIR},
    "/a/sub/f2": {"type": FILE, "size": "2048"},
    "/a/sub/deep": {"type": DIR},
    "/a/sub/deep/f3.log": {"type": FILE, "size": "5"},
    "/b": {"type": FILE, "size": "7"},
}


@pytest.fixture
def sample_tree() -> Dict[str, dict]:
    return dict(SAMPLE_TREE)
