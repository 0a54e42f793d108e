"""
Async Qumulo API client for qfind.

This module contains the AsyncQumuloClient class for reading directory
listings and file attributes from the Qumulo REST API using async/await.
"""

import asyncio
import ssl
from typing import Awaitable, Callable, List, Optional
from urllib.parse import quote

import aiohttp

from .errors import InvalidDirectoryError, NotFoundError
from .utils import extract_pagination_token, normalize_path

PAGE_SIZE = 1000

NOT_FOUND_ERROR_CLASSES = {"fs_no_such_entry_error", "fs_no_such_path_error"}
NOT_A_DIRECTORY_ERROR_CLASS = "fs_not_a_directory_error"


class AsyncQumuloClient:
    """Async Qumulo API client using aiohttp with optimized connection pooling."""

    def __init__(
        self,
        host: str,
        port: int,
        bearer_token: str,
        connector_limit: int = 100,
        verbose: bool = False,
    ):
        self.host = host
        self.port = port
        self.base_url = f"https://{host}:{port}"
        self.verbose = verbose

        # Create SSL context that doesn't verify certificates (for self-signed certs)
        self.ssl_context = ssl.create_default_context()
        self.ssl_context.check_hostname = False
        self.ssl_context.verify_mode = ssl.CERT_NONE

        self.connector_limit = connector_limit

        self.headers = {
            "accept": "application/json",
            "Authorization": f"Bearer {bearer_token}",
        }

    def create_session(self, connect_timeout: int = 30) -> aiohttp.ClientSession:
        """Create optimized ClientSession with connection pooling and timeouts."""
        connector = aiohttp.TCPConnector(
            limit=self.connector_limit,
            limit_per_host=self.connector_limit,
            ttl_dns_cache=300,
            ssl=self.ssl_context,
        )
        # Fail fast on unreachable hosts, but allow long listings
        timeout = aiohttp.ClientTimeout(
            total=None,
            connect=connect_timeout,
            sock_connect=connect_timeout,
            sock_read=60,
        )
        return aiohttp.ClientSession(
            connector=connector,
            headers=self.headers,
            timeout=timeout
        )

    async def test_connection(self, timeout: int = 10) -> bool:
        """
        Test basic TCP connectivity to the cluster (no auth required).

        Raises:
            asyncio.TimeoutError: If connection times out
            OSError: If connection refused or host unreachable
        """
        _, writer = await asyncio.wait_for(
            asyncio.open_connection(self.host, self.port, ssl=self.ssl_context),
            timeout=timeout
        )
        writer.close()
        await writer.wait_closed()
        return True

    def files_url(self, path: str, suffix: str) -> str:
        encoded_path = quote(normalize_path(path), safe="")
        return f"{self.base_url}/v1/files/{encoded_path}/{suffix}"

    async def raise_for_status(self, response: aiohttp.ClientResponse, path: str):
        """
        Translate an error response into a walker error.

        Missing paths raise NotFoundError, listing a non-directory raises
        InvalidDirectoryError and anything else raises ClientResponseError.
        """
        if response.status < 400:
            return

        error_class = None
        try:
            detail = await response.json(content_type=None)
            if isinstance(detail, dict):
                error_class = detail.get("error_class")
        except (aiohttp.ClientError, ValueError):
            pass

        if response.status == 404 or error_class in NOT_FOUND_ERROR_CLASSES:
            raise NotFoundError(path)
        if error_class == NOT_A_DIRECTORY_ERROR_CLASS:
            raise InvalidDirectoryError(path)
        response.raise_for_status()

    async def get_file_attr(self, session: aiohttp.ClientSession, path: str) -> dict:
        """
        Get file attributes ('name', 'type', 'size', ...) using the v1 attributes API.

        Raises:
            NotFoundError: If the path does not exist
            aiohttp.ClientResponseError: On any other HTTP failure
        """
        url = self.files_url(path, "info/attributes")
        async with session.get(url, ssl=self.ssl_context) as response:
            await self.raise_for_status(response, path)
            return await response.json()

    async def get_directory_page(
        self,
        session: aiohttp.ClientSession,
        path: str,
        limit: int = PAGE_SIZE,
        after_token: Optional[str] = None,
    ) -> dict:
        """
        Fetch a single page of directory contents.

        Args:
            session: aiohttp ClientSession
            path: Directory path
            limit: Maximum entries per page
            after_token: Pagination token from previous response

        Returns:
            Dictionary containing 'files' and 'paging' metadata
        """
        url = self.files_url(path, "entries/")

        params = {"limit": limit}
        if after_token:
            params["after"] = after_token

        async with session.get(url, params=params, ssl=self.ssl_context) as response:
            await self.raise_for_status(response, path)
            return await response.json()

    async def enumerate_directory_streaming(
        self,
        session: aiohttp.ClientSession,
        path: str,
        callback: Callable[[List[dict]], Awaitable[None]],
        should_continue: Optional[Callable[[], bool]] = None,
    ) -> int:
        """
        Stream directory entries page by page without accumulating them.

        Args:
            session: aiohttp ClientSession
            path: Directory path
            callback: Async function that receives the list of entries of each page
            should_continue: Optional callable that returns False to stop early

        Returns:
            Total number of entries processed
        """
        total_entries = 0
        after_token = None

        while True:
            if should_continue and not should_continue():
                break

            response = await self.get_directory_page(
                session, path, limit=PAGE_SIZE, after_token=after_token
            )

            files = response.get("files", [])
            total_entries += len(files)

            if files:
                await callback(files)

            after_token = extract_pagination_token(response)
            if not after_token:
                break

        return total_entries
