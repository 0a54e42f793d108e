"""
Utility functions for qfind.

This module contains general-purpose helpers for formatting, parsing,
path handling and HTTP error reporting.
"""

import re
from typing import Optional
from urllib.parse import urlparse, parse_qs


def format_http_error(status: int, url: str, path: Optional[str] = None, host: Optional[str] = None) -> str:
    """Format HTTP error with helpful context and suggestions."""
    if not host:
        try:
            parsed = urlparse(url)
            host = parsed.hostname or "<cluster>"
        except ValueError:
            host = "<cluster>"

    error_messages = {
        401: (
            "Authentication failed (401 Unauthorized)",
            f"Your credentials may have expired. Run: qq --host {host} login"
        ),
        403: (
            "Access denied (403 Forbidden)",
            f"You don't have permission to access: {path or url}"
        ),
        429: (
            "Too many requests (429)",
            "The cluster is rate-limiting requests. Try reducing --parallel"
        ),
        500: (
            "Internal server error (500)",
            "The cluster encountered an error. Contact Qumulo support if this persists"
        ),
        503: (
            "Service unavailable (503)",
            "The cluster is temporarily unavailable. Please try again later"
        )
    }

    if status in error_messages:
        title, suggestion = error_messages[status]
        return f"{title}. {suggestion}"
    return f"HTTP {status}: {url}"


def extract_pagination_token(api_response: dict) -> Optional[str]:
    """Extract the pagination token from a directory listing response."""
    next_url = api_response.get("paging", {}).get("next")
    if not next_url:
        return None

    query_params = parse_qs(urlparse(next_url).query)
    if "after" in query_params:
        return query_params["after"][0]
    return None


def parse_size_to_bytes(size_str: str) -> int:
    """Parse size string (e.g., '100', '100MB', '1.5GiB') to bytes."""
    match = re.match(r"^([0-9]+\.?[0-9]*)([A-Za-z]*)$", size_str.strip())
    if not match:
        raise ValueError(f"Invalid size format: {size_str}")

    size_num = float(match.group(1))
    size_unit = match.group(2).lower()

    multipliers = {
        "": 1,
        "b": 1,
        "kb": 1000,
        "mb": 1000000,
        "gb": 1000000000,
        "tb": 1000000000000,
        "pb": 1000000000000000,
        "kib": 1024,
        "mib": 1048576,
        "gib": 1073741824,
        "tib": 1099511627776,
        "pib": 1125899906842624,
    }

    if size_unit not in multipliers:
        raise ValueError(f"Unknown size unit: {size_unit}")

    return int(size_num * multipliers[size_unit])


def format_time(seconds: float) -> str:
    """
    Format elapsed time in human-friendly format with total seconds.

    Examples:
        5.2s -> 5.2s
        72.3s -> 1m 12s (72.3s)
        3665.7s -> 1h 1m 5s (3665.7s)
    """
    total_seconds = seconds

    if seconds < 60:
        return f"{seconds:.1f}s"

    hours = int(seconds // 3600)
    seconds = seconds % 3600
    minutes = int(seconds // 60)
    secs = int(seconds % 60)

    parts = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if secs > 0 or not parts:
        parts.append(f"{secs}s")

    friendly = " ".join(parts)
    return f"{friendly} ({total_seconds:.1f}s)"


def normalize_path(path: str) -> str:
    """Make a path absolute and drop any trailing slash (except for '/')."""
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1:
        path = path.rstrip("/") or "/"
    return path


def join_path(parent: str, name: Optional[str]) -> str:
    """Join a parent path and a child name without doubling the separator."""
    if not name:
        return parent
    if parent.endswith("/"):
        return f"{parent}{name}"
    return f"{parent}/{name}"
