"""Tests for utility helpers."""

from __future__ import annotations

import pytest

from qfind_modules import (
    entry_from_api,
    extract_pagination_token,
    format_http_error,
    format_time,
    join_path,
    normalize_path,
    parse_size_to_bytes,
)


class TestParseSize:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("0", 0),
            ("1024", 1024),
            ("10B", 10),
            ("100MB", 100_000_000),
            ("1.5GiB", 1_610_612_736),
            ("2kib", 2048),
        ],
    )
    def test_valid(self, text: str, expected: int) -> None:
        assert parse_size_to_bytes(text) == expected

    @pytest.mark.parametrize("text", ["", "MB", "-5", "12XB"])
    def test_invalid(self, text: str) -> None:
        with pytest.raises(ValueError):
            parse_size_to_bytes(text)


class TestPaths:
    def test_normalize(self) -> None:
        assert normalize_path("a/b/") == "/a/b"
        assert normalize_path("/") == "/"
        assert normalize_path("//") == "/"
        assert normalize_path("/a") == "/a"

    def test_join(self) -> None:
        assert join_path("/a", "f") == "/a/f"
        assert join_path("/", "f") == "/f"
        assert join_path("/a/", "f") == "/a/f"
        assert join_path("/a", "") == "/a"


class TestPaginationToken:
    def test_next_page(self) -> None:
        response = {"paging": {"next": "/v1/files/%2Fa/entries/?limit=1000&after=abc123"}}
        assert extract_pagination_token(response) == "abc123"

    def test_last_page(self) -> None:
        assert extract_pagination_token({"paging": {"next": None}}) is None
        assert extract_pagination_token({"files": []}) is None


class TestFormatting:
    def test_format_time(self) -> None:
        assert format_time(5.2) == "5.2s"
        assert format_time(72.3) == "1m 12s (72.3s)"
        assert format_time(3665.7) == "1h 1m 5s (3665.7s)"

    def test_known_http_error(self) -> None:
        message = format_http_error(401, "https://qumulo.test:8000/v1/files/x")
        assert message.startswith("Authentication failed (401 Unauthorized).")
        assert "qq --host qumulo.test login" in message

    def test_unknown_http_error(self) -> None:
        assert format_http_error(418, "https://h/x") == "HTTP 418: https://h/x"


class TestEntryFromApi:
    def test_directory(self) -> None:
        entry = entry_from_api("/a", {"name": "sub", "type": "FS_FILE_TYPE_DIRECTORY", "size": "0"}, 1)
        assert (entry.name, entry.type, entry.size, entry.depth) == ("sub", "d", 0, 1)

    def test_other_types_are_objects(self) -> None:
        for api_type in ("FS_FILE_TYPE_FILE", "FS_FILE_TYPE_SYMLINK"):
            assert entry_from_api("/a", {"name": "x", "type": api_type}, 1).type == "o"

    def test_bad_size(self) -> None:
        assert entry_from_api("/a", {"name": "x", "size": "n/a"}, 1).size == 0
