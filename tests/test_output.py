"""Tests for result formatting and the output multiplexer."""

from __future__ import annotations

import asyncio
import io
import json

from qfind_modules import (
    Decision,
    Entry,
    OutputMultiplexer,
    RunState,
    StopReason,
    format_entry,
)


class TestFormatEntry:
    def test_text(self) -> None:
        assert format_entry(Entry("/a", "f1", "o", 1, 1)) == "/a/f1"

    def test_text_root_itself(self) -> None:
        assert format_entry(Entry("/b", "", "o", 1, 0)) == "/b"

    def test_text_under_filesystem_root(self) -> None:
        assert format_entry(Entry("/", "etc", "d", 0, 1)) == "/etc"

    def test_json(self) -> None:
        line = format_entry(Entry("/a", "f1", "o", 42, 1), json_output=True)
        assert json.loads(line) == {
            "parent": "/a",
            "name": "f1",
            "type": "o",
            "size": 42,
            "depth": 1,
        }
        assert "\n" not in line


class TestOutputMultiplexer:
    def test_counts_and_writes(self) -> None:
        out = io.StringIO()

        async def go():
            state = RunState()
            multiplexer = OutputMultiplexer(state, stream=out)
            decisions = [
                await multiplexer.accept(Entry("/a", f"f{i}", "o", 1, 1)) for i in range(3)
            ]
            return state, decisions

        state, decisions = asyncio.run(go())
        assert decisions == [Decision.CONTINUE] * 3
        assert state.emitted == 3
        assert out.getvalue() == "/a/f0\n/a/f1\n/a/f2\n"

    def test_limit_trips_and_drops(self) -> None:
        out = io.StringIO()

        async def go():
            state = RunState()
            multiplexer = OutputMultiplexer(state, limit=2, stream=out)
            decisions = [
                await multiplexer.accept(Entry("/a", f"f{i}", "o", 1, 1)) for i in range(4)
            ]
            return state, decisions

        state, decisions = asyncio.run(go())
        assert decisions == [
            Decision.CONTINUE,
            Decision.LIMIT_REACHED,
            Decision.LIMIT_REACHED,
            Decision.LIMIT_REACHED,
        ]
        assert state.emitted == 2
        assert state.stop_reason is StopReason.LIMIT_REACHED
        assert out.getvalue().splitlines() == ["/a/f0", "/a/f1"]

    def test_concurrent_producers_never_exceed_limit(self) -> None:
        out = io.StringIO()

        async def producer(multiplexer, root):
            for i in range(100):
                if await multiplexer.accept(Entry(root, f"f{i}", "o", 1, 1)) is Decision.LIMIT_REACHED:
                    return
                await asyncio.sleep(0)

        async def go():
            state = RunState()
            multiplexer = OutputMultiplexer(state, limit=25, stream=out)
            await asyncio.gather(*(producer(multiplexer, f"/r{n}") for n in range(8)))
            return state

        state = asyncio.run(go())
        assert state.emitted == 25
        assert len(out.getvalue().splitlines()) == 25

    def test_drops_after_fatal(self) -> None:
        out = io.StringIO()

        async def go():
            state = RunState()
            multiplexer = OutputMultiplexer(state, stream=out)
            await state.record_fatal(RuntimeError("x"))
            return await multiplexer.accept(Entry("/a", "f", "o", 1, 1))

        assert asyncio.run(go()) is Decision.LIMIT_REACHED
        assert out.getvalue() == ""

    def test_defaults_to_stdout(self, capsys) -> None:
        async def go():
            await OutputMultiplexer(RunState()).accept(Entry("/a", "f", "o", 1, 1))

        asyncio.run(go())
        assert capsys.readouterr().out == "/a/f\n"
