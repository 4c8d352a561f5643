from __future__ import annotations

import json
from pathlib import Path

from src.observability.sinks.jsonl import JsonlSink
from src.observability.trace.context import TraceContext


def _make_envelope(trace_id: str):
    ctx = TraceContext.new(trace_id)
    with TraceContext.activate(ctx):
        with ctx.start_span("rpc.dispatch"):
            ctx.add_event("rpc.request", {"method": "add"})
        return ctx.finish()


def test_jsonl_sink_write_and_append(tmp_path: Path) -> None:
    path = tmp_path / "traces.jsonl"
    sink = JsonlSink(path)

    sink.write(_make_envelope("t-1"))
    sink.on_trace_end(_make_envelope("t-2"))

    lines = path.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) == 2

    rec = json.loads(lines[0])
    assert rec["trace_id"] == "t-1"
    assert rec["spans"][0]["events"][0]["attrs"] == {"method": "add"}
    assert json.loads(lines[1])["trace_id"] == "t-2"


def test_jsonl_sink_directory_default_name(tmp_path: Path) -> None:
    sink = JsonlSink(tmp_path / "logs")
    assert sink.path == tmp_path / "logs" / "rpc_traces.jsonl"
    assert sink.path.parent.is_dir()
