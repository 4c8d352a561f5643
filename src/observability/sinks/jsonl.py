from __future__ import annotations

import json
import threading
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any

from ..trace.envelope import TraceEnvelope


def _to_jsonable(obj: Any) -> Any:
    if is_dataclass(obj) and not isinstance(obj, type):
        return asdict(obj)
    if isinstance(obj, Path):
        return str(obj)
    return repr(obj)


class JsonlSink:
    """
    Append-only JSONL sink: one line per finished RPC trace.

    If path_or_dir has no `.jsonl` suffix it is treated as a directory.
    """

    def __init__(self, path_or_dir: str | Path) -> None:
        p = Path(path_or_dir)
        self.path = p if p.suffix == ".jsonl" else p / "rpc_traces.jsonl"
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def write(self, envelope: TraceEnvelope) -> None:
        line = json.dumps(envelope.to_dict(), ensure_ascii=True, default=_to_jsonable)
        with self._lock, self.path.open("a", encoding="utf-8") as f:
            f.write(line + "\n")

    def on_event(self, record: dict[str, Any]) -> None:
        return

    def on_span_end(self, record: dict[str, Any]) -> None:
        return

    def on_trace_end(self, envelope: TraceEnvelope) -> None:
        self.write(envelope)
