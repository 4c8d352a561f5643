from __future__ import annotations

import contextvars
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterator

from .envelope import EventRecord, SpanRecord, TraceEnvelope


_CTX: contextvars.ContextVar["TraceContext | None"] = contextvars.ContextVar("trace_context", default=None)


def _now() -> float:
    return time.time()


def _new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex}"


@dataclass
class TraceContext:
    """Per-call trace: a stack of spans plus trace-level events."""

    trace_id: str
    start_ts: float
    trace_type: str = "rpc"
    _spans: list[SpanRecord] = field(default_factory=list)
    _open: list[SpanRecord] = field(default_factory=list)
    _trace_events: list[EventRecord] = field(default_factory=list)

    @classmethod
    def new(cls, trace_id: str | None = None, *, trace_type: str = "rpc") -> "TraceContext":
        return cls(trace_id=trace_id or _new_id("trace"), start_ts=_now(), trace_type=trace_type)

    @classmethod
    def current(cls) -> "TraceContext | None":
        return _CTX.get()

    @classmethod
    @contextmanager
    def activate(cls, ctx: "TraceContext") -> Iterator["TraceContext"]:
        token = _CTX.set(ctx)
        try:
            yield ctx
        finally:
            _CTX.reset(token)

    def current_span(self) -> SpanRecord | None:
        return self._open[-1] if self._open else None

    @contextmanager
    def start_span(self, name: str, attrs: dict[str, Any] | None = None) -> Iterator[SpanRecord]:
        parent = self.current_span()
        s = SpanRecord(
            span_id=_new_id("span"),
            name=name,
            parent_span_id=parent.span_id if parent else None,
            start_ts=_now(),
            attrs=dict(attrs or {}),
        )
        self._spans.append(s)
        self._open.append(s)
        try:
            yield s
        except Exception as e:
            s.status = "error"
            self.add_event("error", {"exc_type": type(e).__name__, "message": str(e)})
            raise
        finally:
            if self._open and self._open[-1] is s:
                self._open.pop()
            s.end_ts = _now()

    def add_event(self, kind: str, attrs: dict[str, Any] | None = None) -> EventRecord:
        ev = EventRecord.new(kind, attrs, ts=_now())
        cur = self.current_span()
        if cur is None:
            self._trace_events.append(ev)
        else:
            cur.events.append(ev)
        return ev

    def finish(self) -> TraceEnvelope:
        if self._open:
            self._trace_events.append(
                EventRecord(ts=_now(), kind="warn.span_leak", attrs={"open_span_count": len(self._open)})
            )
            while self._open:
                s = self._open.pop()
                s.status = "error"
                s.end_ts = _now()

        status = "error" if any(s.status == "error" for s in self._spans) else "ok"
        envelope = TraceEnvelope(
            trace_id=self.trace_id,
            trace_type=self.trace_type,
            status=status,
            start_ts=self.start_ts,
            end_ts=_now(),
            spans=list(self._spans),
            events=list(self._trace_events),
        )
        from ..obs import api as obs

        obs.publish_trace(envelope)
        return envelope
