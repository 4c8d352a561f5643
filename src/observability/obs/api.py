from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, Protocol

from ..trace.context import TraceContext
from ..trace.envelope import SpanRecord, TraceEnvelope


class ObsSink(Protocol):
    def on_event(self, record: dict[str, Any]) -> None: ...

    def on_span_end(self, record: dict[str, Any]) -> None: ...

    def on_trace_end(self, envelope: TraceEnvelope) -> None: ...


_SINK: ObsSink | None = None


def set_sink(sink: ObsSink | None) -> None:
    global _SINK
    _SINK = sink


def _span_record(trace_id: str, s: SpanRecord) -> dict[str, Any]:
    return {
        "trace_id": trace_id,
        "span_id": s.span_id,
        "parent_span_id": s.parent_span_id,
        "name": s.name,
        "status": s.status,
        "start_ts": s.start_ts,
        "end_ts": s.end_ts,
        "attrs": s.attrs,
    }


def _deliver(method: str, payload: Any) -> None:
    # A broken sink must never change the outcome of an RPC call.
    sink = _SINK
    if sink is None:
        return
    try:
        getattr(sink, method)(payload)
    except Exception:  # pragma: no cover
        return


@contextmanager
def span(name: str, attrs: dict[str, Any] | None = None) -> Iterator[SpanRecord | None]:
    """
    Create a span if a TraceContext is active; otherwise degrade to no-op.
    """
    ctx = TraceContext.current()
    if ctx is None:
        yield None
        return

    with ctx.start_span(name, attrs) as s:
        try:
            yield s
        finally:
            _deliver("on_span_end", _span_record(ctx.trace_id, s))


def event(kind: str, attrs: dict[str, Any] | None = None) -> None:
    """Emit a structured event bound to the current span if present."""
    ctx = TraceContext.current()
    if ctx is None:
        return

    ev = ctx.add_event(kind, attrs)
    cur = ctx.current_span()
    _deliver(
        "on_event",
        {
            "trace_id": ctx.trace_id,
            "span_id": cur.span_id if cur else None,
            "ts": ev.ts,
            "kind": ev.kind,
            "attrs": ev.attrs,
        },
    )


def metric(name: str, value: float | int, attrs: dict[str, Any] | None = None) -> None:
    """Record a metric as a `metric` event."""
    payload: dict[str, Any] = {"name": name, "value": value}
    if attrs:
        payload.update(attrs)
    event("metric", payload)


def publish_trace(envelope: TraceEnvelope) -> None:
    _deliver("on_trace_end", envelope)
