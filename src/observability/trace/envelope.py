from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


JsonDict = dict[str, Any]

TRACE_SCHEMA_VERSION = "trace.v1"
SPAN_PREFIX = "rpc."

# Finite event kinds emitted by the dispatcher and transports.
ALLOWED_EVENT_KINDS: set[str] = {
    "rpc.request",
    "rpc.invalid",
    "rpc.fault",
    "rpc.result",
    "transport.encode_error",
    "metric",
    "error",
    "warn.span_leak",
}


def _normalize_event_kind(kind: str, *, strict: bool) -> str:
    k = (kind or "").strip()
    if strict and k not in ALLOWED_EVENT_KINDS:
        raise ValueError(f"invalid event.kind: {kind!r}")
    return k


def _validate_span_name(name: str, *, strict: bool) -> None:
    if strict and not name.startswith(SPAN_PREFIX):
        raise ValueError(f"invalid span.name (must start with {SPAN_PREFIX!r}): {name!r}")


@dataclass(frozen=True)
class EventRecord:
    ts: float
    kind: str
    attrs: JsonDict = field(default_factory=dict)

    @classmethod
    def new(cls, kind: str, attrs: JsonDict | None = None, *, ts: float = 0.0, strict: bool = False) -> "EventRecord":
        return cls(ts=ts, kind=_normalize_event_kind(kind, strict=strict), attrs=dict(attrs or {}))

    def to_dict(self) -> JsonDict:
        return {"ts": self.ts, "kind": self.kind, "attrs": self.attrs}


@dataclass
class SpanRecord:
    span_id: str
    name: str
    parent_span_id: str | None
    start_ts: float
    end_ts: float | None = None
    status: str = "ok"  # ok|error
    attrs: JsonDict = field(default_factory=dict)
    events: list[EventRecord] = field(default_factory=list)

    @property
    def duration_ms(self) -> float | None:
        if self.end_ts is None:
            return None
        return (self.end_ts - self.start_ts) * 1000.0

    def to_dict(self) -> JsonDict:
        return {
            "span_id": self.span_id,
            "name": self.name,
            "parent_span_id": self.parent_span_id,
            "start_ts": self.start_ts,
            "end_ts": self.end_ts,
            "status": self.status,
            "attrs": self.attrs,
            "events": [e.to_dict() for e in self.events],
        }


@dataclass
class TraceEnvelope:
    trace_id: str
    start_ts: float
    end_ts: float
    trace_type: str = "rpc"
    status: str = "ok"  # ok|error
    spans: list[SpanRecord] = field(default_factory=list)
    events: list[EventRecord] = field(default_factory=list)  # trace-level events
    schema_version: str = TRACE_SCHEMA_VERSION

    def to_dict(self) -> JsonDict:
        return {
            "schema_version": self.schema_version,
            "trace_id": self.trace_id,
            "trace_type": self.trace_type,
            "status": self.status,
            "start_ts": self.start_ts,
            "end_ts": self.end_ts,
            "spans": [s.to_dict() for s in self.spans],
            "events": [e.to_dict() for e in self.events],
        }

    def validate(self, *, strict: bool = True) -> None:
        if not self.trace_id:
            raise ValueError("trace_id missing")
        for span in self.spans:
            _validate_span_name(span.name, strict=strict)
            for ev in span.events:
                _normalize_event_kind(ev.kind, strict=strict)
        for ev in self.events:
            _normalize_event_kind(ev.kind, strict=strict)

