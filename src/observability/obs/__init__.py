"""Span/event API used by the dispatcher and transports."""

from .api import event, metric, set_sink, span

__all__ = ["span", "event", "metric", "set_sink"]
