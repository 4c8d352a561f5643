from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Iterator, TextIO

from .codec import (
    INTERNAL_ERROR,
    JsonSerializer,
    SerializationContext,
    Serializer,
    decode_request,
    encode_error,
    is_notification,
)
from .dispatcher import Dispatcher


@dataclass
class StdioTransport:
    """Line-delimited JSON-RPC 2.0 transport over stdio."""

    stdin: TextIO = sys.stdin
    stdout: TextIO = sys.stdout
    serializer: Serializer = field(default_factory=JsonSerializer)
    context: SerializationContext | None = None

    def set_serialization_context(self, context: SerializationContext | None) -> None:
        self.context = context

    def serve(self, dispatcher: Dispatcher) -> None:
        """
        Read requests from stdin until EOF and write one response line per request.

        - Blank lines are skipped.
        - Notification (valid envelope without an `id` member): executed, no output.
        """
        for line in self._iter_lines():
            line = line.strip()
            if not line:
                continue

            raw = decode_request(line)
            resp = dispatcher.handle_rpc(raw)
            if is_notification(raw):
                continue
            try:
                payload = self.serializer.encode(resp, self.context).decode("utf-8")
            except (TypeError, ValueError) as e:
                payload = encode_error(resp.id, INTERNAL_ERROR, data={"exc_type": type(e).__name__})
            self._write(payload)

    def _iter_lines(self) -> Iterator[str]:
        while True:
            line = self.stdin.readline()
            if line == "":
                break
            yield line

    def _write(self, payload: str) -> None:
        self.stdout.write(payload + "\n")
        self.stdout.flush()
