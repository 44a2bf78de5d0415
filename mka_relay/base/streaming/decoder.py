"""Transport decoder: bytes in, complete text lines out.

Chunks arrive at arbitrary byte boundaries. The decoder runs an incremental
UTF-8 decoder so a multi-byte character split across two chunks is carried
over instead of being replaced, and buffers text until a ``\\n`` completes a
line. Lines are returned without the terminator and with a trailing ``\\r``
stripped.

One decoder serves exactly one response body; it is never reused.
"""
from __future__ import annotations

import codecs
from typing import Iterator, Optional


class TransportDecoder:
    """Incremental byte-to-line decoder with single-line pushback."""

    def __init__(self, encoding: str = "utf-8") -> None:
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._buffer = ""
        self._closed = False

    @property
    def buffered(self) -> str:
        """Text received but not yet returned as a line."""
        return self._buffer

    def feed(self, chunk: bytes) -> None:
        """Decode ``chunk`` and append it to the line buffer."""
        if self._closed:
            raise RuntimeError("decoder already closed")
        if chunk:
            self._buffer += self._decoder.decode(chunk)

    def _split_at(self) -> int:
        return self._buffer.find("\n")

    @staticmethod
    def _strip_cr(line: str) -> str:
        return line[:-1] if line.endswith("\r") else line

    def next_line(self) -> Optional[str]:
        """Pop the next complete line, or ``None`` when none is buffered."""
        idx = self._split_at()
        if idx < 0:
            return None
        line = self._buffer[:idx]
        self._buffer = self._buffer[idx + 1:]
        return self._strip_cr(line)

    def peek_line(self) -> Optional[str]:
        """Return the next complete line without consuming it."""
        idx = self._split_at()
        if idx < 0:
            return None
        return self._strip_cr(self._buffer[:idx])

    def push_back(self, line: str) -> None:
        """Return ``line`` to the front of the buffer as a complete line."""
        self._buffer = line + "\n" + self._buffer

    def iter_lines(self) -> Iterator[str]:
        """Yield complete lines until the buffer holds only a partial line."""
        while True:
            line = self.next_line()
            if line is None:
                return
            yield line

    def close(self) -> str:
        """Flush the byte decoder and return the unterminated tail.

        Callers drain complete lines first; whatever remains is text that
        never received its newline. The tail is discarded from the buffer.
        """
        if not self._closed:
            self._buffer += self._decoder.decode(b"", final=True)
            self._closed = True
        tail, self._buffer = self._buffer, ""
        return self._strip_cr(tail)


__all__ = ["TransportDecoder"]
