"""Readable byte stream over a blob download."""

import io
from typing import Callable, Iterable, Optional


class BlobReader(io.RawIOBase):
    """Lazily-consumed, single-pass reader over the chunks of a download.

    Chunks are pulled from the SDK only as the caller reads, and ``read(n)``
    returns ``n`` bytes unless the download ends first. Errors raised while
    fetching a chunk are passed through ``translate_error`` so callers see the
    same exception types as the store operations raise. An error hit after
    part of a read was filled is held back and raised by the next read.
    """

    def __init__(
        self,
        chunks: Iterable[bytes],
        translate_error: Callable[[Exception], Exception],
        size: Optional[int] = None,
        name: str = "",
    ):
        super().__init__()
        self._chunks = iter(chunks)
        self._translate_error = translate_error
        self._pending = memoryview(b"")
        self._offset = 0
        self._error: Optional[Exception] = None
        self.size = size
        self.name = name

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        if self.closed:
            raise ValueError("I/O operation on closed blob reader")

        view = memoryview(buffer).cast("B")
        filled = 0
        while filled < len(view):
            if self._offset == len(self._pending):
                if not self._next_chunk(filled):
                    break
                continue
            count = min(len(view) - filled, len(self._pending) - self._offset)
            view[filled:filled + count] = self._pending[self._offset:self._offset + count]
            self._offset += count
            filled += count
        return filled

    def _next_chunk(self, filled: int) -> bool:
        if self._error is not None:
            error, self._error = self._error, None
            raise error
        try:
            chunk = next(self._chunks)
        except StopIteration:
            return False
        except Exception as e:
            translated = self._translate_error(e)
            if translated is not e:
                translated.__cause__ = e
            if filled:
                self._error = translated
                return False
            raise translated
        self._pending = memoryview(chunk)
        self._offset = 0
        return True

    def close(self) -> None:
        self._chunks = iter(())
        self._pending = memoryview(b"")
        self._offset = 0
        self._error = None
        super().close()
