"""Ordered buffer for streamed response fragments."""

import codecs
from typing import Iterator, List, Optional, Tuple, Union

Chunk = Union[bytes, str]


class ChunkAccumulator:
    """
    Collects response body fragments in arrival order.

    Without an encoding fragments are kept as bytes. With an encoding every
    incoming bytes fragment goes through an incremental decoder, so a
    multi-byte character split across two fragments still decodes correctly,
    and the accumulator holds only str. The two representations are never
    mixed within one accumulator.

    Example:
        >>> acc = ChunkAccumulator(encoding="utf-8")
        >>> acc.append(b"\\xd0")       # first half of "Ж", nothing emitted yet
        ''
        >>> acc.append(b"\\x96!")
        'Ж!'
        >>> acc.freeze()
        >>> acc.join()
        'Ж!'
    """

    def __init__(self, encoding: Optional[str] = None):
        self.encoding = encoding
        self._chunks: List[Chunk] = []
        self._kind: Optional[type] = None
        self._frozen = False
        self._decoder = (
            codecs.getincrementaldecoder(encoding)(errors="replace")
            if encoding else None
        )

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def chunks(self) -> Tuple[Chunk, ...]:
        """Snapshot of the collected fragments."""
        return tuple(self._chunks)

    @property
    def size(self) -> int:
        """Total length of collected fragments (bytes or characters)."""
        return sum(len(c) for c in self._chunks)

    def __len__(self) -> int:
        return len(self._chunks)

    def __iter__(self) -> Iterator[Chunk]:
        return iter(self.chunks)

    def append(self, fragment: Chunk) -> Chunk:
        """
        Append one fragment.

        Args:
            fragment: Raw fragment from the transport

        Returns:
            The fragment as stored (decoded text when an encoding is set).
            Empty when nothing was stored, e.g. an incomplete multi-byte
            sequence waiting for the next fragment.

        Raises:
            RuntimeError: If the accumulator is frozen
            TypeError: If the fragment type differs from earlier fragments
        """
        if self._frozen:
            raise RuntimeError("Cannot append to a frozen chunk accumulator")

        if isinstance(fragment, (bytearray, memoryview)):
            fragment = bytes(fragment)
        if not isinstance(fragment, (bytes, str)):
            raise TypeError(f"Chunk must be bytes or str, got {type(fragment).__name__}")

        if self._decoder is not None and isinstance(fragment, bytes):
            fragment = self._decoder.decode(fragment)

        self._store(fragment)
        return fragment

    def _store(self, fragment: Chunk) -> None:
        if not fragment:
            return
        if self._kind is None:
            self._kind = type(fragment)
        elif not isinstance(fragment, self._kind):
            raise TypeError(
                f"Cannot mix {type(fragment).__name__} chunks with "
                f"{self._kind.__name__} chunks"
            )
        self._chunks.append(fragment)

    def freeze(self) -> None:
        """Flush the decoder and refuse further fragments. Idempotent."""
        if self._frozen:
            return
        if self._decoder is not None:
            self._store(self._decoder.decode(b"", final=True))
        self._frozen = True

    def join(self) -> Chunk:
        """Concatenate fragments into one bytes or str payload."""
        if self._kind is str or (self._kind is None and self.encoding):
            return "".join(self._chunks)
        return b"".join(self._chunks)

    def as_text(self) -> str:
        """Render the payload as text (declared encoding, else UTF-8)."""
        payload = self.join()
        if isinstance(payload, str):
            return payload
        return payload.decode(self.encoding or "utf-8", errors="replace")
