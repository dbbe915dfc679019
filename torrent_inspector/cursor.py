from typing import Optional


class ByteCursor:
    """Forward-only reader over an in-memory byte buffer."""

    def __init__(self, data: bytes | bytearray | memoryview):
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError(f"ByteCursor expects bytes, not {type(data)}.")
        self._data = bytes(data)
        self._index = 0

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._index}/{len(self._data)}>"

    @property
    def position(self) -> int:
        """Number of bytes consumed so far"""
        return self._index

    @property
    def remaining(self) -> int:
        return len(self._data) - self._index

    @property
    def at_end(self) -> bool:
        return self._index >= len(self._data)

    def peek(self) -> Optional[int]:
        """Peek current byte, None at end of input"""
        if self.at_end:
            return None
        return self._data[self._index]

    def advance(self) -> bool:
        """
        Consumes one byte

        Returns:
            - bool: True if the end of input has been reached
        """
        if not self.at_end:
            self._index += 1
        return self.at_end

    def take(self, length: int) -> bytes:
        """
        Consumes exactly ``length`` bytes

        Raises:
            - EOFError: fewer than ``length`` bytes are left, the cursor does not move
        """
        if length < 0:
            raise ValueError(f"Cannot take a negative number of bytes: {length}")
        if length > self.remaining:
            raise EOFError(
                f"Wanted {length} bytes at position {self._index}, only {self.remaining} left"
            )
        chunk = self._data[self._index : self._index + length]
        self._index += length
        return chunk


class SeekableCursor(ByteCursor):
    """Cursor that can jump back to an absolute offset to re-read raw ranges."""

    def seek(self, offset: int) -> None:
        if not 0 <= offset <= len(self._data):
            raise ValueError(f"Offset {offset} outside of buffer of {len(self._data)} bytes")
        self._index = offset

    def read_exact(self, offset: int, length: int) -> bytes:
        """
        Reads ``length`` bytes starting at the absolute ``offset``

        Args:
            - offset (int): Absolute position in the buffer
            - length (int): Number of bytes to read

        Returns:
            - bytes: The raw bytes, never shorter than ``length``
        """
        if offset > len(self._data):
            raise EOFError(f"Offset {offset} is past the end of the buffer")
        self.seek(offset)
        return self.take(length)
