"""
MSB-First Bit Reader

ATSC 3.0 L1 signaling is a packed bitstream: fields are unsigned
integers of arbitrary width laid out back to back, most significant bit
first, with no byte alignment. The reader unpacks the payload once into
a bit array and walks a single cursor over it.

The cursor only moves forward. A read that would run past the end of
the payload raises BitstreamTruncatedError and parks the cursor at the
end of the buffer, so nothing after the truncation point can ever be
decoded from synthesized bits.

Reference: ATSC A/322:2024 Section 9.2 (bit ordering)
"""

import logging
from typing import Optional, Union

import numpy as np

logger = logging.getLogger(__name__)


MAX_FIELD_BITS = 64


class BitstreamTruncatedError(ValueError):
    """
    Raised when a field extends past the end of the payload.

    Attributes:
        name: Field being read (may be None)
        width: Requested width in bits
        offset: Bit offset at which the read started
        total_bits: Size of the payload in bits
    """

    def __init__(self, name: Optional[str], width: int, offset: int, total_bits: int):
        self.name = name
        self.width = width
        self.offset = offset
        self.total_bits = total_bits
        field = f" ({name})" if name else ""
        super().__init__(
            f"Need {width} bits at offset {offset}{field}, "
            f"only {total_bits - offset} available"
        )


class BitReader:
    """
    Cursor over an immutable byte buffer yielding MSB-first fields.

    Attributes:
        position: Current bit offset
        total_bits: Payload size in bits

    Example:
        >>> reader = BitReader(b'\\xA5\\x0F')
        >>> reader.read(4)
        10
        >>> reader.read(8)
        80
        >>> reader.position
        12
    """

    def __init__(self, data: Union[bytes, bytearray]):
        """
        Initialize reader.

        Args:
            data: Payload bytes (copied; the reader never mutates them)
        """
        self._data = bytes(data)
        self._bits = np.unpackbits(np.frombuffer(self._data, dtype=np.uint8))
        self._bits.flags.writeable = False
        self._pos = 0

    @property
    def position(self) -> int:
        """Current cursor offset in bits."""
        return self._pos

    @property
    def total_bits(self) -> int:
        """Total payload size in bits."""
        return len(self._bits)

    @property
    def remaining(self) -> int:
        """Bits left before end of buffer."""
        return len(self._bits) - self._pos

    def _check(self, width: int, name: Optional[str]) -> None:
        if not 1 <= width <= MAX_FIELD_BITS:
            raise ValueError(f"Field width must be 1-{MAX_FIELD_BITS}, got {width}")

        if self._pos + width > len(self._bits):
            offset = self._pos
            self._pos = len(self._bits)
            logger.debug("Truncated reading %s: %d bits at %d of %d",
                         name, width, offset, len(self._bits))
            raise BitstreamTruncatedError(name, width, offset, len(self._bits))

    def read(self, width: int, name: Optional[str] = None) -> int:
        """
        Extract an unsigned integer and advance the cursor.

        Args:
            width: Field width in bits (1-64)
            name: Field name, used in truncation diagnostics

        Returns:
            Field value

        Raises:
            ValueError: If width is out of range
            BitstreamTruncatedError: If the field runs past the buffer end
        """
        self._check(width, name)

        value = 0
        for bit in self._bits[self._pos:self._pos + width]:
            value = (value << 1) | int(bit)
        self._pos += width

        return value

    def skip(self, width: int, name: Optional[str] = None) -> None:
        """
        Advance the cursor without decoding.

        Args:
            width: Bits to skip (1-64)
            name: Field name, used in truncation diagnostics
        """
        self._check(width, name)
        self._pos += width

    def __repr__(self) -> str:
        return f"BitReader(position={self._pos}, total_bits={self.total_bits})"
