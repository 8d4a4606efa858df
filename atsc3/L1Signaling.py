"""
ATSC 3.0 L1 Signaling Decoder

High-level entry point that runs the whole decode:
    base64 text → bytes → BitReader → L1-Basic → L1-Detail → lines

The result is an ordered list of display lines plus the structured
L1Basic / L1Detail records. A payload that ends early still produces
everything decoded up to that point, followed by a truncation marker.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Union

from .Base64 import decode_base64
from .BitReader import BitReader, BitstreamTruncatedError
from .Config import DecoderConfig
from .L1Basic import L1Basic, L1BasicDecoder, CarriedState
from .L1Detail import L1Detail, L1DetailDecoder

logger = logging.getLogger(__name__)


@dataclass
class L1Result:
    """
    Outcome of one L1 decode.

    Attributes:
        lines: Display lines in order
        basic: L1-Basic fields (partial if truncated inside L1-Basic)
        state: Carried state, None if L1-Basic did not complete
        detail: L1-Detail fields, None if never started
        truncated: True if the payload ended before L1D_crc
        bit_position: Reader offset when decoding stopped
        total_bits: Payload size in bits
    """
    lines: List[str] = field(default_factory=list)
    basic: Optional[L1Basic] = None
    state: Optional[CarriedState] = None
    detail: Optional[L1Detail] = None
    truncated: bool = False
    bit_position: int = 0
    total_bits: int = 0

    @property
    def complete(self) -> bool:
        return self.detail is not None and self.detail.crc is not None


def truncation_marker(error: BitstreamTruncatedError) -> str:
    """Line appended where decoding stopped."""
    name = f" ({error.name})" if error.name else ""
    return f"*** L1 data truncated at bit {error.offset} of {error.total_bits}{name} ***"


def decode_l1(data: Union[bytes, bytearray],
              config: Optional[DecoderConfig] = None) -> L1Result:
    """
    Decode an L1 payload.

    Args:
        data: Raw L1 bytes (L1-Basic followed by L1-Detail)
        config: Decoder options

    Returns:
        L1Result; empty when data is empty

    Example:
        >>> result = decode_l1(payload)
        >>> for line in result.lines:
        ...     print(line)
    """
    result = L1Result()
    if not data:
        return result

    reader = BitReader(data)
    result.total_bits = reader.total_bits

    basic_decoder = L1BasicDecoder(reader, result.lines)
    result.basic = basic_decoder.basic

    try:
        result.state = basic_decoder.decode()
        detail_decoder = L1DetailDecoder(reader, result.lines, result.state, config)
        result.detail = detail_decoder.detail
        detail_decoder.decode()
    except BitstreamTruncatedError as e:
        logger.warning("L1 payload truncated: %s", e)
        result.truncated = True
        result.lines.append(truncation_marker(e))

    result.bit_position = reader.position
    return result


def parse_l1_base64(text: Optional[str],
                    config: Optional[DecoderConfig] = None) -> List[str]:
    """
    Decode the tuner's base64 L1 value into display lines.

    Args:
        text: Base64 L1 text
        config: Decoder options

    Returns:
        Display lines; empty for missing, empty or invalid base64 input
    """
    data = decode_base64(text)
    if data is None:
        if text:
            logger.warning("L1 detail is not valid base64; nothing decoded")
        return []
    return decode_l1(data, config).lines
