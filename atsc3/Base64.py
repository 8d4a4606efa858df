"""
Base64 Payload Decoding

Tuners expose the raw L1 signaling as base64 text (standard alphabet,
'=' padding). Decoding is strict: anything that is not a well-formed
base64 string yields no payload at all rather than a best-effort guess,
so the bit-level decoders never see garbage bytes.

Rules:
    - Length must be a multiple of 4
    - Only A-Z, a-z, 0-9, '+', '/' are data characters
    - '=' may only appear in the last one or two positions

Reference: RFC 4648 Section 4
"""

import base64
import binascii
import logging
import re
from typing import Optional

logger = logging.getLogger(__name__)


# Data characters followed by at most two trailing pad characters
_BASE64_PATTERN = re.compile(r'[A-Za-z0-9+/]*={0,2}')


def decoded_size(text: str) -> int:
    """
    Number of bytes a valid base64 string decodes to.

    Three bytes per 4-character group, minus one per trailing '='.

    Args:
        text: Base64 text

    Returns:
        Decoded length in bytes
    """
    size = len(text) // 4 * 3
    return size - (len(text) - len(text.rstrip('=')))


def decode_base64(text: Optional[str]) -> Optional[bytes]:
    """
    Decode base64 text into bytes.

    Args:
        text: Base64 text from the tuner, already stripped of any
            line ending

    Returns:
        Decoded bytes, b'' for empty input, or None if the text is not
        valid base64

    Example:
        >>> decode_base64('QQ==')
        b'A'
        >>> decode_base64('QQ=') is None
        True
    """
    if text is None:
        return None

    if not text:
        return b''

    if len(text) % 4 != 0:
        logger.debug("Base64 length %d is not a multiple of 4", len(text))
        return None

    if _BASE64_PATTERN.fullmatch(text) is None:
        logger.debug("Base64 text contains invalid characters or padding")
        return None

    try:
        data = base64.b64decode(text, validate=True)
    except binascii.Error as e:
        logger.debug("Base64 decode failed: %s", e)
        return None

    return data
