"""
Tuner Status String Parsing

Networked tuners report state as space- or newline-separated key=value
text, for example:

    status:     ch=auto:33 lock=atsc3 ss=100(-35dBm) snq=80(18dB) seq=100
    plpinfo:    bsid=0x0123
                0: sym=1 mod=qam256 cod=10/15 lock=1
    streaminfo: tsid=0x0456

This module pulls numeric values out of those strings and builds the
header block of the PLP detail view: BSID/TSID lines followed by the
per-PLP lines, each annotated with the SNR its ModCod requires.
"""

import logging
import re
from typing import List, Optional

from .ModCod import normalize_modulation, lookup_snr, format_snr_line

logger = logging.getLogger(__name__)


_INTEGER = re.compile(r'[+-]?(0[xX][0-9a-fA-F]+|\d+)')
_DB_VALUE = re.compile(r'\(\s*([+-]?\d+)')


def parse_status_value(text: Optional[str], key: str) -> Optional[int]:
    """
    Integer following key in a status string.

    '0x' prefixed values are read as hexadecimal.

    Args:
        text: Status string
        key: Key including '=', e.g. 'bsid='

    Returns:
        Parsed value, or None if the key is missing or not followed by
        a number

    Example:
        >>> parse_status_value('bsid=0x0123', 'bsid=')
        291
    """
    if not text:
        return None
    pos = text.find(key)
    if pos < 0:
        return None
    match = _INTEGER.match(text, pos + len(key))
    if match is None:
        return None
    number = match.group(0)
    return int(number, 16) if 'x' in number.lower() else int(number)


def parse_db_value(text: Optional[str], key: str) -> Optional[int]:
    """
    dB reading in parentheses after key, e.g. ss=100(-35dBm) -> -35.

    Returns:
        Parsed value, or None if absent
    """
    if not text:
        return None
    pos = text.find(key)
    if pos < 0:
        return None
    match = _DB_VALUE.search(text, pos)
    if match is None:
        return None
    return int(match.group(1))


def _token_value(line: str, key: str) -> Optional[str]:
    """Value of a key=value token, up to the next space."""
    pos = line.find(key)
    if pos < 0:
        return None
    rest = line[pos + len(key):]
    return rest.split(' ', 1)[0]


def plp_snr_line(line: str) -> Optional[str]:
    """
    SNR annotation for a plpinfo line carrying mod= and cod=.

    Returns:
        Annotation line, or None if the line has no ModCod or the
        ModCod is not in the table
    """
    mod = _token_value(line, 'mod=')
    cod = _token_value(line, 'cod=')
    if mod is None or cod is None:
        return None
    snr = lookup_snr(normalize_modulation(mod), cod)
    if snr is None:
        return None
    return format_snr_line(snr)


def _id_line(label: str, value: Optional[int]) -> str:
    if value is None:
        return f"{label}: Not set"
    return f"{label}: {value} (0x{value:X})"


def build_header_lines(plpinfo: Optional[str], streaminfo: Optional[str]) -> List[str]:
    """
    Header block of the PLP detail view.

    Args:
        plpinfo: Raw plpinfo text (may be None or empty)
        streaminfo: Raw streaminfo text (may be None or empty)

    Returns:
        Lines: BSID, TSID, blank, then each plpinfo line (except the
        bsid= line) with its optional SNR annotation and a blank line
    """
    lines = [
        _id_line('L1D BSID', parse_status_value(plpinfo, 'bsid=')),
        _id_line('SLT TSID', parse_status_value(streaminfo, 'tsid=')),
        ' ',
    ]

    for line in (plpinfo or '').splitlines():
        if not line or line.startswith('bsid='):
            continue
        lines.append(line)
        annotation = plp_snr_line(line)
        if annotation is not None:
            lines.append(annotation)
        lines.append(' ')

    return lines


def firmware_version_number(text: Optional[str]) -> int:
    """
    Leading decimal digits of a firmware version string.

    Example:
        >>> firmware_version_number('20250815beta1')
        20250815
    """
    match = re.match(r'\d+', text or '')
    return int(match.group(0)) if match else 0


def l1detail_available(status: Optional[str], version: Optional[str],
                       min_version: int) -> bool:
    """
    Whether a tuner exposes the L1 detail value.

    Requires dB-capable status output (ss= with a parenthesized reading)
    and a firmware newer than min_version.
    """
    if parse_db_value(status, 'ss=') is None:
        logger.debug("Tuner status has no dB values; L1 detail unavailable")
        return False
    number = firmware_version_number(version)
    if number <= min_version:
        logger.debug("Firmware %d does not expose L1 detail", number)
        return False
    return True
