"""
atsc3 - ATSC 3.0 L1 Signaling Inspector

Decodes the Layer-1 signaling that ATSC 3.0 tuners expose (base64 text
of the L1-Basic and L1-Detail bitstream) into readable lines, and builds
the PLP & L1 detail view a tuner control panel shows.

Modules:
    Payload:
        - Base64: Strict base64 decoding
        - BitReader: MSB-first bit cursor
        - FieldGroup: Fixed-width field runs and equal-width variants

    Signaling:
        - Codes: Coded field enumerations
        - L1Basic: L1-Basic decoder and carried state
        - L1Detail: Subframe / PLP decoder
        - L1Signaling: Complete base64 → lines decode

    Presentation:
        - ModCod: Required SNR per modulation / code rate
        - StatusInfo: Tuner status string parsing
        - DetailView: Detail screen assembly, rendering, saving
        - Config: Decoder options
"""

__version__ = "0.1.0"
__author__ = "atsc3 Contributors"

from .Base64 import decode_base64
from .BitReader import BitReader, BitstreamTruncatedError
from .Config import DecoderConfig, ConfigValidationError
from .L1Basic import L1Basic, L1BasicDecoder, CarriedState, L1_BASIC_BITS
from .L1Detail import L1Detail, L1DetailDecoder, SubframeInfo, PLPInfo
from .L1Signaling import L1Result, decode_l1, parse_l1_base64
from .ModCod import SnrRange, SNR_TABLE, normalize_modulation, lookup_snr, format_snr_line
from .StatusInfo import parse_status_value, parse_db_value, build_header_lines
from .DetailView import SEPARATOR, BLANK, DetailView, build_detail_lines, save_lines, default_save_name

__all__ = [
    # Constants
    'L1_BASIC_BITS', 'SEPARATOR', 'BLANK',

    # Payload
    'decode_base64', 'BitReader', 'BitstreamTruncatedError',

    # Signaling
    'L1Basic', 'L1BasicDecoder', 'CarriedState',
    'L1Detail', 'L1DetailDecoder', 'SubframeInfo', 'PLPInfo',
    'L1Result', 'decode_l1', 'parse_l1_base64',

    # Presentation
    'SnrRange', 'SNR_TABLE', 'normalize_modulation', 'lookup_snr', 'format_snr_line',
    'parse_status_value', 'parse_db_value', 'build_header_lines',
    'DetailView', 'build_detail_lines', 'save_lines', 'default_save_name',
    'DecoderConfig', 'ConfigValidationError',
]
