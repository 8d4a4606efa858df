"""
ATSC 3.0 L1-Basic Signaling

L1-Basic is a fixed 200-bit structure at the front of the L1 payload. It
describes the frame as a whole, the first subframe, and how the
following L1-Detail block is coded. Two places switch layout on a value
read earlier while keeping the same width:

    L1B_frame_length_mode   0: frame_length(10) + excess_samples(13)
                            1: time_offset(16) + additional_samples(7)
    L1B_version             >= 1: first_sub_mimo_mixed(1) + reserved(47)
                            0:    reserved(48)

Structure (bits):
    version 3 | mimo_scattered_pilot_encoding 1 | lls_flag 1 |
    time_info_flag 2 | return_channel_flag 1 | papr_reduction 2 |
    frame_length_mode 1 | frame length group 23 | num_subframes 8 |
    preamble_num_symbols 3 | preamble_reduced_carriers 3 |
    L1_Detail_content_tag 2 | L1_Detail_size_bytes 13 |
    L1_Detail_fec_type 3 | L1_additional_parity_mode 2 |
    L1_Detail_total_cells 19 | first_sub_mimo 1 | first_sub_miso 2 |
    first_sub_fft_size 2 | first_sub_reduced_carriers 3 |
    first_sub_guard_interval 4 | first_sub_num_ofdm_symbols 11 |
    first_sub_scattered_pilot_pattern 5 |
    first_sub_scattered_pilot_boost 3 | first_sub_sbs_first 1 |
    first_sub_sbs_last 1 | mimo mixed group 48 | L1B_crc 32

Reference: ATSC A/322:2024 Section 9.2, Table 9.2
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Type

from .BitReader import BitReader
from .FieldGroup import FieldGroup, equal_width_variants
from .Codes import (
    PilotEncoding, LLSFlag, TimeInfo, PAPRReduction, FrameLengthMode,
    L1DetailFecType, AdditionalParity, MIMO, MISO, FFTSize, GuardInterval,
    PilotBoost,
)

logger = logging.getLogger(__name__)


L1_BASIC_BITS = 200
INDENT = '  '


class TimeAlignedFrame(FieldGroup):
    FIELDS = (('frame_length', 10), ('excess_samples_per_symbol', 13))


class SymbolAlignedFrame(FieldGroup):
    FIELDS = (('time_offset', 16), ('additional_samples', 7))


class MimoMixedSignaled(FieldGroup):
    FIELDS = (('first_sub_mimo_mixed', 1), ('reserved', 47))


class MimoMixedReserved(FieldGroup):
    FIELDS = (('reserved', 48),)


FRAME_LENGTH_VARIANTS = equal_width_variants(TimeAlignedFrame, SymbolAlignedFrame)
MIMO_MIXED_VARIANTS = equal_width_variants(MimoMixedSignaled, MimoMixedReserved)

FRAME_LENGTH_GROUP_BITS = TimeAlignedFrame.width()
MIMO_MIXED_GROUP_BITS = MimoMixedSignaled.width()


def frame_length_group(mode: int) -> Type[FieldGroup]:
    """Layout selected by L1B_frame_length_mode."""
    return TimeAlignedFrame if mode == 0 else SymbolAlignedFrame


def mimo_mixed_group(version: int) -> Type[FieldGroup]:
    """Layout selected by L1B_version."""
    return MimoMixedSignaled if version >= 1 else MimoMixedReserved


@dataclass
class L1Basic:
    """
    Decoded L1-Basic fields.

    Values are raw stream values: count fields hold count - 1, exactly
    as transmitted. Fields not reached (truncated payload) stay None.
    """
    version: Optional[int] = None
    mimo_scattered_pilot_encoding: Optional[int] = None
    lls_flag: Optional[int] = None
    time_info_flag: Optional[int] = None
    return_channel_flag: Optional[int] = None
    papr_reduction: Optional[int] = None
    frame_length_mode: Optional[int] = None
    frame_length: Optional[int] = None
    excess_samples_per_symbol: Optional[int] = None
    time_offset: Optional[int] = None
    additional_samples: Optional[int] = None
    num_subframes: Optional[int] = None
    preamble_num_symbols: Optional[int] = None
    preamble_reduced_carriers: Optional[int] = None
    l1_detail_content_tag: Optional[int] = None
    l1_detail_size_bytes: Optional[int] = None
    l1_detail_fec_type: Optional[int] = None
    l1_additional_parity_mode: Optional[int] = None
    l1_detail_total_cells: Optional[int] = None
    first_sub_mimo: Optional[int] = None
    first_sub_miso: Optional[int] = None
    first_sub_fft_size: Optional[int] = None
    first_sub_reduced_carriers: Optional[int] = None
    first_sub_guard_interval: Optional[int] = None
    first_sub_num_ofdm_symbols: Optional[int] = None
    first_sub_scattered_pilot_pattern: Optional[int] = None
    first_sub_scattered_pilot_boost: Optional[int] = None
    first_sub_sbs_first: Optional[int] = None
    first_sub_sbs_last: Optional[int] = None
    first_sub_mimo_mixed: Optional[int] = None
    crc: Optional[int] = None

    @property
    def subframe_count(self) -> Optional[int]:
        """Number of subframes (num_subframes + 1)."""
        return None if self.num_subframes is None else self.num_subframes + 1


@dataclass(frozen=True)
class CarriedState:
    """
    L1-Basic values the L1-Detail decoder depends on.

    Attributes:
        version: L1B_version
        time_info_flag: Precision of L1D time fields (0 = absent)
        num_subframes: Subframe count minus one
        first_sub_mimo: MIMO flag for subframe 0
        first_sub_sbs_first: SBS-first flag for subframe 0
        first_sub_sbs_last: SBS-last flag for subframe 0
        first_sub_mimo_mixed: MIMO-mixed flag for subframe 0
        first_sub_fft_size: FFT size code for subframe 0
        first_sub_guard_interval: Guard interval code for subframe 0
        l1_detail_size_bytes: Declared L1-Detail size
        basic_end_bit: Reader offset where L1-Basic ended
    """
    version: int
    time_info_flag: int
    num_subframes: int
    first_sub_mimo: int
    first_sub_sbs_first: int
    first_sub_sbs_last: int
    first_sub_mimo_mixed: int
    first_sub_fft_size: int
    first_sub_guard_interval: int
    l1_detail_size_bytes: int
    basic_end_bit: int = L1_BASIC_BITS

    @property
    def subframe_count(self) -> int:
        return self.num_subframes + 1


class L1BasicDecoder:
    """
    Sequential L1-Basic decoder.

    Appends display lines to a caller-owned list as each field is read,
    and fills an L1Basic record, so a truncated payload leaves both
    populated up to the last complete field.

    Example:
        >>> lines = []
        >>> decoder = L1BasicDecoder(BitReader(payload), lines)
        >>> state = decoder.decode()
        >>> state.subframe_count
        1
    """

    HEADING = '--- L1-Basic Signaling ---'

    def __init__(self, reader: BitReader, lines: List[str]):
        self.reader = reader
        self.lines = lines
        self.basic = L1Basic()

    def _field(self, attr: str, width: int, label: str,
               render: Callable[[int], str] = str,
               count: bool = False, indent: int = 0) -> int:
        """Read one field, record it and emit its display line."""
        value = self.reader.read(width, f"L1B_{attr}")
        setattr(self.basic, attr, value)
        shown = value + 1 if count else value
        self.lines.append(f"{INDENT * indent}{label}: {render(shown)}")
        return value

    def _group(self, group: Type[FieldGroup], indent: int) -> FieldGroup:
        def emit(name: str, value: int) -> None:
            setattr(self.basic, name, value)
            self.lines.append(f"{INDENT * indent}L1B_{name}: {value}")
        return group.read(self.reader, emit)

    def decode(self) -> CarriedState:
        """
        Decode L1-Basic from the reader's current position.

        Returns:
            CarriedState for the L1-Detail decoder

        Raises:
            BitstreamTruncatedError: If the payload ends inside L1-Basic
        """
        start = self.reader.position
        self.lines.append(self.HEADING)

        version = self._field('version', 3, 'L1B_version')
        self._field('mimo_scattered_pilot_encoding', 1,
                    'L1B_mimo_scattered_pilot_encoding', PilotEncoding.describe)
        self._field('lls_flag', 1, 'L1B_lls_flag', LLSFlag.describe)
        time_info_flag = self._field('time_info_flag', 2, 'L1B_time_info_flag',
                                     TimeInfo.describe)
        self._field('return_channel_flag', 1, 'L1B_return_channel_flag')
        self._field('papr_reduction', 2, 'L1B_papr_reduction', PAPRReduction.describe)

        mode = self._field('frame_length_mode', 1, 'L1B_frame_length_mode',
                           FrameLengthMode.describe)
        self._group(frame_length_group(mode), indent=1)

        num_subframes = self._field('num_subframes', 8, 'L1B_num_subframes', count=True)
        self._field('preamble_num_symbols', 3, 'L1B_preamble_num_symbols', count=True)
        self._field('preamble_reduced_carriers', 3, 'L1B_preamble_reduced_carriers')
        self._field('l1_detail_content_tag', 2, 'L1B_L1_Detail_content_tag')
        detail_size = self._field('l1_detail_size_bytes', 13, 'L1B_L1_Detail_size_bytes')
        self._field('l1_detail_fec_type', 3, 'L1B_L1_Detail_fec_type',
                    lambda v: L1DetailFecType.describe(v, None))
        self._field('l1_additional_parity_mode', 2, 'L1B_L1_additional_parity_mode',
                    AdditionalParity.describe)
        self._field('l1_detail_total_cells', 19, 'L1B_L1_Detail_total_cells')

        first_mimo = self._field('first_sub_mimo', 1, 'L1B_first_sub_mimo', MIMO.describe)
        self._field('first_sub_miso', 2, 'L1B_first_sub_miso', MISO.describe)
        fft_size = self._field('first_sub_fft_size', 2, 'L1B_first_sub_fft_size',
                               FFTSize.describe)
        self._field('first_sub_reduced_carriers', 3, 'L1B_first_sub_reduced_carriers')
        guard = self._field('first_sub_guard_interval', 4, 'L1B_first_sub_guard_interval',
                            lambda v: GuardInterval.describe(v, f"Reserved ({v})"))
        self._field('first_sub_num_ofdm_symbols', 11, 'L1B_first_sub_num_ofdm_symbols',
                    count=True)
        self._field('first_sub_scattered_pilot_pattern', 5,
                    'L1B_first_sub_scattered_pilot_pattern')
        self._field('first_sub_scattered_pilot_boost', 3,
                    'L1B_first_sub_scattered_pilot_boost', PilotBoost.describe)
        sbs_first = self._field('first_sub_sbs_first', 1, 'L1B_first_sub_sbs_first')
        sbs_last = self._field('first_sub_sbs_last', 1, 'L1B_first_sub_sbs_last')

        mixed = self._group(mimo_mixed_group(version), indent=0)
        mimo_mixed = mixed.get('first_sub_mimo_mixed', 0)
        self.basic.first_sub_mimo_mixed = mimo_mixed

        self._field('crc', 32, 'L1B_crc', lambda v: f"0x{v:08x}")

        end = self.reader.position
        logger.debug("L1-Basic decoded: %d bits, version %d, %d subframe(s)",
                     end - start, version, num_subframes + 1)

        return CarriedState(
            version=version,
            time_info_flag=time_info_flag,
            num_subframes=num_subframes,
            first_sub_mimo=first_mimo,
            first_sub_sbs_first=sbs_first,
            first_sub_sbs_last=sbs_last,
            first_sub_mimo_mixed=mimo_mixed,
            first_sub_fft_size=fft_size,
            first_sub_guard_interval=guard,
            l1_detail_size_bytes=detail_size,
            basic_end_bit=end,
        )
