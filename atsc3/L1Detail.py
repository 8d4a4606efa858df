"""
ATSC 3.0 L1-Detail Signaling

L1-Detail follows L1-Basic in the same bitstream and describes every
subframe and every Physical Layer Pipe (PLP) in the frame. Its shape is
driven by values decoded earlier:

    - L1B_time_info_flag selects how many time fields are present
    - L1B_num_subframes + 1 subframes follow; subframe 0 reuses the
      L1B_first_sub_* parameters, later subframes carry their own
    - L1D_num_plp + 1 PLPs follow in each subframe
    - L1D_plp_fec_type <= 5 adds modulation and code rate
    - L1D_plp_TI_mode selects CTI or HTI interleaver parameters
    - L1D_num_rf > 0 adds channel bonding fields
    - the subframe's MIMO flag adds MIMO fields
    - the PLP layer selects the core tail or the LDM injection level

Each PLP with a known ModCod is annotated with the receive SNR it needs.

Reference: ATSC A/322:2024 Section 9.3, Table 9.8
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .BitReader import BitReader
from .Config import DecoderConfig
from .L1Basic import CarriedState, INDENT
from .ModCod import lookup_snr, format_snr_line, SnrRange
from .Codes import (
    TimeInfo, MIMO, MISO, FFTSize, GuardInterval, PilotBoost,
    FrequencyInterleaver, PLPLayer, ScramblerType, PLPFecType,
    PLP_FEC_MAX_WITH_MODCOD, Modulation, CodeRate, TIMode, PLPType,
)

logger = logging.getLogger(__name__)


CRC_BITS = 32
PADDING_GROUP_BITS = 32

# Indentation levels of the rendered tree
SUBFRAME_LEVEL = 1
PLP_HEADER_LEVEL = 2
PLP_LEVEL = 3
PLP_LIST_LEVEL = 4


@dataclass
class PLPInfo:
    """
    One decoded PLP. Count fields hold raw (count - 1) values; fields
    absent from the stream for this PLP stay None.
    """
    index: int
    plp_id: Optional[int] = None
    lls_flag: Optional[int] = None
    layer: Optional[int] = None
    start: Optional[int] = None
    size: Optional[int] = None
    scrambler_type: Optional[int] = None
    fec_type: Optional[int] = None
    modulation: Optional[int] = None
    code_rate: Optional[int] = None
    ti_mode: Optional[int] = None
    fec_block_start: Optional[int] = None
    cti_fec_block_start: Optional[int] = None
    num_channel_bonded: Optional[int] = None
    channel_bonding_format: Optional[int] = None
    bonded_rf_ids: List[int] = field(default_factory=list)
    mimo_stream_combining: Optional[int] = None
    mimo_iq_interleaving: Optional[int] = None
    mimo_ph: Optional[int] = None
    plp_type: Optional[int] = None
    num_subslices: Optional[int] = None
    subslice_interval: Optional[int] = None
    ti_extended_interleaving: Optional[int] = None
    cti_depth: Optional[int] = None
    cti_start_row: Optional[int] = None
    hti_inter_subframe: Optional[int] = None
    hti_num_ti_blocks: Optional[int] = None
    hti_num_fec_blocks_max: Optional[int] = None
    hti_num_fec_blocks: List[int] = field(default_factory=list)
    hti_cell_interleaver: Optional[int] = None
    ldm_injection_level: Optional[int] = None
    # MIMO-mixed pass (L1D_version >= 2)
    plp_mimo: Optional[int] = None
    mixed_stream_combining: Optional[int] = None
    mixed_iq_interleaving: Optional[int] = None
    mixed_ph: Optional[int] = None

    @property
    def is_core(self) -> bool:
        return self.layer == PLPLayer.CORE.code

    @property
    def modulation_label(self) -> Optional[str]:
        if self.modulation is None:
            return None
        return Modulation.describe(self.modulation)

    @property
    def code_rate_label(self) -> Optional[str]:
        if self.code_rate is None:
            return None
        return CodeRate.describe(self.code_rate)

    @property
    def required_snr(self) -> Optional[SnrRange]:
        """SNR window for this PLP's ModCod, if known."""
        if self.modulation is None or self.code_rate is None:
            return None
        return lookup_snr(self.modulation_label, self.code_rate_label)


@dataclass
class SubframeInfo:
    """
    One decoded subframe.

    Attributes:
        from_basic: True when MIMO/SBS/FFT/GI come from L1-Basic
            (subframe 0); False when decoded from this subframe
    """
    index: int
    from_basic: bool
    mimo: Optional[int] = None
    miso: Optional[int] = None
    fft_size: Optional[int] = None
    reduced_carriers: Optional[int] = None
    guard_interval: Optional[int] = None
    num_ofdm_symbols: Optional[int] = None
    scattered_pilot_pattern: Optional[int] = None
    scattered_pilot_boost: Optional[int] = None
    sbs_first: Optional[int] = None
    sbs_last: Optional[int] = None
    subframe_multiplex: Optional[int] = None
    frequency_interleaver: Optional[int] = None
    sbs_null_cells: Optional[int] = None
    num_plp: Optional[int] = None
    mimo_mixed: Optional[int] = None
    plps: List[PLPInfo] = field(default_factory=list)

    @property
    def plp_count(self) -> Optional[int]:
        return None if self.num_plp is None else self.num_plp + 1


@dataclass
class L1Detail:
    """Decoded L1-Detail fields."""
    version: Optional[int] = None
    num_rf: Optional[int] = None
    bonded_bsids: List[int] = field(default_factory=list)
    time_sec: Optional[int] = None
    time_msec: Optional[int] = None
    time_usec: Optional[int] = None
    time_nsec: Optional[int] = None
    subframes: List[SubframeInfo] = field(default_factory=list)
    bsid: Optional[int] = None
    padding_bits: int = 0
    crc: Optional[int] = None


def _line(indent: int, label: str, value) -> str:
    return f"{INDENT * indent}{label}: {value}"


class L1DetailDecoder:
    """
    Sequential L1-Detail decoder.

    Continues on the reader L1BasicDecoder used and appends to the same
    line list. Every field is recorded in the L1Detail tree before the
    next one is read, so a truncated payload leaves a consistent partial
    result.

    Example:
        >>> lines = []
        >>> reader = BitReader(payload)
        >>> state = L1BasicDecoder(reader, lines).decode()
        >>> detail = L1DetailDecoder(reader, lines, state).decode()
        >>> len(detail.subframes) == state.subframe_count
        True
    """

    HEADING = '--- L1-Detail Signaling ---'

    def __init__(self, reader: BitReader, lines: List[str], state: CarriedState,
                 config: Optional[DecoderConfig] = None):
        self.reader = reader
        self.lines = lines
        self.state = state
        self.config = config or DecoderConfig()
        self.detail = L1Detail()

    def _read(self, target, attr: str, width: int, label: str, indent: int,
              render: Callable[[int], str] = str, count: bool = False) -> int:
        """Read one field into target.attr and emit its display line."""
        value = self.reader.read(width, label)
        setattr(target, attr, value)
        self.lines.append(_line(indent, label, render(value + 1 if count else value)))
        return value

    def decode(self) -> L1Detail:
        """
        Decode L1-Detail from the reader's current position.

        Returns:
            L1Detail tree

        Raises:
            BitstreamTruncatedError: If the payload ends early
        """
        detail = self.detail
        reader = self.reader

        self.lines.append(' ')
        self.lines.append(self.HEADING)

        self._read(detail, 'version', 4, 'L1D_version', 0)
        num_rf = self._read(detail, 'num_rf', 3, 'L1D_num_rf', 0)
        for _ in range(num_rf):
            bsid = reader.read(16, 'L1D_bonded_bsid')
            detail.bonded_bsids.append(bsid)
            self.lines.append(_line(1, 'L1D_bonded_bsid', f"0x{bsid:04x}"))
            reader.skip(3, 'L1D_reserved')

        self._decode_time(detail)

        for index in range(self.state.subframe_count):
            self._decode_subframe(index)

        if detail.version >= 1:
            self._read(detail, 'bsid', 16, 'L1D_bsid', 0,
                       lambda v: f"{v} (0x{v:04x})")

        if detail.version >= 2:
            self._decode_mimo_mixed()

        self._decode_padding()

        self._read(detail, 'crc', CRC_BITS, 'L1D_crc', 0, lambda v: f"0x{v:08x}")
        logger.debug("L1-Detail decoded: %d subframe(s), %d PLP(s)",
                     len(detail.subframes),
                     sum(len(sf.plps) for sf in detail.subframes))
        return detail

    def _decode_time(self, detail: L1Detail) -> None:
        flag = self.state.time_info_flag
        if flag == TimeInfo.NONE.code:
            return
        self._read(detail, 'time_sec', 32, 'L1D_time_sec', 0)
        self._read(detail, 'time_msec', 10, 'L1D_time_msec', 0)
        if flag >= TimeInfo.US.code:
            self._read(detail, 'time_usec', 10, 'L1D_time_usec', 0)
        if flag >= TimeInfo.NS.code:
            self._read(detail, 'time_nsec', 10, 'L1D_time_nsec', 0)

    def _decode_subframe(self, index: int) -> SubframeInfo:
        state = self.state
        lvl = SUBFRAME_LEVEL
        subframe = SubframeInfo(index=index, from_basic=index == 0)
        self.detail.subframes.append(subframe)

        self.lines.append(' ')
        self.lines.append(f"Subframe #{index}:")

        if subframe.from_basic:
            subframe.mimo = state.first_sub_mimo
            subframe.sbs_first = state.first_sub_sbs_first
            subframe.sbs_last = state.first_sub_sbs_last
            subframe.fft_size = state.first_sub_fft_size
            subframe.guard_interval = state.first_sub_guard_interval
            subframe.mimo_mixed = state.first_sub_mimo_mixed
        else:
            self._read(subframe, 'mimo', 1, 'L1D_mimo', lvl, MIMO.describe)
            self._read(subframe, 'miso', 2, 'L1D_miso', lvl, MISO.describe)
            self._read(subframe, 'fft_size', 2, 'L1D_fft_size', lvl, FFTSize.describe)
            self._read(subframe, 'reduced_carriers', 3, 'L1D_reduced_carriers', lvl)
            self._read(subframe, 'guard_interval', 4, 'L1D_guard_interval', lvl,
                       lambda v: GuardInterval.describe(v, f"Reserved ({v})"))
            self._read(subframe, 'num_ofdm_symbols', 11, 'L1D_num_ofdm_symbols', lvl,
                       count=True)
            self._read(subframe, 'scattered_pilot_pattern', 5,
                       'L1D_scattered_pilot_pattern', lvl)
            self._read(subframe, 'scattered_pilot_boost', 3,
                       'L1D_scattered_pilot_boost', lvl, PilotBoost.describe)
            self._read(subframe, 'sbs_first', 1, 'L1D_sbs_first', lvl)
            self._read(subframe, 'sbs_last', 1, 'L1D_sbs_last', lvl)

        if state.num_subframes > 0:
            self._read(subframe, 'subframe_multiplex', 1, 'L1D_subframe_multiplex', lvl)
        self._read(subframe, 'frequency_interleaver', 1, 'L1D_frequency_interleaver',
                   lvl, FrequencyInterleaver.describe)
        if subframe.sbs_first or subframe.sbs_last:
            self._read(subframe, 'sbs_null_cells', 13, 'L1D_sbs_null_cells', lvl)

        num_plp = self._read(subframe, 'num_plp', 6, 'L1D_num_plp', lvl, count=True)
        for plp_index in range(num_plp + 1):
            self._decode_plp(subframe, plp_index)

        return subframe

    def _decode_plp(self, subframe: SubframeInfo, index: int) -> PLPInfo:
        lvl = PLP_LEVEL
        plp = PLPInfo(index=index)
        subframe.plps.append(plp)

        self.lines.append(f"{INDENT * PLP_HEADER_LEVEL}PLP #{index}:")

        self._read(plp, 'plp_id', 6, 'L1D_plp_id', lvl)
        self._read(plp, 'lls_flag', 1, 'L1D_plp_lls_flag', lvl)
        self._read(plp, 'layer', 2, 'L1D_plp_layer', lvl, PLPLayer.describe)
        self._read(plp, 'start', 24, 'L1D_plp_start', lvl)
        self._read(plp, 'size', 24, 'L1D_plp_size', lvl)
        self._read(plp, 'scrambler_type', 2, 'L1D_plp_scrambler_type', lvl,
                   ScramblerType.describe)
        fec_type = self._read(plp, 'fec_type', 4, 'L1D_plp_fec_type', lvl,
                              lambda v: PLPFecType.describe(v, None))
        if fec_type <= PLP_FEC_MAX_WITH_MODCOD:
            self._read(plp, 'modulation', 4, 'L1D_plp_mod', lvl, Modulation.describe)
            self._read(plp, 'code_rate', 4, 'L1D_plp_cod', lvl, CodeRate.describe)

        ti_mode = self._read(plp, 'ti_mode', 2, 'L1D_plp_TI_mode', lvl, TIMode.describe)
        if ti_mode == TIMode.NONE.code:
            self._read(plp, 'fec_block_start', 15, 'L1D_plp_fec_block_start', lvl)
        elif ti_mode == TIMode.CTI.code:
            self._read(plp, 'cti_fec_block_start', 22, 'L1D_plp_CTI_fec_block_start', lvl)

        if self.detail.num_rf > 0:
            bonded = self._read(plp, 'num_channel_bonded', 3,
                                'L1D_plp_num_channel_bonded', lvl)
            if bonded > 0:
                self._read(plp, 'channel_bonding_format', 2,
                           'L1D_plp_channel_bonding_format', lvl)
                for _ in range(bonded):
                    rf_id = self.reader.read(3, 'L1D_plp_bonded_rf_id')
                    plp.bonded_rf_ids.append(rf_id)
                    self.lines.append(_line(PLP_LIST_LEVEL, 'L1D_plp_bonded_rf_id', rf_id))

        if subframe.mimo:
            self._read(plp, 'mimo_stream_combining', 1, 'L1D_plp_mimo_stream_combining', lvl)
            self._read(plp, 'mimo_iq_interleaving', 1, 'L1D_plp_mimo_IQ_interleaving', lvl)
            self._read(plp, 'mimo_ph', 1, 'L1D_plp_mimo_PH', lvl)

        if plp.is_core:
            self._decode_core_tail(plp)
        else:
            self._read(plp, 'ldm_injection_level', 5, 'L1D_plp_ldm_injection_level', lvl)

        snr = plp.required_snr
        if snr is not None:
            self.lines.append(format_snr_line(snr, INDENT * lvl))

        return plp

    def _decode_core_tail(self, plp: PLPInfo) -> None:
        lvl = PLP_LEVEL

        plp_type = self._read(plp, 'plp_type', 1, 'L1D_plp_type', lvl, PLPType.describe)
        if plp_type == PLPType.DISPERSED.code:
            self._read(plp, 'num_subslices', 14, 'L1D_plp_num_subslices', lvl, count=True)
            self._read(plp, 'subslice_interval', 24, 'L1D_plp_subslice_interval', lvl)

        interleaved = plp.ti_mode in (TIMode.CTI.code, TIMode.HTI.code)
        if interleaved and plp.modulation == Modulation.QPSK.code:
            self._read(plp, 'ti_extended_interleaving', 1,
                       'L1D_plp_TI_extended_interleaving', lvl)

        if plp.ti_mode == TIMode.CTI.code:
            self._read(plp, 'cti_depth', 3, 'L1D_plp_CTI_depth', lvl)
            self._read(plp, 'cti_start_row', 11, 'L1D_plp_CTI_start_row', lvl)
        elif plp.ti_mode == TIMode.HTI.code:
            inter_subframe = self._read(plp, 'hti_inter_subframe', 1,
                                        'L1D_plp_HTI_inter_subframe', lvl)
            num_ti_blocks = self._read(plp, 'hti_num_ti_blocks', 4,
                                       'L1D_plp_HTI_num_ti_blocks', lvl, count=True)
            self._read(plp, 'hti_num_fec_blocks_max', 12,
                       'L1D_plp_HTI_num_fec_blocks_max', lvl, count=True)
            if inter_subframe:
                runs, indent = num_ti_blocks + 1, PLP_LIST_LEVEL
            else:
                runs, indent = 1, lvl
            for _ in range(runs):
                blocks = self.reader.read(12, 'L1D_plp_HTI_num_fec_blocks')
                plp.hti_num_fec_blocks.append(blocks)
                self.lines.append(_line(indent, 'L1D_plp_HTI_num_fec_blocks', blocks + 1))
            self._read(plp, 'hti_cell_interleaver', 1, 'L1D_plp_HTI_cell_interleaver', lvl)

    def _decode_mimo_mixed(self) -> None:
        """Per-subframe and per-PLP MIMO signaling added in L1D_version 2."""
        for subframe in self.detail.subframes:
            if not subframe.from_basic:
                value = self.reader.read(1, 'L1D_mimo_mixed')
                subframe.mimo_mixed = value
                self.lines.append(
                    f"{INDENT * SUBFRAME_LEVEL}Subframe #{subframe.index} L1D_mimo_mixed: {value}")
            if not subframe.mimo_mixed:
                continue
            for plp in subframe.plps:
                value = self.reader.read(1, 'L1D_plp_mimo')
                plp.plp_mimo = value
                self.lines.append(
                    f"{INDENT * PLP_HEADER_LEVEL}PLP #{plp.index} L1D_plp_mimo: {value}")
                if value:
                    self._read(plp, 'mixed_stream_combining', 1,
                               'L1D_plp_mimo_stream_combining', PLP_LEVEL)
                    self._read(plp, 'mixed_iq_interleaving', 1,
                               'L1D_plp_mimo_IQ_interleaving', PLP_LEVEL)
                    self._read(plp, 'mixed_ph', 1, 'L1D_plp_mimo_PH', PLP_LEVEL)

    def padding_bits(self) -> int:
        """
        Bits between the current position and the L1D CRC, as implied
        by L1B_L1_Detail_size_bytes. Zero or negative means none.
        """
        declared = self.state.l1_detail_size_bytes * 8 - CRC_BITS
        consumed = self.reader.position - self.state.basic_end_bit
        return declared - consumed

    def _decode_padding(self) -> None:
        if not self.config.skip_detail_padding:
            return
        remaining = self.padding_bits()
        if remaining <= 0:
            return

        logger.debug("Skipping %d L1-Detail padding bits", remaining)
        while remaining > 0:
            width = min(remaining, PADDING_GROUP_BITS)
            if self.config.show_padding_bits:
                value = self.reader.read(width, 'L1D_padding')
                digits = (width + 3) // 4
                self.lines.append(_line(0, f"L1D_padding[{width}]", f"0x{value:0{digits}x}"))
            else:
                self.reader.skip(width, 'L1D_padding')
            self.detail.padding_bits += width
            remaining -= width
