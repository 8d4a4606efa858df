"""
Synthetic ATSC 3.0 L1 Bitstreams

Test-only encoder that packs known L1-Basic / L1-Detail field values
into a payload with the same conditional layout the decoder expects.
"""

import base64
from typing import Dict, List, Optional


class BitWriter:
    """MSB-first bit packer."""

    def __init__(self):
        self.bits: List[int] = []

    @property
    def position(self) -> int:
        return len(self.bits)

    def write(self, value: int, width: int) -> None:
        assert 0 <= value < (1 << width), f"{value} does not fit in {width} bits"
        for i in range(width - 1, -1, -1):
            self.bits.append((value >> i) & 1)

    def to_bytes(self) -> bytes:
        bits = self.bits + [0] * (-len(self.bits) % 8)
        out = bytearray()
        for i in range(0, len(bits), 8):
            byte = 0
            for bit in bits[i:i + 8]:
                byte = (byte << 1) | bit
            out.append(byte)
        return bytes(out)


BASIC_DEFAULTS = dict(
    version=1,
    mimo_scattered_pilot_encoding=0,
    lls_flag=1,
    time_info_flag=0,
    return_channel_flag=0,
    papr_reduction=0,
    frame_length_mode=0,
    frame_length=500,
    excess_samples_per_symbol=1234,
    time_offset=40000,
    additional_samples=99,
    num_subframes=0,
    preamble_num_symbols=1,
    preamble_reduced_carriers=2,
    l1_detail_content_tag=0,
    l1_detail_size_bytes=0,
    l1_detail_fec_type=2,
    l1_additional_parity_mode=0,
    l1_detail_total_cells=4321,
    first_sub_mimo=0,
    first_sub_miso=0,
    first_sub_fft_size=1,
    first_sub_reduced_carriers=0,
    first_sub_guard_interval=5,
    first_sub_num_ofdm_symbols=70,
    first_sub_scattered_pilot_pattern=3,
    first_sub_scattered_pilot_boost=4,
    first_sub_sbs_first=0,
    first_sub_sbs_last=0,
    first_sub_mimo_mixed=0,
    crc=0xDEADBEEF,
)

SUBFRAME_DEFAULTS = dict(
    mimo=0,
    miso=0,
    fft_size=2,
    reduced_carriers=1,
    guard_interval=3,
    num_ofdm_symbols=40,
    scattered_pilot_pattern=7,
    scattered_pilot_boost=2,
    sbs_first=0,
    sbs_last=0,
    subframe_multiplex=0,
    frequency_interleaver=1,
    sbs_null_cells=0,
    mimo_mixed=0,
)

PLP_DEFAULTS = dict(
    plp_id=0,
    lls_flag=1,
    layer=0,
    start=0,
    size=1000000,
    scrambler_type=0,
    fec_type=1,
    modulation=3,
    code_rate=8,
    ti_mode=0,
    fec_block_start=0,
    cti_fec_block_start=0,
    num_channel_bonded=0,
    channel_bonding_format=0,
    bonded_rf_ids=(),
    mimo_stream_combining=0,
    mimo_iq_interleaving=0,
    mimo_ph=0,
    plp_type=0,
    num_subslices=0,
    subslice_interval=0,
    ti_extended_interleaving=0,
    cti_depth=0,
    cti_start_row=0,
    hti_inter_subframe=0,
    hti_num_ti_blocks=0,
    hti_num_fec_blocks_max=0,
    hti_num_fec_blocks=(0,),
    hti_cell_interleaver=0,
    ldm_injection_level=0,
    plp_mimo=0,
    mixed_stream_combining=0,
    mixed_iq_interleaving=0,
    mixed_ph=0,
)

DETAIL_DEFAULTS = dict(
    version=0,
    num_rf=0,
    bonded_bsids=(),
    time_sec=1700000000,
    time_msec=123,
    time_usec=456,
    time_nsec=789,
    bsid=0x1234,
    padding_bits=0,
    crc=0xCAFEF00D,
)


def basic_fields(**overrides) -> Dict:
    fields = dict(BASIC_DEFAULTS)
    fields.update(overrides)
    return fields


def subframe_fields(**overrides) -> Dict:
    fields = dict(SUBFRAME_DEFAULTS)
    fields.setdefault('plps', None)
    fields.update(overrides)
    if not fields['plps']:
        fields['plps'] = [plp_fields()]
    return fields


def plp_fields(**overrides) -> Dict:
    fields = dict(PLP_DEFAULTS)
    fields.update(overrides)
    return fields


def write_basic(w: BitWriter, b: Dict) -> None:
    w.write(b['version'], 3)
    w.write(b['mimo_scattered_pilot_encoding'], 1)
    w.write(b['lls_flag'], 1)
    w.write(b['time_info_flag'], 2)
    w.write(b['return_channel_flag'], 1)
    w.write(b['papr_reduction'], 2)
    w.write(b['frame_length_mode'], 1)
    if b['frame_length_mode'] == 0:
        w.write(b['frame_length'], 10)
        w.write(b['excess_samples_per_symbol'], 13)
    else:
        w.write(b['time_offset'], 16)
        w.write(b['additional_samples'], 7)
    w.write(b['num_subframes'], 8)
    w.write(b['preamble_num_symbols'], 3)
    w.write(b['preamble_reduced_carriers'], 3)
    w.write(b['l1_detail_content_tag'], 2)
    w.write(b['l1_detail_size_bytes'], 13)
    w.write(b['l1_detail_fec_type'], 3)
    w.write(b['l1_additional_parity_mode'], 2)
    w.write(b['l1_detail_total_cells'], 19)
    w.write(b['first_sub_mimo'], 1)
    w.write(b['first_sub_miso'], 2)
    w.write(b['first_sub_fft_size'], 2)
    w.write(b['first_sub_reduced_carriers'], 3)
    w.write(b['first_sub_guard_interval'], 4)
    w.write(b['first_sub_num_ofdm_symbols'], 11)
    w.write(b['first_sub_scattered_pilot_pattern'], 5)
    w.write(b['first_sub_scattered_pilot_boost'], 3)
    w.write(b['first_sub_sbs_first'], 1)
    w.write(b['first_sub_sbs_last'], 1)
    if b['version'] >= 1:
        w.write(b['first_sub_mimo_mixed'], 1)
        w.write(0, 47)
    else:
        w.write(0, 48)
    w.write(b['crc'], 32)


def _write_plp(w: BitWriter, p: Dict, num_rf: int, mimo: int) -> None:
    w.write(p['plp_id'], 6)
    w.write(p['lls_flag'], 1)
    w.write(p['layer'], 2)
    w.write(p['start'], 24)
    w.write(p['size'], 24)
    w.write(p['scrambler_type'], 2)
    w.write(p['fec_type'], 4)
    has_modcod = p['fec_type'] <= 5
    if has_modcod:
        w.write(p['modulation'], 4)
        w.write(p['code_rate'], 4)
    w.write(p['ti_mode'], 2)
    if p['ti_mode'] == 0:
        w.write(p['fec_block_start'], 15)
    elif p['ti_mode'] == 1:
        w.write(p['cti_fec_block_start'], 22)
    if num_rf > 0:
        w.write(p['num_channel_bonded'], 3)
        if p['num_channel_bonded'] > 0:
            w.write(p['channel_bonding_format'], 2)
            for rf_id in p['bonded_rf_ids']:
                w.write(rf_id, 3)
    if mimo:
        w.write(p['mimo_stream_combining'], 1)
        w.write(p['mimo_iq_interleaving'], 1)
        w.write(p['mimo_ph'], 1)
    if p['layer'] == 0:
        w.write(p['plp_type'], 1)
        if p['plp_type'] == 1:
            w.write(p['num_subslices'], 14)
            w.write(p['subslice_interval'], 24)
        if p['ti_mode'] in (1, 2) and has_modcod and p['modulation'] == 0:
            w.write(p['ti_extended_interleaving'], 1)
        if p['ti_mode'] == 1:
            w.write(p['cti_depth'], 3)
            w.write(p['cti_start_row'], 11)
        elif p['ti_mode'] == 2:
            w.write(p['hti_inter_subframe'], 1)
            w.write(p['hti_num_ti_blocks'], 4)
            w.write(p['hti_num_fec_blocks_max'], 12)
            for blocks in p['hti_num_fec_blocks']:
                w.write(blocks, 12)
            w.write(p['hti_cell_interleaver'], 1)
    else:
        w.write(p['ldm_injection_level'], 5)


def write_detail(w: BitWriter, b: Dict, d: Dict, subframes: List[Dict]) -> None:
    w.write(d['version'], 4)
    w.write(d['num_rf'], 3)
    for bsid in d['bonded_bsids']:
        w.write(bsid, 16)
        w.write(0, 3)
    if b['time_info_flag'] != 0:
        w.write(d['time_sec'], 32)
        w.write(d['time_msec'], 10)
        if b['time_info_flag'] >= 2:
            w.write(d['time_usec'], 10)
        if b['time_info_flag'] >= 3:
            w.write(d['time_nsec'], 10)

    for index, sf in enumerate(subframes):
        if index == 0:
            mimo = b['first_sub_mimo']
            sbs = b['first_sub_sbs_first'] or b['first_sub_sbs_last']
        else:
            mimo = sf['mimo']
            sbs = sf['sbs_first'] or sf['sbs_last']
            w.write(sf['mimo'], 1)
            w.write(sf['miso'], 2)
            w.write(sf['fft_size'], 2)
            w.write(sf['reduced_carriers'], 3)
            w.write(sf['guard_interval'], 4)
            w.write(sf['num_ofdm_symbols'], 11)
            w.write(sf['scattered_pilot_pattern'], 5)
            w.write(sf['scattered_pilot_boost'], 3)
            w.write(sf['sbs_first'], 1)
            w.write(sf['sbs_last'], 1)
        if b['num_subframes'] > 0:
            w.write(sf['subframe_multiplex'], 1)
        w.write(sf['frequency_interleaver'], 1)
        if sbs:
            w.write(sf['sbs_null_cells'], 13)
        w.write(len(sf['plps']) - 1, 6)
        for plp in sf['plps']:
            _write_plp(w, plp, d['num_rf'], mimo)

    if d['version'] >= 1:
        w.write(d['bsid'], 16)

    if d['version'] >= 2:
        for index, sf in enumerate(subframes):
            if index == 0:
                mixed = b['first_sub_mimo_mixed']
            else:
                mixed = sf['mimo_mixed']
                w.write(mixed, 1)
            if mixed:
                for plp in sf['plps']:
                    w.write(plp['plp_mimo'], 1)
                    if plp['plp_mimo']:
                        w.write(plp['mixed_stream_combining'], 1)
                        w.write(plp['mixed_iq_interleaving'], 1)
                        w.write(plp['mixed_ph'], 1)

    for _ in range(d['padding_bits']):
        w.write(1, 1)
    w.write(d['crc'], 32)


def build_payload(basic: Optional[Dict] = None, detail: Optional[Dict] = None,
                  subframes: Optional[List[Dict]] = None) -> bytes:
    """
    Pack an L1 payload.

    Args:
        basic: L1-Basic overrides
        detail: L1-Detail overrides
        subframes: Subframe dicts (default: num_subframes + 1 defaults)

    Returns:
        Payload bytes, zero-padded to a byte boundary
    """
    b = basic_fields(**(basic or {}))
    d = dict(DETAIL_DEFAULTS)
    d.update(detail or {})
    if subframes is None:
        subframes = [subframe_fields() for _ in range(b['num_subframes'] + 1)]
    assert len(subframes) == b['num_subframes'] + 1

    w = BitWriter()
    write_basic(w, b)
    write_detail(w, b, d, subframes)
    return w.to_bytes()


def detail_size_for(basic: Optional[Dict] = None, detail: Optional[Dict] = None,
                    subframes: Optional[List[Dict]] = None, padding_bits: int = 0) -> int:
    """
    L1B_L1_Detail_size_bytes for a payload with the given padding.

    Only valid when the L1-Detail length including padding and CRC is
    a whole number of bytes.
    """
    b = basic_fields(**(basic or {}))
    d = dict(DETAIL_DEFAULTS)
    d.update(detail or {})
    d['padding_bits'] = padding_bits
    if subframes is None:
        subframes = [subframe_fields() for _ in range(b['num_subframes'] + 1)]
    w = BitWriter()
    write_detail(w, b, d, subframes)
    assert w.position % 8 == 0, f"L1-Detail is {w.position} bits"
    return w.position // 8


def to_base64(data: bytes) -> str:
    return base64.b64encode(data).decode('ascii')
