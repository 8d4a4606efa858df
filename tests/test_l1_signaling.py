"""
Tests for the complete base64 to lines pipeline and truncation handling.
"""

import pytest
from atsc3.L1Signaling import L1Result, decode_l1, parse_l1_base64, truncation_marker
from atsc3.BitReader import BitstreamTruncatedError
from tests.bitstream import build_payload, plp_fields, subframe_fields, to_base64


def rich_payload():
    """Payload exercising most conditional branches."""
    subframes = [
        subframe_fields(plps=[
            plp_fields(plp_id=0, ti_mode=1, modulation=0, ti_extended_interleaving=1),
            plp_fields(plp_id=1, layer=1, ldm_injection_level=3, plp_mimo=1),
        ]),
        subframe_fields(mimo=1, sbs_last=1, mimo_mixed=1, plps=[
            plp_fields(plp_id=2, ti_mode=2, hti_inter_subframe=1, hti_num_ti_blocks=1,
                       hti_num_fec_blocks=(5, 6), num_channel_bonded=1,
                       bonded_rf_ids=(3,)),
        ]),
    ]
    return build_payload(
        basic={'num_subframes': 1, 'time_info_flag': 2, 'first_sub_mimo_mixed': 1},
        detail={'version': 2, 'num_rf': 1, 'bonded_bsids': (0x00AA,)},
        subframes=subframes,
    )


class TestDecodeL1:
    """Test decode_l1."""

    def test_empty(self):
        result = decode_l1(b'')
        assert result.lines == []
        assert not result.truncated
        assert not result.complete

    def test_complete(self):
        payload = rich_payload()
        result = decode_l1(payload)

        assert result.complete
        assert not result.truncated
        assert result.total_bits == len(payload) * 8
        assert result.state.subframe_count == 2
        assert result.basic.num_subframes == 1
        assert result.detail.crc == 0xCAFEF00D
        assert result.lines[0] == '--- L1-Basic Signaling ---'
        assert result.lines[-1] == 'L1D_crc: 0xcafef00d'

    def test_trailing_bytes_ignored(self):
        result = decode_l1(build_payload() + b'\x00' * 16)
        assert result.complete
        assert result.bit_position < result.total_bits

    def test_truncated_inside_basic(self):
        payload = build_payload()
        result = decode_l1(payload[:5])

        assert result.truncated
        assert result.state is None
        assert result.detail is None
        assert result.bit_position == 40
        assert result.lines[-1].startswith('*** L1 data truncated at bit ')

    def test_truncated_inside_detail(self):
        payload = build_payload()
        result = decode_l1(payload[:30])

        assert result.truncated
        assert result.state is not None
        assert result.detail is not None
        assert not result.complete
        assert '--- L1-Detail Signaling ---' in result.lines
        assert result.lines[-1].endswith('***')

    def test_every_truncation_point(self):
        payload = rich_payload()
        full = decode_l1(payload).lines

        for length in range(1, len(payload)):
            result = decode_l1(payload[:length])
            if result.complete:
                continue
            assert result.truncated, length
            assert result.bit_position == length * 8
            marker = result.lines[-1]
            assert marker.startswith('*** L1 data truncated'), length
            # Everything before the marker matches the full decode
            assert result.lines[:-1] == full[:len(result.lines) - 1], length

    @pytest.mark.parametrize("seed", range(8))
    def test_arbitrary_bytes_never_raise(self, seed):
        data = bytes((seed * 37 + i * 101) & 0xFF for i in range(64))
        result = decode_l1(data)
        assert isinstance(result, L1Result)
        assert result.lines[0] == '--- L1-Basic Signaling ---'


class TestTruncationMarker:
    """Test the truncation line."""

    def test_with_name(self):
        error = BitstreamTruncatedError('L1D_plp_size', 24, 300, 320)
        assert truncation_marker(error) == \
            '*** L1 data truncated at bit 300 of 320 (L1D_plp_size) ***'

    def test_without_name(self):
        error = BitstreamTruncatedError(None, 8, 0, 0)
        assert truncation_marker(error) == '*** L1 data truncated at bit 0 of 0 ***'


class TestParseL1Base64:
    """Test the base64 entry point."""

    def test_valid(self):
        payload = rich_payload()
        assert parse_l1_base64(to_base64(payload)) == decode_l1(payload).lines

    def test_invalid_base64(self):
        assert parse_l1_base64('QQ=') == []
        assert parse_l1_base64('not base64!') == []

    def test_missing_or_empty(self):
        assert parse_l1_base64(None) == []
        assert parse_l1_base64('') == []

    def test_single_byte(self):
        lines = parse_l1_base64('QQ==')
        assert lines[0] == '--- L1-Basic Signaling ---'
        assert lines[1] == 'L1B_version: 2'
        assert lines[-1] == '*** L1 data truncated at bit 8 of 8 (L1B_papr_reduction) ***'
