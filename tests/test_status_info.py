"""
Tests for tuner status string parsing and detail view headers.
"""

import pytest
from atsc3.StatusInfo import (
    parse_status_value, parse_db_value, plp_snr_line, build_header_lines,
    firmware_version_number, l1detail_available,
)

PLPINFO = "bsid=0x0123\n0: sym=1 mod=qam256 cod=10/15 lock=1\n1: sym=0 mod=qpsk cod=2/15 lock=0\n"
STREAMINFO = "tsid=0x0456\n3.1 WXYZ-HD\n"
STATUS = "ch=auto:33 lock=atsc3 ss=100(-35dBm) snq=80(18dB) seq=100"


class TestParseStatusValue:
    """Test key=value number extraction."""

    def test_hex(self):
        assert parse_status_value(PLPINFO, 'bsid=') == 0x123

    def test_decimal(self):
        assert parse_status_value('tsid=1234 x=1', 'tsid=') == 1234

    def test_upper_hex_prefix(self):
        assert parse_status_value('tsid=0XFF', 'tsid=') == 255

    def test_missing_key(self):
        assert parse_status_value(PLPINFO, 'tsid=') is None

    def test_not_a_number(self):
        assert parse_status_value('bsid=none', 'bsid=') is None

    def test_empty(self):
        assert parse_status_value(None, 'bsid=') is None
        assert parse_status_value('', 'bsid=') is None


class TestParseDbValue:
    """Test parenthesized dB readings."""

    def test_signal_strength(self):
        assert parse_db_value(STATUS, 'ss=') == -35

    def test_snr(self):
        assert parse_db_value(STATUS, 'snq=') == 18

    def test_no_db_reading(self):
        assert parse_db_value('ss=100 snq=80', 'ss=') is None

    def test_missing(self):
        assert parse_db_value(STATUS, 'dbg=') is None
        assert parse_db_value(None, 'ss=') is None


class TestHeaderLines:
    """Test the BSID/TSID and per-PLP header block."""

    def test_plp_snr_line(self):
        assert plp_snr_line('0: mod=qam256 cod=10/15 lock=1') == \
            '  -> Required SNR: Min 14.18 dB, Max 17.61 dB'
        assert plp_snr_line('0: mod=qam2048 cod=1/15') is None
        assert plp_snr_line('0: sym=1 lock=1') is None

    def test_full_header(self):
        lines = build_header_lines(PLPINFO, STREAMINFO)

        assert lines == [
            'L1D BSID: 291 (0x123)',
            'SLT TSID: 1110 (0x456)',
            ' ',
            '0: sym=1 mod=qam256 cod=10/15 lock=1',
            '  -> Required SNR: Min 14.18 dB, Max 17.61 dB',
            ' ',
            '1: sym=0 mod=qpsk cod=2/15 lock=0',
            '  -> Required SNR: Min -6.23 dB, Max -5.06 dB',
            ' ',
        ]

    def test_not_set(self):
        assert build_header_lines(None, '') == [
            'L1D BSID: Not set',
            'SLT TSID: Not set',
            ' ',
        ]

    def test_line_without_modcod(self):
        lines = build_header_lines('0: lock=0', None)
        assert lines[3:] == ['0: lock=0', ' ']


class TestFirmwareGate:
    """Test L1 detail availability checks."""

    @pytest.mark.parametrize("text,expected", [
        ('20250815', 20250815),
        ('20250815beta1', 20250815),
        ('beta', 0),
        ('', 0),
        (None, 0),
    ])
    def test_version_number(self, text, expected):
        assert firmware_version_number(text) == expected

    def test_available(self):
        assert l1detail_available(STATUS, '20250815', 20250623)

    def test_firmware_too_old(self):
        assert not l1detail_available(STATUS, '20250623', 20250623)
        assert not l1detail_available(STATUS, '20240101', 20250623)

    def test_status_without_db(self):
        assert not l1detail_available('ss=100 snq=80', '20250815', 20250623)
