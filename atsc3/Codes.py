"""
ATSC 3.0 L1 Coded Field Enumerations

Many L1 fields are small integer codes with a fixed meaning. Each table
here is a closed enumeration: codes the standard has not assigned are
never looked up by index, they fall back to "Reserved" (or
"Unknown(<code>)" where the standard is silent on the range).

Reference: ATSC A/322:2024 Tables 9.2 - 9.27
"""

from enum import Enum
from typing import Optional


RESERVED = 'Reserved'


def unknown(code: int) -> str:
    """Label for a code outside a table with no reserved range."""
    return f"Unknown({code})"


class CodedField(Enum):
    """
    Enumeration whose members carry (code, label).

    Example:
        >>> FFTSize.describe(1)
        '16K'
        >>> FFTSize.describe(3)
        'Reserved'
    """

    def __init__(self, code: int, label: str):
        self.code = code
        self.label = label

    @classmethod
    def from_code(cls, code: int) -> Optional['CodedField']:
        """Member with the given code, or None."""
        for member in cls:
            if member.code == code:
                return member
        return None

    @classmethod
    def describe(cls, code: int, fallback: Optional[str] = RESERVED) -> str:
        """
        Display label for a code.

        Args:
            code: Raw field value
            fallback: Label for unassigned codes; None renders Unknown(code)

        Returns:
            Member label or fallback
        """
        member = cls.from_code(code)
        if member is not None:
            return member.label
        return fallback if fallback is not None else unknown(code)


class PilotEncoding(CodedField):
    WALSH_HADAMARD = (0, 'Walsh-Hadamard')
    NULL_PILOTS = (1, 'Null pilots')


class LLSFlag(CodedField):
    ABSENT = (0, 'No LLS')
    PRESENT = (1, 'LLS present')


class TimeInfo(CodedField):
    """L1B_time_info_flag: precision of L1D time fields."""
    NONE = (0, 'Not included')
    MS = (1, 'ms precision')
    US = (2, 'us precision')
    NS = (3, 'ns precision')


class PAPRReduction(CodedField):
    NONE = (0, 'None')
    TONE_RESERVATION = (1, 'Tone reservation only')
    ACE = (2, 'ACE only')
    BOTH = (3, 'Both TR and ACE')


class FrameLengthMode(CodedField):
    TIME_ALIGNED = (0, 'Time-aligned')
    SYMBOL_ALIGNED = (1, 'Symbol-aligned')


class L1DetailFecType(CodedField):
    """L1B_L1_Detail_fec_type (3 bits): protection modes 1-7."""
    MODE_1 = (0, 'Mode 1')
    MODE_2 = (1, 'Mode 2')
    MODE_3 = (2, 'Mode 3')
    MODE_4 = (3, 'Mode 4')
    MODE_5 = (4, 'Mode 5')
    MODE_6 = (5, 'Mode 6')
    MODE_7 = (6, 'Mode 7')


class AdditionalParity(CodedField):
    NOT_USED = (0, 'K=0')
    K1 = (1, 'K=1')
    K2 = (2, 'K=2')


class MIMO(CodedField):
    OFF = (0, 'No MIMO')
    ON = (1, 'MIMO')


class MISO(CodedField):
    OFF = (0, 'No MISO')
    MISO_64 = (1, 'MISO 64 coefficients')
    MISO_256 = (2, 'MISO 256 coefficients')


class FFTSize(CodedField):
    FFT_8K = (0, '8K')
    FFT_16K = (1, '16K')
    FFT_32K = (2, '32K')


class GuardInterval(CodedField):
    GI_1 = (1, 'GI_1_192')
    GI_2 = (2, 'GI_2_384')
    GI_3 = (3, 'GI_3_512')
    GI_4 = (4, 'GI_4_768')
    GI_5 = (5, 'GI_5_1024')
    GI_6 = (6, 'GI_6_1536')
    GI_7 = (7, 'GI_7_2048')
    GI_8 = (8, 'GI_8_2432')
    GI_9 = (9, 'GI_9_3072')
    GI_10 = (10, 'GI_10_3648')
    GI_11 = (11, 'GI_11_4096')
    GI_12 = (12, 'GI_12_4864')


class PilotBoost(CodedField):
    """Scattered pilot boost, 0 (none) to 4 (maximum)."""
    BOOST_0 = (0, '0 (none)')
    BOOST_1 = (1, '1')
    BOOST_2 = (2, '2')
    BOOST_3 = (3, '3')
    BOOST_4 = (4, '4 (max)')


class FrequencyInterleaver(CodedField):
    PREAMBLE_ONLY = (0, 'Preamble Only')
    ALL_SYMBOLS = (1, 'All Symbols')


class PLPLayer(CodedField):
    CORE = (0, 'Core')
    ENHANCED = (1, 'Enhanced')


class ScramblerType(CodedField):
    PRBS = (0, 'PRBS')


class PLPFecType(CodedField):
    """L1D_plp_fec_type (4 bits). Codes above 5 carry no ModCod."""
    BCH_16K = (0, 'BCH + 16K LDPC')
    BCH_64K = (1, 'BCH + 64K LDPC')
    CRC_16K = (2, 'CRC + 16K LDPC')
    CRC_64K = (3, 'CRC + 64K LDPC')
    LDPC_16K = (4, '16K LDPC only')
    LDPC_64K = (5, '64K LDPC only')


# Highest PLP FEC code followed by modulation and code rate fields
PLP_FEC_MAX_WITH_MODCOD = 5


class Modulation(CodedField):
    QPSK = (0, 'QPSK')
    QAM16 = (1, '16QAM')
    QAM64 = (2, '64QAM')
    QAM256 = (3, '256QAM')
    QAM1024 = (4, '1024QAM')
    QAM4096 = (5, '4096QAM')


class CodeRate(CodedField):
    CR_2_15 = (0, '2/15')
    CR_3_15 = (1, '3/15')
    CR_4_15 = (2, '4/15')
    CR_5_15 = (3, '5/15')
    CR_6_15 = (4, '6/15')
    CR_7_15 = (5, '7/15')
    CR_8_15 = (6, '8/15')
    CR_9_15 = (7, '9/15')
    CR_10_15 = (8, '10/15')
    CR_11_15 = (9, '11/15')
    CR_12_15 = (10, '12/15')
    CR_13_15 = (11, '13/15')


class TIMode(CodedField):
    NONE = (0, 'No TI')
    CTI = (1, 'CTI')
    HTI = (2, 'HTI')


class PLPType(CodedField):
    NON_DISPERSED = (0, 'non-dispersed')
    DISPERSED = (1, 'dispersed')
