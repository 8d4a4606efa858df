"""
ATSC 3.0 L1 Signaling Command Line Interface

Usage:
    python -m atsc3 decode <base64|@file>         # Decode an L1 payload
    python -m atsc3 details --plpinfo FILE ...    # Full PLP & L1 detail view
    python -m atsc3 snr <mod> <cod>               # Required SNR for a ModCod

Examples:
    # Decode the value read from /tuner0/l1detail
    python -m atsc3 decode @l1detail.txt

    # Show padding bits instead of skipping them, in a Rich panel
    python -m atsc3 decode @l1detail.txt --show-padding --rich

    # Assemble the detail screen from captured status values and save it
    python -m atsc3 details --plpinfo plpinfo.txt --streaminfo streaminfo.txt \\
        --l1detail @l1detail.txt --save captures/

    # Look up a ModCod the way tuners report it
    python -m atsc3 snr qam256 10/15
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from . import __version__

logger = logging.getLogger('atsc3')


def _read_arg(value: Optional[str]) -> Optional[str]:
    """Literal argument, or file contents for '@path', stripped."""
    if value is None:
        return None
    if not value.startswith('@'):
        return value.strip()
    path = Path(value[1:])
    with open(path, 'r') as f:
        return f.read().strip()


def _read_file(path: Optional[str]) -> Optional[str]:
    if path is None:
        return None
    with open(path, 'r') as f:
        return f.read()


def _load_config(args: argparse.Namespace):
    from .Config import DecoderConfig

    config = DecoderConfig.load(args.config) if args.config else DecoderConfig()
    overrides = {}
    if getattr(args, 'no_pad_skip', False):
        overrides['skip_detail_padding'] = False
    if getattr(args, 'show_padding', False):
        overrides['show_padding_bits'] = True
    if overrides:
        config = DecoderConfig.from_dict({**config.to_dict(), **overrides})
    return config


def _output(args: argparse.Namespace, lines) -> None:
    from .DetailView import DetailView, save_lines, default_save_name

    if getattr(args, 'rich', False):
        DetailView().render(lines)
    else:
        for line in lines:
            print(line)

    if args.save:
        path = Path(args.save)
        if path.is_dir():
            path = path / default_save_name(args.rf_channel, args.stream_id)
        save_lines(lines, path)
        print(f"Saved details to {path}")


def cmd_decode(args: argparse.Namespace) -> int:
    """Decode a base64 L1 payload."""
    from .Base64 import decode_base64
    from .L1Signaling import decode_l1

    text = _read_arg(args.payload)
    data = decode_base64(text)
    if data is None:
        print("Error: L1 payload is not valid base64", file=sys.stderr)
        return 1
    if not data:
        print("Error: L1 payload is empty", file=sys.stderr)
        return 1

    result = decode_l1(data, _load_config(args))
    _output(args, result.lines)

    if result.truncated:
        print(f"Warning: payload truncated at bit {result.bit_position} "
              f"of {result.total_bits}", file=sys.stderr)
    return 0


def cmd_details(args: argparse.Namespace) -> int:
    """Assemble the PLP & L1 detail view from captured status values."""
    from .DetailView import build_detail_lines
    from .StatusInfo import l1detail_available, parse_status_value

    config = _load_config(args)
    plpinfo = _read_file(args.plpinfo)
    streaminfo = _read_file(args.streaminfo)
    l1detail = _read_arg(args.l1detail)

    if l1detail is not None and args.status is not None:
        status = _read_file(args.status)
        if not l1detail_available(status, args.firmware, config.min_firmware_version):
            logger.info("Tuner does not expose L1 detail; omitting it")
            l1detail = None

    if args.stream_id is None:
        args.stream_id = parse_status_value(plpinfo, 'bsid=')
        if args.stream_id is None:
            args.stream_id = parse_status_value(streaminfo, 'tsid=')

    lines = build_detail_lines(plpinfo, streaminfo, l1detail, config)
    _output(args, lines)
    return 0


def cmd_snr(args: argparse.Namespace) -> int:
    """Show the required SNR for a ModCod."""
    from .ModCod import normalize_modulation, lookup_snr

    modulation = normalize_modulation(args.modulation)
    snr = lookup_snr(modulation, args.code_rate)
    if snr is None:
        print(f"No SNR entry for {modulation} {args.code_rate}")
        return 1

    print(f"{modulation} {args.code_rate}: "
          f"Min {snr.min_db:.2f} dB, Max {snr.max_db:.2f} dB")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='atsc3',
        description='ATSC 3.0 L1 signaling inspector',
    )
    parser.add_argument('--version', action='version',
                        version=f'atsc3 {__version__}')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Debug logging')
    parser.add_argument('--config', help='Decoder configuration (JSON)')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    def add_output_options(sub: argparse.ArgumentParser) -> None:
        sub.add_argument('--save', help='Save lines to file (or directory)')
        sub.add_argument('--rich', action='store_true',
                         help='Render in a Rich panel')
        sub.add_argument('--rf-channel', type=int, default=0,
                         help='RF channel for default save name (default: 0)')
        sub.add_argument('--stream-id', type=int, default=None,
                         help='BSID/TSID for default save name')
        sub.add_argument('--no-pad-skip', action='store_true',
                         help='Read L1D_crc right after the last field')
        sub.add_argument('--show-padding', action='store_true',
                         help='Show L1-Detail padding bits')

    decode_parser = subparsers.add_parser('decode', help='Decode base64 L1 payload')
    decode_parser.add_argument('payload', help='Base64 text or @file')
    add_output_options(decode_parser)

    details_parser = subparsers.add_parser('details', help='PLP & L1 detail view')
    details_parser.add_argument('--plpinfo', help='File with plpinfo text')
    details_parser.add_argument('--streaminfo', help='File with streaminfo text')
    details_parser.add_argument('--l1detail', help='Base64 L1 payload or @file')
    details_parser.add_argument('--status', help='File with tuner status text')
    details_parser.add_argument('--firmware', default='',
                                help='Firmware version string (/sys/version)')
    add_output_options(details_parser)

    snr_parser = subparsers.add_parser('snr', help='Required SNR for a ModCod')
    snr_parser.add_argument('modulation', help='Modulation, e.g. qam256')
    snr_parser.add_argument('code_rate', help='Code rate, e.g. 10/15')

    return parser


def main(argv=None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        'decode': cmd_decode,
        'details': cmd_details,
        'snr': cmd_snr,
    }

    from .Config import ConfigValidationError

    try:
        return commands[args.command](args)
    except (OSError, ConfigValidationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
