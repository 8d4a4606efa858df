"""
ATSC 3.0 PLP & L1 Detail View

Assembles the line list a tuner control panel shows on its detail
screen, renders it to the terminal with Rich, and saves it to text.

Line layout:
    ' '                         spacer
    L1D BSID / SLT TSID         from plpinfo / streaminfo
    per-PLP status lines        each with optional SNR annotation
    ' ', SEPARATOR, ' '         only when L1 detail is available
    L1-Basic / L1-Detail lines  from the decoded L1 payload

SEPARATOR is a token for the renderer, drawn as a horizontal rule on
screen and written verbatim when saved.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, Union

from rich.console import Console, Group
from rich.panel import Panel
from rich.rule import Rule
from rich.text import Text
from rich.style import Style
from rich import box

from .Config import DecoderConfig
from .L1Signaling import parse_l1_base64
from .StatusInfo import build_header_lines

logger = logging.getLogger(__name__)


SEPARATOR = '__HLINE__'
BLANK = ' '
TITLE = ' ATSC 3.0 PLP & L1 Details '


def build_detail_lines(plpinfo: Optional[str], streaminfo: Optional[str],
                       l1detail: Optional[str] = None,
                       config: Optional[DecoderConfig] = None) -> List[str]:
    """
    Full detail view as an ordered line list.

    Args:
        plpinfo: Raw plpinfo text
        streaminfo: Raw streaminfo text
        l1detail: Base64 L1 payload, None when the tuner does not
            expose it
        config: Decoder options

    Returns:
        Display lines
    """
    config = config or DecoderConfig()

    lines = [BLANK]
    lines.extend(build_header_lines(plpinfo, streaminfo))

    if l1detail is not None:
        lines.extend([BLANK, SEPARATOR, BLANK])
        lines.extend(parse_l1_base64(l1detail, config))

    if config.max_lines and len(lines) > config.max_lines:
        logger.warning("Detail view clipped to %d of %d lines",
                       config.max_lines, len(lines))
        lines = lines[:config.max_lines]

    return lines


def save_lines(lines: Iterable[str], path: Union[str, Path]) -> Path:
    """
    Write lines verbatim, one per row.

    Args:
        lines: Display lines
        path: Output file

    Returns:
        Path written
    """
    path = Path(path)
    with open(path, 'w', newline='\n') as f:
        for line in lines:
            f.write(f"{line}\n")
    logger.info("Saved details to %s", path)
    return path


def default_save_name(rf_channel: int, stream_id: Optional[int],
                      when: Optional[datetime] = None) -> str:
    """
    File name used when saving the detail view.

    Example:
        >>> default_save_name(33, 291, datetime(2025, 7, 1, 12, 30, 5))
        'rf33-bsid291-details-20250701-123005.txt'
    """
    when = when or datetime.now()
    stream_id = 0 if stream_id is None else stream_id
    return f"rf{rf_channel}-bsid{stream_id}-details-{when:%Y%m%d-%H%M%S}.txt"


class DetailView:
    """
    Rich console renderer for detail lines.

    Example:
        >>> view = DetailView()
        >>> view.render(build_detail_lines(plpinfo, streaminfo, l1detail))
    """

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()
        self.theme = {
            'title': Style(color="bright_cyan", bold=True),
            'heading': Style(color="bright_white", bold=True),
            'snr': Style(color="green"),
            'warn': Style(color="yellow"),
            'rule': Style(color="bright_black"),
        }

    def _style_for(self, line: str) -> Optional[Style]:
        stripped = line.strip()
        if stripped.startswith('---') or stripped.startswith('Subframe #'):
            return self.theme['heading']
        if stripped.startswith('->'):
            return self.theme['snr']
        if stripped.startswith('***'):
            return self.theme['warn']
        return None

    def build(self, lines: List[str]) -> Panel:
        """Panel holding the rendered lines."""
        renderables = []
        for line in lines:
            if line == SEPARATOR:
                renderables.append(Rule(style=self.theme['rule']))
            else:
                renderables.append(Text(line, style=self._style_for(line) or ''))
        return Panel(
            Group(*renderables),
            title=Text(TITLE, style=self.theme['title']),
            title_align='left',
            box=box.SQUARE,
        )

    def render(self, lines: List[str]) -> None:
        self.console.print(self.build(lines))
