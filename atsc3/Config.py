"""
Decoder and Detail View Configuration

Options that change how L1 payloads are decoded or how the detail view
is assembled. Settings can be persisted as JSON.

Padding skip: some tuner firmware pads L1-Detail out to
L1B_L1_Detail_size_bytes before the CRC, others do not. Skipping is on
by default and can be switched off per device.
"""

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Union

logger = logging.getLogger(__name__)


# First firmware release exposing /tunerN/l1detail
DEFAULT_MIN_FIRMWARE = 20250623


class ConfigValidationError(ValueError):
    """Raised when configuration values are invalid."""

    pass


@dataclass
class DecoderConfig:
    """
    L1 decode and detail view options.

    Attributes:
        skip_detail_padding: Skip padding implied by L1B_L1_Detail_size_bytes
            before reading L1D_crc
        show_padding_bits: Render skipped padding as hex groups
        min_firmware_version: Firmware numbers at or below this do not
            expose L1 detail
        max_lines: Upper bound on lines in the assembled detail view
            (0 = unlimited)

    Example:
        >>> config = DecoderConfig(show_padding_bits=True)
        >>> config.save('decoder.json')
    """

    skip_detail_padding: bool = True
    show_padding_bits: bool = False
    min_firmware_version: int = DEFAULT_MIN_FIRMWARE
    max_lines: int = 0

    def __post_init__(self) -> None:
        """Validate configuration values after initialization."""
        self._validate()

    def _validate(self) -> None:
        for name in ('skip_detail_padding', 'show_padding_bits'):
            if not isinstance(getattr(self, name), bool):
                raise ConfigValidationError(
                    f"{name} must be true or false, got {getattr(self, name)!r}"
                )
        for name in ('min_firmware_version', 'max_lines'):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise ConfigValidationError(
                    f"{name} must be an integer, got {value!r}"
                )
        if self.min_firmware_version < 0:
            raise ConfigValidationError(
                f"min_firmware_version must be non-negative, got {self.min_firmware_version}"
            )
        if self.max_lines < 0:
            raise ConfigValidationError(
                f"max_lines must be non-negative, got {self.max_lines}"
            )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DecoderConfig':
        """
        Build a config from a dict, ignoring unknown keys.

        Raises:
            ConfigValidationError: If a value is invalid
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.warning("Ignoring unknown config keys: %s", ', '.join(sorted(unknown)))
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'DecoderConfig':
        """
        Load configuration from a JSON file.

        Raises:
            ConfigValidationError: If the file is not valid JSON or holds
                invalid values
        """
        path = Path(path)
        try:
            with open(path, 'r') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid JSON in {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigValidationError(f"{path} must contain a JSON object")

        logger.info("Loaded configuration from %s", path)
        return cls.from_dict(data)

    def save(self, path: Union[str, Path]) -> None:
        """Write configuration as JSON."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info("Saved configuration to %s", path)
