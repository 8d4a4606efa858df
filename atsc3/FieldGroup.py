"""
Fixed-Layout Field Groups

Some L1 structures switch between two layouts depending on a value read
earlier, while keeping the same total width so that every following
field stays at the same offset. Each layout is a FieldGroup subclass
listing its (name, width) pairs; pairs of variants are checked for equal
width when they are declared.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Tuple, Type

from .BitReader import BitReader


@dataclass
class FieldGroup:
    """
    A run of fixed-width fields read back to back.

    Subclasses set FIELDS to a tuple of (name, width) pairs. Names that
    start with 'reserved' are consumed but not kept in values.

    Attributes:
        values: Decoded field values by name
    """

    FIELDS = ()

    values: Dict[str, int] = field(default_factory=dict)

    @classmethod
    def width(cls) -> int:
        """Total width of the group in bits."""
        return sum(width for _, width in cls.FIELDS)

    @classmethod
    def read(cls, reader: BitReader,
             on_field: Optional[Callable[[str, int], None]] = None) -> 'FieldGroup':
        """
        Consume the group from a reader.

        Args:
            reader: Bit reader positioned at the start of the group
            on_field: Called with (name, value) as each kept field is read

        Returns:
            Group instance holding the decoded values
        """
        group = cls()
        for name, width in cls.FIELDS:
            if name.startswith('reserved'):
                _skip(reader, width, name)
                continue
            value = reader.read(width, name)
            group.values[name] = value
            if on_field is not None:
                on_field(name, value)
        return group

    def __getitem__(self, name: str) -> int:
        return self.values[name]

    def get(self, name: str, default: int = 0) -> int:
        return self.values.get(name, default)


def _skip(reader: BitReader, width: int, name: str) -> None:
    while width > 0:
        step = min(width, 64)
        reader.skip(step, name)
        width -= step


def equal_width_variants(*variants: Type[FieldGroup]) -> Tuple[Type[FieldGroup], ...]:
    """
    Declare that alternative layouts must consume the same number of bits.

    Raises:
        ValueError: If the variants differ in width
    """
    widths = {variant.__name__: variant.width() for variant in variants}
    if len(set(widths.values())) != 1:
        raise ValueError(f"Field group variants differ in width: {widths}")
    return variants
