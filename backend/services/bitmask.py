"""
Deficiency Bitmask / State Decoding

The remote store packs deficiency categories into one integer (one bit per
category) and stores lifecycle states as small integer codes. Both are decoded
against versioned lookup tables that callers pass in explicitly:

    from constants import DEFICIENCY_TYPES, DEFICIENCY_STATES
    from services.bitmask import decode_bitmask, format_state

    decode_bitmask(8200, DEFICIENCY_TYPES)   # ['Fenster/Tueren', 'Notfall']
    decode_bitmask(0, DEFICIENCY_TYPES)      # ['Unbekannt']
    format_state(13, DEFICIENCY_STATES)      # 'Mieter bestaetigt'
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass(frozen=True)
class BitLabelTable:
    """Bit value -> label mapping for one version of the category bitmask."""
    version: str
    labels: Dict[int, str] = field(default_factory=dict)
    empty_label: str = "Unbekannt"

    def __post_init__(self):
        for bit_value in self.labels:
            if bit_value <= 0 or bit_value & (bit_value - 1):
                raise ValueError(
                    f"BitLabelTable {self.version}: {bit_value} is not a single bit"
                )

    @property
    def max_bit(self) -> int:
        return max(self.labels).bit_length() if self.labels else 0

    def unknown_bit_label(self, bit_index: int) -> str:
        return f"{self.empty_label} (Bit {bit_index})"


@dataclass(frozen=True)
class StateLabelTable:
    """State code -> label mapping for one version of the deficiency lifecycle."""
    version: str
    labels: Dict[int, str] = field(default_factory=dict)
    fallback_template: str = "Status {state}"


def decode_bitmask(value: Optional[int], table: BitLabelTable) -> List[str]:
    """
    Expand a packed category integer into one label per set bit.

    Labels are returned in ascending bit order. A value with no set bits
    (0, None, negative) decodes to [table.empty_label] so a deficiency is
    never silently dropped from category counts. Set bits that the table
    does not know are reported as "<empty_label> (Bit n)".

    Args:
        value: The raw bitmask from the deficiency record
        table: Versioned bit -> label table

    Returns:
        Non-empty list of labels
    """
    if not value or value < 0:
        return [table.empty_label]

    labels = []
    bit_index = 0
    remaining = int(value)
    while remaining:
        if remaining & 1:
            bit_value = 1 << bit_index
            label = table.labels.get(bit_value)
            labels.append(label if label is not None else table.unknown_bit_label(bit_index))
        remaining >>= 1
        bit_index += 1

    return labels or [table.empty_label]


def has_bit(value: Optional[int], bit_value: int) -> bool:
    """True if the packed value has the given bit set."""
    return bool(value) and (int(value) & bit_value) > 0


def format_state(state: Optional[int], table: StateLabelTable) -> str:
    """Label for a deficiency state code, falling back to 'Status <n>'."""
    if state is None:
        return table.fallback_template.format(state="?")
    label = table.labels.get(state)
    if label is not None:
        return label
    return table.fallback_template.format(state=state)
