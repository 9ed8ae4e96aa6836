"""Label plan value types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class LabelSlot:
    index: int
    text: str
    is_visible: bool


@dataclass(frozen=True)
class LabelPlan:
    """One slot per raw label, in input order."""

    slots: Tuple[LabelSlot, ...]
    capacity: int
    compact: bool
    font_size: Optional[int] = None

    @property
    def visible_indices(self) -> List[int]:
        return [slot.index for slot in self.slots if slot.is_visible]

    @property
    def visible_texts(self) -> List[str]:
        return [slot.text for slot in self.slots if slot.is_visible]

    def rendered_labels(self) -> List[str]:
        """Axis labels with hidden positions blanked, as chart renderers expect."""
        return [slot.text if slot.is_visible else "" for slot in self.slots]


__all__ = ["LabelPlan", "LabelSlot"]
