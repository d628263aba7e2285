"""Time-slot labels and contiguous slot ranges.

A slot label looks like ``"09:00 - 10:00"``. A facility's slots form an ordered
sequence; adjacency in that sequence is what makes a multi-slot booking
contiguous. Bookings persist their slots joined with ``" & "``.
"""

import re
from datetime import datetime, timedelta
from typing import List, Sequence, Tuple

from utils.errors import ValidationError

SLOT_SEPARATOR = " & "
TIME_SEPARATOR = " - "

_LABEL_RE = re.compile(r"^\d{2}:\d{2} - \d{2}:\d{2}$")
_TIME_RE = re.compile(r"^\d{2}:\d{2}$")

INVALID_RANGE = "Invalid Time Range"


def _parse_clock(value: str) -> datetime:
    if not isinstance(value, str) or not _TIME_RE.match(value):
        raise ValidationError(f"Invalid time '{value}'. Use HH:MM")
    try:
        return datetime.strptime(value, "%H:%M")
    except ValueError:
        raise ValidationError(f"Invalid time '{value}'. Use HH:MM")


def parse_slot_label(label: str) -> Tuple[str, str]:
    if not isinstance(label, str) or not _LABEL_RE.match(label):
        raise ValidationError(f"Invalid time slot '{label}'. Format must be HH:MM - HH:MM")
    start, end = label.split(TIME_SEPARATOR)
    if _parse_clock(end) <= _parse_clock(start):
        raise ValidationError(f"Invalid time slot '{label}'. End must be after start")
    return start, end


def format_slot_label(start: str, end: str) -> str:
    return f"{start}{TIME_SEPARATOR}{end}"


def slot_minutes(label: str) -> int:
    start, end = parse_slot_label(label)
    return int((_parse_clock(end) - _parse_clock(start)).total_seconds() // 60)


def generate_time_slots(opening: str, closing: str, minutes: int) -> List[str]:
    """
    Build the slot sequence from opening to closing time.
    A trailing interval shorter than ``minutes`` is dropped.
    """
    open_at = _parse_clock(opening)
    close_at = _parse_clock(closing)
    if open_at >= close_at:
        raise ValidationError("Closing time must be after opening time")
    try:
        minutes = int(minutes)
    except (TypeError, ValueError):
        raise ValidationError("Slot duration must be a whole number of minutes")
    if minutes <= 0:
        raise ValidationError("Slot duration must be positive")

    step = timedelta(minutes=minutes)
    labels = []
    cursor = open_at
    while cursor + step <= close_at:
        labels.append(format_slot_label(cursor.strftime("%H:%M"), (cursor + step).strftime("%H:%M")))
        cursor += step
    if not labels:
        raise ValidationError("Slot duration is longer than opening hours")
    return labels


def split_stored_slots(value: str) -> List[str]:
    if not value:
        return []
    return value.split(SLOT_SEPARATOR)


def join_slots(labels: Sequence[str]) -> str:
    return SLOT_SEPARATOR.join(labels)


class SlotRange:
    """Contiguous run of slot indices into an ordered slot sequence."""

    __slots__ = ("_indices",)

    def __init__(self, indices: Sequence[int]):
        indices = tuple(indices)
        if not indices:
            raise ValidationError("At least one time slot is required")
        for prev, nxt in zip(indices, indices[1:]):
            if nxt != prev + 1:
                raise ValidationError("Selected time slots must be contiguous")
        self._indices = indices

    @classmethod
    def from_labels(cls, labels: Sequence[str], ordered_slots: Sequence[str]) -> "SlotRange":
        positions = {label: i for i, label in enumerate(ordered_slots)}
        indices = []
        for label in labels:
            if not isinstance(label, str):
                raise ValidationError("Time slots must be strings")
            if label not in positions:
                raise ValidationError(f"Unknown time slot '{label}'")
            indices.append(positions[label])
        if len(set(indices)) != len(indices):
            raise ValidationError("Duplicate time slot in selection")
        return cls(sorted(indices))

    @classmethod
    def parse(cls, stored: str, ordered_slots: Sequence[str]) -> "SlotRange":
        return cls.from_labels(split_stored_slots(stored), ordered_slots)

    @property
    def indices(self) -> Tuple[int, ...]:
        return self._indices

    @property
    def start(self) -> int:
        return self._indices[0]

    @property
    def end(self) -> int:
        return self._indices[-1]

    def __len__(self):
        return len(self._indices)

    def __eq__(self, other):
        return isinstance(other, SlotRange) and self._indices == other._indices

    def __hash__(self):
        return hash(self._indices)

    def __repr__(self):
        return f"SlotRange({self.start}..{self.end})"

    def labels(self, ordered_slots: Sequence[str]) -> List[str]:
        return [ordered_slots[i] for i in self._indices]

    def serialize(self, ordered_slots: Sequence[str]) -> str:
        return join_slots(self.labels(ordered_slots))


def compute_slot_range(start_label: str, end_label: str, ordered_slots: Sequence[str]) -> List[str]:
    """
    Slots from ``start_label`` through ``end_label`` inclusive.
    Start must strictly precede end in ``ordered_slots``.
    """
    slots = list(ordered_slots)
    if start_label not in slots or end_label not in slots:
        raise ValidationError(INVALID_RANGE)
    start, end = slots.index(start_label), slots.index(end_label)
    if start >= end:
        raise ValidationError(INVALID_RANGE)
    return SlotRange(range(start, end + 1)).labels(slots)


def slot_range_for_times(start_time: str, end_time: str, ordered_slots: Sequence[str]) -> List[str]:
    """
    Resolve a clock-time range (``"14:00"`` to ``"16:00"``) to slot labels:
    the slot starting at ``start_time`` through the slot ending at ``end_time``.
    """
    if _parse_clock(start_time) >= _parse_clock(end_time):
        raise ValidationError(INVALID_RANGE)

    slots = list(ordered_slots)
    start = next((i for i, s in enumerate(slots) if s.startswith(start_time + TIME_SEPARATOR)), None)
    end = next((i for i, s in enumerate(slots) if s.endswith(TIME_SEPARATOR + end_time)), None)
    if start is None or end is None or start > end:
        raise ValidationError(INVALID_RANGE)
    return SlotRange(range(start, end + 1)).labels(slots)
