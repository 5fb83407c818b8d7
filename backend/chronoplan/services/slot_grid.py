from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

DAY_SHORT_MAP = {
    "Mon": "Monday",
    "Tue": "Tuesday",
    "Wed": "Wednesday",
    "Thu": "Thursday",
    "Fri": "Friday",
    "Sat": "Saturday",
    "Sun": "Sunday",
}

DAY_VALUES = set(DAY_SHORT_MAP.values())
AVAILABILITY_VALUES = DAY_VALUES | set(DAY_SHORT_MAP)


def slot_key(day: str, slot_index: int) -> str:
    return f"{day}-S{slot_index}"


@dataclass(frozen=True)
class TimeSlot:
    day: str
    slot_index: int
    label: str | None = field(default=None, compare=False)

    @property
    def key(self) -> str:
        return slot_key(self.day, self.slot_index)


def build_slot_grid(
    working_days: Sequence[str],
    slots_per_day: int,
    slot_times: Sequence[str | None] | None = None,
) -> tuple[TimeSlot, ...]:
    """Enumerate every schedulable cell of a working week.

    Cells are ordered day-major, then by slot index. The Placer scans in this
    order, so it decides which periods fill first.
    """
    if slots_per_day < 1:
        raise ValueError("slots_per_day must be at least 1")
    if not working_days:
        raise ValueError("At least one working day is required")
    seen: set[str] = set()
    for day in working_days:
        if day in seen:
            raise ValueError(f"Duplicate working day: {day}")
        seen.add(day)

    labels = list(slot_times or [])
    slots: list[TimeSlot] = []
    for day in working_days:
        for index in range(slots_per_day):
            label = labels[index] if index < len(labels) and labels[index] else None
            slots.append(TimeSlot(day=day, slot_index=index, label=label))
    return tuple(slots)


def grid_position(grid: Sequence[TimeSlot]) -> dict[TimeSlot, int]:
    return {slot: position for position, slot in enumerate(grid)}
