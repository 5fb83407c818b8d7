from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass

from chronoplan.services.slot_grid import TimeSlot, grid_position


@dataclass(frozen=True)
class Assignment:
    slot: TimeSlot
    subject_id: str
    faculty_id: str | None
    classroom_id: str | None
    fixed: bool = False

    @property
    def slot_key(self) -> str:
        return self.slot.key

    def identity(self) -> dict:
        return {
            "slot_key": self.slot.key,
            "subject_id": self.subject_id,
            "faculty_id": self.faculty_id,
            "classroom_id": self.classroom_id,
        }

    def to_dict(self) -> dict:
        return {
            "day": self.slot.day,
            "slot_index": self.slot.slot_index,
            "label": self.slot.label,
            "subject_id": self.subject_id,
            "faculty_id": self.faculty_id,
            "classroom_id": self.classroom_id,
            "fixed": self.fixed,
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "Assignment":
        return cls(
            slot=TimeSlot(day=str(data["day"]), slot_index=int(data["slot_index"]), label=data.get("label")),
            subject_id=str(data["subject_id"]),
            faculty_id=data.get("faculty_id"),
            classroom_id=data.get("classroom_id"),
            fixed=bool(data.get("fixed", False)),
        )


class Schedule:
    """Sparse slot -> assignment mapping; absent slots are free periods.

    Assignments are stored in insertion order and indexed by slot. More than
    one assignment may sit at a slot: a hand edited or restored schedule can
    hold double bookings, which is what the conflict detector is for.
    """

    def __init__(self, assignments: Iterable[Assignment] = ()) -> None:
        self._assignments: list[Assignment] = []
        self._by_slot: dict[TimeSlot, list[Assignment]] = defaultdict(list)
        for assignment in assignments:
            self.add(assignment)

    def add(self, assignment: Assignment) -> None:
        self._assignments.append(assignment)
        self._by_slot[assignment.slot].append(assignment)

    def is_occupied(self, slot: TimeSlot) -> bool:
        return bool(self._by_slot.get(slot))

    def at(self, slot: TimeSlot) -> list[Assignment]:
        return list(self._by_slot.get(slot, ()))

    def __iter__(self) -> Iterator[Assignment]:
        return iter(self._assignments)

    def __len__(self) -> int:
        return len(self._assignments)

    @property
    def assignments(self) -> list[Assignment]:
        return list(self._assignments)

    def occupied_slots(self) -> set[TimeSlot]:
        return {slot for slot, items in self._by_slot.items() if items}

    def fixed_assignments(self) -> list[Assignment]:
        return [item for item in self._assignments if item.fixed]

    def ordered(self, grid: Sequence[TimeSlot] | None = None) -> list[Assignment]:
        if grid is None:
            return list(self._assignments)
        position = grid_position(grid)
        fallback = len(position)
        indexed = list(enumerate(self._assignments))
        indexed.sort(key=lambda pair: (position.get(pair[1].slot, fallback), pair[0]))
        return [assignment for _, assignment in indexed]

    def to_slot_map(self, grid: Sequence[TimeSlot] | None = None) -> dict[str, Assignment]:
        # First assignment per slot wins; generated schedules hold one per slot.
        mapping: dict[str, Assignment] = {}
        for assignment in self.ordered(grid):
            mapping.setdefault(assignment.slot_key, assignment)
        return mapping

    def copy(self) -> "Schedule":
        return Schedule(self._assignments)

    def to_dicts(self, grid: Sequence[TimeSlot] | None = None) -> list[dict]:
        return [item.to_dict() for item in self.ordered(grid)]

    @classmethod
    def from_dicts(cls, rows: Iterable[Mapping]) -> "Schedule":
        return cls(Assignment.from_dict(row) for row in rows)
