from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from chronoplan.services.resource_pools import ResourceState
from chronoplan.services.schedule import Assignment, Schedule
from chronoplan.services.slot_grid import TimeSlot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExistingAssignment:
    """One slot of an already approved timetable, as read from storage."""

    day: str
    slot_index: int
    subject_id: str
    faculty_id: str | None
    classroom_id: str | None
    label: str | None = None
    source_id: str | None = None

    def identity(self) -> dict:
        return {
            "slot_key": f"{self.day}-S{self.slot_index}",
            "subject_id": self.subject_id,
            "faculty_id": self.faculty_id,
            "classroom_id": self.classroom_id,
            "source_id": self.source_id,
        }


@dataclass(frozen=True)
class FixedSlotCollision:
    type: str
    slot_key: str
    message: str
    existing: dict | None = None
    incoming: dict = field(default_factory=dict)

    def to_report_entry(self) -> dict:
        return {
            "type": self.type,
            "message": self.message,
            "details": {"existing": self.existing, "new": self.incoming},
        }


def load_fixed_assignments(
    existing: Iterable[ExistingAssignment],
    *,
    grid: Sequence[TimeSlot] | None = None,
    state: ResourceState | None = None,
) -> tuple[Schedule, list[FixedSlotCollision]]:
    seed = Schedule()
    collisions: list[FixedSlotCollision] = []
    grid_slots = {slot: slot for slot in grid} if grid is not None else None

    for item in existing:
        slot = TimeSlot(day=item.day, slot_index=item.slot_index, label=item.label)
        if grid_slots is not None:
            if slot not in grid_slots:
                collisions.append(
                    FixedSlotCollision(
                        type="fixed_out_of_grid",
                        slot_key=slot.key,
                        message=f"Fixed slot {slot.key} for {item.subject_id} is outside the working grid",
                        incoming=item.identity(),
                    )
                )
                continue
            # Adopt the grid's label so the seeded slot renders like its neighbours.
            slot = grid_slots[slot]

        current = seed.at(slot)
        if current:
            first = current[0]
            collisions.append(
                FixedSlotCollision(
                    type="fixed_conflict",
                    slot_key=slot.key,
                    message=(
                        f"Fixed slot collision at {slot.key} between "
                        f"{first.subject_id} and {item.subject_id}"
                    ),
                    existing=first.identity(),
                    incoming=item.identity(),
                )
            )
            continue

        seed.add(
            Assignment(
                slot=slot,
                subject_id=item.subject_id,
                faculty_id=item.faculty_id,
                classroom_id=item.classroom_id,
                fixed=True,
            )
        )
        if state is not None and item.classroom_id:
            state.book_classroom(item.classroom_id, slot)

    if collisions:
        logger.warning(
            "FIXED SEED COLLISIONS | seeded=%s | collisions=%s",
            len(seed),
            len(collisions),
        )
    return seed, collisions
