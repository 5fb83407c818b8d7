from __future__ import annotations

import logging
import random
from collections.abc import Sequence
from dataclasses import dataclass

from chronoplan.services.demand_builder import SessionDemand
from chronoplan.services.resource_pools import ClassroomRecord, ResourceCatalog, ResourceState
from chronoplan.services.schedule import Assignment, Schedule
from chronoplan.services.slot_grid import TimeSlot

logger = logging.getLogger(__name__)


def eligible_classrooms(
    subject_id: str,
    catalog: ResourceCatalog,
    classroom_order: Sequence[ClassroomRecord] | None = None,
) -> list[ClassroomRecord]:
    needed = catalog.expected_students(subject_id)
    equipment = catalog.equipment_required(subject_id)
    rooms = catalog.classrooms if classroom_order is None else classroom_order
    return [room for room in rooms if room.capacity >= needed and room.has_equipment(equipment)]


def faculty_can_take(demand: SessionDemand, catalog: ResourceCatalog, state: ResourceState) -> bool:
    faculty_id = demand.faculty_id
    if not faculty_id:
        return False
    faculty = catalog.faculty.get(faculty_id)
    if faculty is None:
        return False
    if not faculty.is_qualified_for(demand.subject_id):
        return False
    return state.assigned_count(faculty_id) < catalog.max_weekly_hours(faculty_id)


def place_one(
    demand: SessionDemand,
    grid: Sequence[TimeSlot],
    schedule: Schedule,
    state: ResourceState,
    catalog: ResourceCatalog,
    classroom_order: Sequence[ClassroomRecord] | None = None,
) -> bool:
    """Commit one session of ``demand`` at the first legal cell of ``grid``.

    Slots are scanned in grid order and classrooms in ``classroom_order``
    (catalog order by default). A slot is skipped when the cohort already has
    a session there, when the faculty is booked there, or when no eligible room
    is free. There is no backtracking: an early placement can starve a later
    demand.
    """
    if demand.remaining <= 0:
        return False
    # Faculty checks do not depend on the slot, so they end the scan early.
    if not faculty_can_take(demand, catalog, state):
        return False
    rooms = eligible_classrooms(demand.subject_id, catalog, classroom_order)
    if not rooms:
        return False

    faculty_id = demand.faculty_id
    for slot in grid:
        if schedule.is_occupied(slot):
            continue
        if state.is_faculty_booked(faculty_id, slot):
            continue
        room = next((item for item in rooms if not state.is_classroom_booked(item.id, slot)), None)
        if room is None:
            continue

        schedule.add(
            Assignment(
                slot=slot,
                subject_id=demand.subject_id,
                faculty_id=faculty_id,
                classroom_id=room.id,
            )
        )
        state.book_classroom(room.id, slot)
        state.book_faculty(faculty_id, slot)
        demand.consume()
        return True
    return False


@dataclass(frozen=True)
class ScanPlan:
    grid: tuple[TimeSlot, ...]
    classrooms: tuple[ClassroomRecord, ...]


class GreedyFirstFit:
    """Deterministic first-fit: grid order and catalog room order."""

    name = "greedy"

    def prepare(self, grid: Sequence[TimeSlot], catalog: ResourceCatalog) -> ScanPlan:
        return ScanPlan(grid=tuple(grid), classrooms=catalog.classrooms)

    def place_one(
        self,
        demand: SessionDemand,
        plan: ScanPlan,
        schedule: Schedule,
        state: ResourceState,
        catalog: ResourceCatalog,
    ) -> bool:
        return place_one(demand, plan.grid, schedule, state, catalog, classroom_order=plan.classrooms)


class RandomizedFirstFit(GreedyFirstFit):
    """First-fit over a seeded shuffle of the slot and room scan orders.

    Each candidate gets its own seed, so options differ from one another while
    a fixed seed still reproduces the same run.
    """

    name = "randomized"

    def __init__(self, seed: int | None = None) -> None:
        self.seed = seed
        self.random = random.Random(seed)

    def prepare(self, grid: Sequence[TimeSlot], catalog: ResourceCatalog) -> ScanPlan:
        slots = list(grid)
        rooms = list(catalog.classrooms)
        self.random.shuffle(slots)
        self.random.shuffle(rooms)
        return ScanPlan(grid=tuple(slots), classrooms=tuple(rooms))


def make_solver(strategy: str, *, seed: int | None = None) -> GreedyFirstFit:
    if strategy == RandomizedFirstFit.name:
        return RandomizedFirstFit(seed)
    if strategy == GreedyFirstFit.name:
        return GreedyFirstFit()
    raise ValueError(f"Unknown solver strategy: {strategy}")
