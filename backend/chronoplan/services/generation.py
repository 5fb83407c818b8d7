from __future__ import annotations

import logging
from dataclasses import dataclass, field
from time import perf_counter

from sqlalchemy.orm import Session

from chronoplan.core.config import Settings
from chronoplan.core.exceptions import InputInsufficiencyError, ResourceNotFoundError, SchedulerError
from chronoplan.models.constraint_set import ConstraintSet
from chronoplan.models.generation_log import GenerationStatus
from chronoplan.models.timetable_version import TimetableVersion
from chronoplan.schemas.generator import (
    ConflictReportEntry,
    FitnessOut,
    GeneratedOption,
    GenerateTimetableRequest,
    GenerateTimetableResponse,
    TimetableReportOut,
)
from chronoplan.schemas.timetable import AssignmentOut, SessionDemandOut
from chronoplan.services.candidate_generator import CancellationToken, CandidateResult, generate_candidates
from chronoplan.services.conflict_service import ConflictDetector
from chronoplan.services.constraint_engine import (
    HardConstraint,
    SoftConstraint,
    detect_violations,
    require_valid_constraints,
)
from chronoplan.services.demand_builder import build_demands
from chronoplan.services.fitness import FitnessResult, rank_candidates, score_schedule
from chronoplan.services.fixed_assignments import load_fixed_assignments
from chronoplan.services.placer import GreedyFirstFit, make_solver
from chronoplan.services.resource_pools import ResourceCatalog, ResourceState
from chronoplan.services.schedule import Schedule
from chronoplan.services.slot_grid import TimeSlot, build_slot_grid
from chronoplan.services.snapshot import GenerationInputs, load_generation_inputs
from chronoplan.services.workload import workload_from_faculty_ids

logger = logging.getLogger(__name__)


def load_constraint_set(db: Session, constraint_set_id: str) -> list[HardConstraint | SoftConstraint]:
    record = db.get(ConstraintSet, constraint_set_id)
    if record is None:
        raise ResourceNotFoundError("Constraint set", constraint_set_id)
    validated = require_valid_constraints(record.hard_constraints or [], record.soft_constraints or [])
    return [*validated.hard_constraints, *validated.soft_constraints]


def build_catalog(inputs: GenerationInputs, settings: Settings) -> ResourceCatalog:
    return ResourceCatalog(
        subjects=inputs.subjects,
        faculty=inputs.faculty,
        classrooms=inputs.classrooms,
        default_max_weekly_hours=settings.default_max_weekly_hours,
        default_expected_students=settings.default_expected_students,
    )


def unresolved_entries(results: list[CandidateResult]) -> list[ConflictReportEntry]:
    entries = []
    for result in results:
        for demand in result.unresolved:
            entries.append(
                ConflictReportEntry(
                    type="unresolved",
                    message=f"Could not schedule {demand.remaining} session(s) for subject {demand.subject_id}",
                    details={"option": result.index, **demand.to_dict()},
                )
            )
    return entries


@dataclass
class GenerationRun:
    response: GenerateTimetableResponse
    status: GenerationStatus
    solver: str
    option_count: int
    best_fitness: float | None = None
    unresolved_sessions: int = 0
    fixed_collisions: int = 0
    input_counts: dict[str, int] = field(default_factory=dict)


class TimetableGenerator:
    def __init__(
        self,
        *,
        db: Session,
        payload: GenerateTimetableRequest,
        settings: Settings,
    ) -> None:
        self.db = db
        self.payload = payload
        self.settings = settings
        self.strategy = payload.strategy or settings.solver_strategy
        self.seed = payload.seed if payload.seed is not None else settings.random_seed
        self.option_count = min(payload.options, settings.max_options)
        if self.option_count < payload.options:
            logger.info(
                "TIMETABLE OPTIONS CAPPED | requested=%s | max_options=%s",
                payload.options,
                settings.max_options,
            )

        self.inputs = load_generation_inputs(db, payload.department, payload.semester, payload.academic_year)
        self._validate_inputs()
        self.catalog = build_catalog(self.inputs, settings)
        self.grid = self._build_grid()
        self.constraints = (
            load_constraint_set(db, payload.constraint_set_id) if payload.constraint_set_id else []
        )

    def _validate_inputs(self) -> None:
        # Checked in the order a scheduler would fix them: what to teach, who teaches, where.
        if not self.inputs.subjects:
            raise InputInsufficiencyError(
                "subjects",
                details={"department": self.payload.department, "semester": self.payload.semester},
            )
        if not self.inputs.faculty:
            raise InputInsufficiencyError("faculties", details={"department": self.payload.department})
        if not self.inputs.classrooms:
            raise InputInsufficiencyError("classrooms", details={"department": self.payload.department})

    def _build_grid(self) -> tuple[TimeSlot, ...]:
        department = self.inputs.department
        days = self.payload.days or list(department.working_days or []) or list(self.settings.default_working_days)
        slots_per_day = self.payload.slots_per_day or self.settings.default_slots_per_day
        slot_times = self.payload.slot_times or list(department.slot_labels or [])
        try:
            return build_slot_grid(days, slots_per_day, slot_times)
        except ValueError as exc:
            raise SchedulerError(str(exc), details={"days": days, "slots_per_day": slots_per_day}) from exc

    def _solver_factory(self, index: int) -> GreedyFirstFit:
        # Offset the seed per candidate so randomized options differ but stay reproducible.
        seed = self.seed + index if self.seed is not None else None
        return make_solver(self.strategy, seed=seed)

    def _score(self, result: CandidateResult) -> FitnessResult:
        return score_schedule(
            result.schedule,
            result.state.faculty_workload(),
            grid_size=len(self.grid),
            classroom_count=len(self.catalog.classrooms),
        )

    def _option(self, rank: int, result: CandidateResult, fitness: FitnessResult) -> GeneratedOption:
        slot_map = result.schedule.to_slot_map(self.grid)
        violations = None
        if self.constraints:
            violations = detect_violations(result.schedule, self.constraints, self.catalog)
        return GeneratedOption(
            id=result.index,
            rank=rank,
            solver=result.solver,
            assignments={key: AssignmentOut.from_assignment(item) for key, item in slot_map.items()},
            unresolved=[SessionDemandOut.from_demand(item) for item in result.unresolved],
            fitness=FitnessOut(**fitness.to_dict()),
            conflicts=ConflictDetector(result.schedule).detect(),
            violations=violations,
            timed_out=result.timed_out,
        )

    def run(self) -> GenerationRun:
        started = perf_counter()
        seed_state = ResourceState()
        fixed_seed, collisions = load_fixed_assignments(self.inputs.existing, grid=self.grid, state=seed_state)
        demands = build_demands(self.inputs.subjects, default_sessions=self.settings.default_teaching_hours)

        cancellation = CancellationToken(self.settings.generation_timeout_seconds)
        results = generate_candidates(
            demands,
            self.grid,
            fixed_seed,
            self.catalog,
            self.option_count,
            seed_state=seed_state,
            solver_factory=self._solver_factory,
            cancellation=cancellation,
            max_workers=self.settings.generation_workers,
        )

        ranked = rank_candidates((result, self._score(result)) for result in results)
        options = [self._option(rank, result, fitness) for rank, (result, fitness) in enumerate(ranked, start=1)]
        best_result, best_fitness = ranked[0]

        report = unresolved_entries(results)
        report.extend(ConflictReportEntry(**item.to_report_entry()) for item in collisions)

        if any(result.timed_out for result in results):
            status = GenerationStatus.timeout
            message = "Generation timed out; partial timetable returned."
        elif best_result.unresolved_sessions:
            status = GenerationStatus.partial_success
            message = "Generated timetable with unresolved sessions."
        else:
            status = GenerationStatus.success
            message = "Generated timetable."

        debug = None
        if self.payload.debug:
            debug = {
                "counts": self.inputs.counts(),
                "grid": {"days": len({slot.day for slot in self.grid}), "slots": len(self.grid)},
                "solver": self.strategy,
                "seed": self.seed,
                "demands": [item.to_dict() for item in demands],
                "elapsed_ms": int((perf_counter() - started) * 1000),
            }

        response = GenerateTimetableResponse(
            ok=True,
            message=message,
            options=options,
            conflict_report=report,
            debug=debug,
        )
        return GenerationRun(
            response=response,
            status=status,
            solver=self.strategy,
            option_count=len(options),
            best_fitness=best_fitness.score,
            unresolved_sessions=best_result.unresolved_sessions,
            fixed_collisions=len(collisions),
            input_counts=self.inputs.counts(),
        )


def generate_timetable(db: Session, payload: GenerateTimetableRequest, settings: Settings) -> GenerationRun:
    return TimetableGenerator(db=db, payload=payload, settings=settings).run()


def version_report(
    db: Session,
    version: TimetableVersion,
    settings: Settings,
    constraint_set_id: str | None = None,
) -> TimetableReportOut:
    """Judge a stored version on demand: conflicts, violations and fitness."""
    inputs = load_generation_inputs(db, version.department_id, version.semester, version.academic_year)
    catalog = build_catalog(inputs, settings)
    constraints = load_constraint_set(db, constraint_set_id) if constraint_set_id else []
    schedule = Schedule.from_dicts(version.assignments or [])

    summary = version.summary or {}
    days = summary.get("days") or list(inputs.department.working_days or []) or settings.default_working_days
    slots_per_day = summary.get("slots_per_day") or settings.default_slots_per_day
    fitness = score_schedule(
        schedule,
        workload_from_faculty_ids(item.faculty_id for item in schedule),
        grid_size=len(days) * slots_per_day,
        classroom_count=len(catalog.classrooms),
    )
    return TimetableReportOut(
        version_id=version.id,
        conflicts=ConflictDetector(schedule).detect(),
        violations=detect_violations(schedule, constraints, catalog),
        fitness=FitnessOut(**fitness.to_dict()),
    )
