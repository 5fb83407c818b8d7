from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from time import monotonic

from chronoplan.services.demand_builder import SessionDemand
from chronoplan.services.placer import GreedyFirstFit
from chronoplan.services.resource_pools import ResourceCatalog, ResourceState
from chronoplan.services.schedule import Schedule
from chronoplan.services.slot_grid import TimeSlot

logger = logging.getLogger(__name__)


class CancellationToken:
    """Cooperative stop signal shared by the candidates of one request.

    It fires when ``cancel()`` is called or when the optional deadline passes.
    The placement loop checks it before every attempt.
    """

    def __init__(self, timeout_seconds: float | None = None, *, clock: Callable[[], float] = monotonic) -> None:
        self._clock = clock
        self._event = threading.Event()
        self.deadline = clock() + timeout_seconds if timeout_seconds is not None else None

    def cancel(self) -> None:
        self._event.set()

    def is_cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self.deadline is not None and self._clock() >= self.deadline


@dataclass
class CandidateResult:
    index: int
    schedule: Schedule
    demands: list[SessionDemand]
    state: ResourceState
    solver: str
    timed_out: bool = False

    @property
    def unresolved(self) -> list[SessionDemand]:
        return [demand for demand in self.demands if demand.remaining > 0]

    @property
    def unresolved_sessions(self) -> int:
        return sum(demand.remaining for demand in self.unresolved)


def seed_state_from(schedule: Schedule) -> ResourceState:
    state = ResourceState()
    for assignment in schedule.fixed_assignments():
        if assignment.classroom_id:
            state.book_classroom(assignment.classroom_id, assignment.slot)
    return state


def run_candidate(
    index: int,
    demands: Sequence[SessionDemand],
    grid: Sequence[TimeSlot],
    fixed_seed: Schedule,
    seed_state: ResourceState,
    catalog: ResourceCatalog,
    solver: GreedyFirstFit,
    cancellation: CancellationToken | None = None,
) -> CandidateResult:
    schedule = fixed_seed.copy()
    state = seed_state.copy()
    worklist = [demand.fresh_copy() for demand in demands]
    plan = solver.prepare(grid, catalog)

    timed_out = False
    for demand in worklist:
        while demand.remaining > 0:
            if cancellation is not None and cancellation.is_cancelled():
                timed_out = True
                break
            if not solver.place_one(demand, plan, schedule, state, catalog):
                break
        if timed_out:
            break

    result = CandidateResult(
        index=index,
        schedule=schedule,
        demands=worklist,
        state=state,
        solver=solver.name,
        timed_out=timed_out,
    )
    if timed_out:
        logger.warning(
            "CANDIDATE TIMED OUT | option=%s | placed=%s | unresolved_sessions=%s",
            index,
            len(schedule),
            result.unresolved_sessions,
        )
    else:
        logger.debug(
            "CANDIDATE COMPLETE | option=%s | solver=%s | placed=%s | unresolved_sessions=%s",
            index,
            solver.name,
            len(schedule),
            result.unresolved_sessions,
        )
    return result


def generate_candidates(
    demands: Sequence[SessionDemand],
    grid: Sequence[TimeSlot],
    fixed_seed: Schedule,
    catalog: ResourceCatalog,
    option_count: int,
    *,
    seed_state: ResourceState | None = None,
    solver_factory: Callable[[int], GreedyFirstFit] | None = None,
    cancellation: CancellationToken | None = None,
    max_workers: int = 1,
) -> list[CandidateResult]:
    """Run the placer ``max(1, option_count)`` times from the same fixed seed.

    Every candidate starts from its own copy of the seed schedule and booking
    state, so runs share nothing mutable and may execute on a thread pool.
    Results come back ordered by candidate index.
    """
    count = max(1, option_count)
    if seed_state is None:
        seed_state = seed_state_from(fixed_seed)
    if solver_factory is None:
        solver_factory = lambda _index: GreedyFirstFit()  # noqa: E731

    # Solvers are built up front so seeded variants do not depend on thread timing.
    solvers = [solver_factory(index) for index in range(1, count + 1)]

    def run(index: int) -> CandidateResult:
        return run_candidate(
            index,
            demands,
            grid,
            fixed_seed,
            seed_state,
            catalog,
            solvers[index - 1],
            cancellation,
        )

    workers = min(max(1, max_workers), count)
    if workers == 1:
        results = [run(index) for index in range(1, count + 1)]
    else:
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="candidate") as pool:
            results = list(pool.map(run, range(1, count + 1)))

    logger.info(
        "CANDIDATES GENERATED | options=%s | workers=%s | demands=%s | grid=%s | timed_out=%s",
        count,
        workers,
        len(demands),
        len(grid),
        sum(1 for item in results if item.timed_out),
    )
    return results
