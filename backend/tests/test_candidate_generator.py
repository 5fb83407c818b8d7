from chronoplan.services.candidate_generator import CancellationToken, generate_candidates
from chronoplan.services.conflict_service import detect_conflicts
from chronoplan.services.demand_builder import SessionDemand, build_demands
from chronoplan.services.fitness import score_schedule
from chronoplan.services.fixed_assignments import ExistingAssignment, load_fixed_assignments
from chronoplan.services.placer import RandomizedFirstFit
from chronoplan.services.resource_pools import (
    ClassroomRecord,
    FacultyRecord,
    ResourceCatalog,
    SubjectRecord,
)
from chronoplan.services.schedule import Schedule
from chronoplan.services.slot_grid import build_slot_grid

WEEK = ["Mon", "Tue", "Wed", "Thu", "Fri"]


def _assert_no_double_booking(schedule):
    seen_faculty = set()
    seen_rooms = set()
    for item in schedule:
        faculty_key = (item.slot, item.faculty_id)
        room_key = (item.slot, item.classroom_id)
        assert faculty_key not in seen_faculty
        assert room_key not in seen_rooms
        seen_faculty.add(faculty_key)
        seen_rooms.add(room_key)


def test_single_subject_fills_three_sessions():
    catalog = ResourceCatalog(
        subjects=[SubjectRecord(id="s1", teaching_hours=3, faculty_id="f1", max_students=60)],
        faculty=[FacultyRecord(id="f1", max_weekly_hours=40)],
        classrooms=[ClassroomRecord(id="r1", capacity=100)],
    )
    grid = build_slot_grid(WEEK, 5)

    [result] = generate_candidates(build_demands(catalog.subjects.values()), grid, Schedule(), catalog, 1)

    assert len(result.schedule) == 3
    assert result.unresolved == []
    assert detect_conflicts(result.schedule).summary.total == 0
    fitness = score_schedule(
        result.schedule,
        result.state.faculty_workload(),
        grid_size=len(grid),
        classroom_count=1,
    )
    assert fitness.score == 100.0


def test_weekly_cap_leaves_sessions_unresolved():
    catalog = ResourceCatalog(
        subjects=[
            SubjectRecord(id="s1", teaching_hours=2, faculty_id="f1"),
            SubjectRecord(id="s2", teaching_hours=2, faculty_id="f1"),
        ],
        faculty=[FacultyRecord(id="f1", max_weekly_hours=3)],
        classrooms=[ClassroomRecord(id="r1", capacity=100)],
    )
    grid = build_slot_grid(WEEK, 5)

    [result] = generate_candidates(build_demands(catalog.subjects.values()), grid, Schedule(), catalog, 1)

    assert len(result.schedule) <= 3
    assert [(item.subject_id, item.remaining) for item in result.unresolved] == [("s2", 1)]
    assert result.unresolved_sessions == 1


def test_undersized_room_is_non_placement_not_conflict():
    catalog = ResourceCatalog(
        subjects=[SubjectRecord(id="s1", teaching_hours=1, faculty_id="f1", max_students=60)],
        faculty=[FacultyRecord(id="f1")],
        classrooms=[ClassroomRecord(id="r1", capacity=10)],
    )
    grid = build_slot_grid(WEEK, 5)

    [result] = generate_candidates(build_demands(catalog.subjects.values()), grid, Schedule(), catalog, 1)

    assert len(result.schedule) == 0
    assert [(item.subject_id, item.remaining) for item in result.unresolved] == [("s1", 1)]
    assert detect_conflicts(result.schedule).summary.total == 0


def test_fixed_seed_survives_generation(small_catalog, two_day_grid):
    seed, collisions = load_fixed_assignments(
        [ExistingAssignment(day="Mon", slot_index=0, subject_id="s9", faculty_id="f9", classroom_id="r1")],
        grid=two_day_grid,
    )
    demands = build_demands(small_catalog.subjects.values())

    results = generate_candidates(demands, two_day_grid, seed, small_catalog, 2)

    assert collisions == []
    for result in results:
        fixed = result.schedule.fixed_assignments()
        assert [(item.slot_key, item.subject_id) for item in fixed] == [("Mon-S0", "s9")]
        assert all(not item.fixed for item in result.schedule if item.slot_key != "Mon-S0")
        assert len(result.schedule.to_slot_map(two_day_grid)) == len(result.schedule)
    # The seed itself is never mutated by a candidate.
    assert len(seed) == 1


def test_options_are_indexed_and_independent(small_catalog, two_day_grid):
    demands = build_demands(small_catalog.subjects.values())

    results = generate_candidates(demands, two_day_grid, Schedule(), small_catalog, 3, max_workers=3)

    assert [item.index for item in results] == [1, 2, 3]
    assert all(item.demands is not results[0].demands for item in results[1:])
    assert [item.remaining for item in demands] == [2, 2]
    for result in results:
        _assert_no_double_booking(result.schedule)


def test_zero_options_still_produces_one():
    catalog = ResourceCatalog(subjects=[], faculty=[], classrooms=[])
    results = generate_candidates([], build_slot_grid(["Mon"], 1), Schedule(), catalog, 0)

    assert len(results) == 1


def test_randomized_candidates_reproduce_with_seed(small_catalog):
    grid = build_slot_grid(WEEK, 6)
    demands = build_demands(small_catalog.subjects.values())

    def run():
        results = generate_candidates(
            demands,
            grid,
            Schedule(),
            small_catalog,
            2,
            solver_factory=lambda index: RandomizedFirstFit(seed=100 + index),
        )
        return [[item.identity() for item in result.schedule] for result in results]

    assert run() == run()


def test_many_subjects_never_double_book():
    subjects = [
        SubjectRecord(id=f"s{index}", teaching_hours=3, faculty_id=f"f{index % 3}", max_students=30)
        for index in range(8)
    ]
    catalog = ResourceCatalog(
        subjects=subjects,
        faculty=[FacultyRecord(id=f"f{index}", max_weekly_hours=6) for index in range(3)],
        classrooms=[ClassroomRecord(id="small", capacity=20), ClassroomRecord(id="r1", capacity=30)],
    )
    grid = build_slot_grid(WEEK, 4)

    [result] = generate_candidates(
        build_demands(subjects),
        grid,
        Schedule(),
        catalog,
        1,
        solver_factory=lambda index: RandomizedFirstFit(seed=index),
    )

    _assert_no_double_booking(result.schedule)
    assert all(item.classroom_id == "r1" for item in result.schedule)
    assert all(count <= 6 for count in result.state.faculty_workload().values())
    assert len(result.schedule) + result.unresolved_sessions == 24


def test_cancelled_token_marks_candidates_timed_out(small_catalog, two_day_grid):
    token = CancellationToken()
    token.cancel()
    demands = build_demands(small_catalog.subjects.values())

    results = generate_candidates(demands, two_day_grid, Schedule(), small_catalog, 2, cancellation=token)

    assert all(item.timed_out for item in results)
    assert all(len(item.schedule) == 0 for item in results)
    assert [item.subject_id for item in results[0].unresolved] == ["s1", "s2"]


def test_deadline_stops_placement_midway(small_catalog, two_day_grid):
    ticks = iter(range(100))
    token = CancellationToken(3, clock=lambda: next(ticks))
    demand = SessionDemand(subject_id="s1", faculty_id="f1", required_sessions=5)

    [result] = generate_candidates([demand], two_day_grid, Schedule(), small_catalog, 1, cancellation=token)

    assert result.timed_out is True
    assert len(result.schedule) == 2
    assert result.unresolved[0].remaining == 3
