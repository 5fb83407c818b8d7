import pytest

from chronoplan.services.conflict_service import ConflictDetector, detect_conflicts
from chronoplan.services.schedule import Assignment, Schedule
from chronoplan.services.slot_grid import TimeSlot

MON_0 = TimeSlot("Mon", 0)


@pytest.fixture
def double_booked_schedule():
    return Schedule(
        [
            Assignment(MON_0, "s1", "f1", "r1"),
            Assignment(MON_0, "s2", "f1", "r2"),
            Assignment(MON_0, "s3", "f2", "r2"),
            Assignment(TimeSlot("Mon", 1), "s1", "f1", "r1"),
        ]
    )


def test_detect_faculty_and_room_conflicts(double_booked_schedule):
    report = ConflictDetector(
        double_booked_schedule,
        faculty_names={"f1": "Prof Ada"},
        room_names={"r2": "LH-102"},
    ).detect()

    assert report.summary.faculty_conflicts == 1
    assert report.summary.classroom_conflicts == 1
    assert report.summary.total == 2

    faculty_conflict = report.faculty_conflicts[0]
    assert faculty_conflict.conflict_type == "faculty_double_booking"
    assert faculty_conflict.slot_key == "Mon-S0"
    assert "Prof Ada" in faculty_conflict.description
    assert {item.subject_id for item in faculty_conflict.assignments} == {"s1", "s2"}

    room_conflict = report.classroom_conflicts[0]
    assert room_conflict.resource_id == "r2"
    assert "LH-102" in room_conflict.description
    assert {item.subject_id for item in room_conflict.assignments} == {"s2", "s3"}


def test_detection_is_idempotent_and_read_only(double_booked_schedule):
    before = [item.identity() for item in double_booked_schedule]

    first = detect_conflicts(double_booked_schedule)
    second = detect_conflicts(double_booked_schedule)

    assert first.model_dump() == second.model_dump()
    assert [item.identity() for item in double_booked_schedule] == before


def test_clean_schedule_has_no_conflicts():
    schedule = Schedule(
        [
            Assignment(MON_0, "s1", "f1", "r1"),
            Assignment(TimeSlot("Mon", 1), "s2", "f1", "r1"),
        ]
    )

    assert detect_conflicts(schedule).summary.total == 0


def test_resolutions_move_later_assignments_and_skip_fixed():
    schedule = Schedule(
        [
            Assignment(MON_0, "s1", "f1", "r1"),
            Assignment(MON_0, "s2", "f1", "r1", fixed=True),
            Assignment(MON_0, "s3", "f1", "r1"),
        ]
    )

    report = ConflictDetector(schedule).detect_with_resolutions()
    actions = {(item.action_type, item.target.subject_id) for item in report.suggested_resolutions}

    assert actions == {("move_slot", "s3"), ("change_room", "s3")}
