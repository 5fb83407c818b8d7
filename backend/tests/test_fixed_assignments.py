from chronoplan.services.fixed_assignments import ExistingAssignment, load_fixed_assignments
from chronoplan.services.resource_pools import ResourceState
from chronoplan.services.slot_grid import TimeSlot, build_slot_grid


def test_colliding_fixed_slots_keep_the_first_entry():
    existing = [
        ExistingAssignment(day="Mon", slot_index=0, subject_id="s1", faculty_id="f1", classroom_id="r1"),
        ExistingAssignment(day="Mon", slot_index=0, subject_id="s2", faculty_id="f2", classroom_id="r2"),
    ]

    seed, collisions = load_fixed_assignments(existing)

    assert len(collisions) == 1
    assert collisions[0].type == "fixed_conflict"
    assert collisions[0].slot_key == "Mon-S0"
    assert collisions[0].message == "Fixed slot collision at Mon-S0 between s1 and s2"
    assert len(seed) == 1
    assert seed.at(TimeSlot("Mon", 0))[0].subject_id == "s1"
    assert seed.at(TimeSlot("Mon", 0))[0].fixed is True


def test_report_entry_carries_both_sides():
    existing = [
        ExistingAssignment(day="Tue", slot_index=2, subject_id="s1", faculty_id="f1", classroom_id="r1"),
        ExistingAssignment(day="Tue", slot_index=2, subject_id="s2", faculty_id="f2", classroom_id="r2", source_id="v9"),
    ]

    _, collisions = load_fixed_assignments(existing)
    entry = collisions[0].to_report_entry()

    assert entry["type"] == "fixed_conflict"
    assert entry["details"]["existing"]["subject_id"] == "s1"
    assert entry["details"]["new"]["subject_id"] == "s2"
    assert entry["details"]["new"]["source_id"] == "v9"


def test_seed_books_classrooms_only():
    state = ResourceState()
    existing = [ExistingAssignment(day="Mon", slot_index=1, subject_id="s1", faculty_id="f1", classroom_id="r1")]

    load_fixed_assignments(existing, state=state)

    assert state.is_classroom_booked("r1", TimeSlot("Mon", 1))
    assert not state.is_faculty_booked("f1", TimeSlot("Mon", 1))
    assert state.assigned_count("f1") == 0


def test_slots_outside_the_grid_are_reported_and_skipped():
    grid = build_slot_grid(["Mon"], 2, ["09:00", "10:00"])
    existing = [
        ExistingAssignment(day="Mon", slot_index=1, subject_id="s1", faculty_id="f1", classroom_id="r1"),
        ExistingAssignment(day="Sat", slot_index=0, subject_id="s2", faculty_id="f1", classroom_id="r1"),
    ]

    seed, collisions = load_fixed_assignments(existing, grid=grid)

    assert [item.type for item in collisions] == ["fixed_out_of_grid"]
    assert len(seed) == 1
    assert seed.assignments[0].slot.label == "10:00"
