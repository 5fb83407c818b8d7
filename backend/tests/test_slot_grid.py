import pytest

from chronoplan.services.slot_grid import TimeSlot, build_slot_grid, grid_position, slot_key


def test_grid_is_day_major_and_complete():
    grid = build_slot_grid(["Mon", "Tue", "Wed", "Thu", "Fri"], 5)

    assert len(grid) == 25
    assert len({slot.key for slot in grid}) == 25
    assert grid[0].key == "Mon-S0"
    assert grid[4].key == "Mon-S4"
    assert grid[5].key == "Tue-S0"
    assert grid[-1].key == "Fri-S4"


def test_slot_labels_fill_only_present_entries():
    grid = build_slot_grid(["Monday"], 3, ["09:00-10:00", None])

    assert [slot.label for slot in grid] == ["09:00-10:00", None, None]
    assert grid[0].key == "Monday-S0"


def test_slot_identity_ignores_label():
    assert TimeSlot("Mon", 1, label="10:00") == TimeSlot("Mon", 1)
    assert slot_key("Wed", 3) == "Wed-S3"


@pytest.mark.parametrize(
    ("days", "slots_per_day"),
    [
        (["Mon"], 0),
        ([], 4),
        (["Mon", "Tue", "Mon"], 4),
    ],
)
def test_invalid_grid_inputs_are_rejected(days, slots_per_day):
    with pytest.raises(ValueError):
        build_slot_grid(days, slots_per_day)


def test_grid_position_follows_scan_order():
    grid = build_slot_grid(["Mon", "Tue"], 2)
    position = grid_position(grid)

    assert position[TimeSlot("Mon", 0)] == 0
    assert position[TimeSlot("Tue", 1)] == 3
