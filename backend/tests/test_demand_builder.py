import pytest

from chronoplan.services.demand_builder import SessionDemand, build_demands, required_sessions_for
from chronoplan.services.resource_pools import SubjectRecord


def test_required_sessions_prefers_teaching_hours_then_credits():
    assert required_sessions_for(SubjectRecord(id="a", teaching_hours=4, credits=2)) == 4
    assert required_sessions_for(SubjectRecord(id="b", credits=2)) == 2
    assert required_sessions_for(SubjectRecord(id="c")) == 3
    assert required_sessions_for(SubjectRecord(id="d"), default_sessions=5) == 5


def test_build_demands_keeps_input_order_and_missing_faculty():
    demands = build_demands(
        [
            SubjectRecord(id="late", teaching_hours=1, faculty_id="f1"),
            SubjectRecord(id="early", teaching_hours=2, faculty_id=""),
        ]
    )

    assert [item.subject_id for item in demands] == ["late", "early"]
    assert demands[1].faculty_id is None
    assert demands[1].remaining == 2


def test_consume_never_goes_negative():
    demand = SessionDemand(subject_id="s1", faculty_id="f1", required_sessions=1)
    demand.consume()

    assert demand.remaining == 0
    assert demand.placed == 1
    with pytest.raises(ValueError):
        demand.consume()


def test_negative_requirement_is_rejected():
    with pytest.raises(ValueError):
        SessionDemand(subject_id="s1", faculty_id=None, required_sessions=-1)


def test_fresh_copy_resets_remaining():
    demand = SessionDemand(subject_id="s1", faculty_id="f1", required_sessions=2)
    demand.consume()

    copy = demand.fresh_copy()
    assert copy.remaining == 2
    assert demand.remaining == 1


@pytest.mark.parametrize("remaining", [-1, 3])
def test_remaining_outside_requirement_is_rejected(remaining):
    with pytest.raises(ValueError):
        SessionDemand(subject_id="s1", faculty_id="f1", required_sessions=2, remaining=remaining)


def test_explicit_remaining_is_kept():
    demand = SessionDemand(subject_id="s1", faculty_id="f1", required_sessions=3, remaining=1)

    assert demand.remaining == 1
    assert demand.placed == 2
