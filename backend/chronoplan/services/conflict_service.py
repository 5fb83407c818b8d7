from collections import defaultdict
from typing import Dict, List, Optional

from chronoplan.schemas.conflict import ConflictDetail, ConflictReport, ConflictSummary, ResolutionAction
from chronoplan.schemas.timetable import AssignmentOut
from chronoplan.services.schedule import Assignment, Schedule


class ConflictDetector:
    def __init__(
        self,
        schedule: Schedule,
        faculty_names: Optional[Dict[str, str]] = None,
        room_names: Optional[Dict[str, str]] = None,
    ):
        self.schedule = schedule
        self.faculty_names = faculty_names or {}
        self.room_names = room_names or {}

    def detect(self) -> ConflictReport:
        # Bucket by slot key once; both passes reuse the buckets.
        slots_by_key: Dict[str, List[Assignment]] = defaultdict(list)
        for assignment in self.schedule:
            slots_by_key[assignment.slot_key].append(assignment)

        faculty_conflicts: List[ConflictDetail] = []
        classroom_conflicts: List[ConflictDetail] = []

        for key, slot_assignments in slots_by_key.items():
            if len(slot_assignments) < 2:
                continue

            by_faculty: Dict[str, List[Assignment]] = defaultdict(list)
            by_room: Dict[str, List[Assignment]] = defaultdict(list)
            for assignment in slot_assignments:
                if assignment.faculty_id:
                    by_faculty[assignment.faculty_id].append(assignment)
                if assignment.classroom_id:
                    by_room[assignment.classroom_id].append(assignment)

            for faculty_id, colliding in by_faculty.items():
                if len(colliding) < 2:
                    continue
                faculty_name = self.faculty_names.get(faculty_id, faculty_id)
                subjects = ", ".join(item.subject_id for item in colliding)
                faculty_conflicts.append(ConflictDetail(
                    id=f"fac-{key}-{faculty_id}",
                    conflict_type="faculty_double_booking",
                    slot_key=key,
                    resource_id=faculty_id,
                    description=f"Faculty {faculty_name} double-booked at {key}: {subjects}",
                    assignments=[AssignmentOut.from_assignment(item) for item in colliding],
                ))

            for room_id, colliding in by_room.items():
                if len(colliding) < 2:
                    continue
                room_name = self.room_names.get(room_id, room_id)
                subjects = ", ".join(item.subject_id for item in colliding)
                classroom_conflicts.append(ConflictDetail(
                    id=f"room-{key}-{room_id}",
                    conflict_type="classroom_double_booking",
                    slot_key=key,
                    resource_id=room_id,
                    description=f"Classroom {room_name} double-booked at {key}: {subjects}",
                    assignments=[AssignmentOut.from_assignment(item) for item in colliding],
                ))

        return ConflictReport(
            faculty_conflicts=faculty_conflicts,
            classroom_conflicts=classroom_conflicts,
            summary=ConflictSummary(
                faculty_conflicts=len(faculty_conflicts),
                classroom_conflicts=len(classroom_conflicts),
                total=len(faculty_conflicts) + len(classroom_conflicts),
            ),
        )

    def generate_resolutions(self, conflict: ConflictDetail) -> List[ResolutionAction]:
        resolutions = []
        # The first assignment keeps its place; every later one is asked to move.
        for target in conflict.assignments[1:]:
            if target.fixed:
                continue
            if conflict.conflict_type == "classroom_double_booking":
                resolutions.append(ResolutionAction(
                    action_type="change_room",
                    description=f"Find another free room for {target.subject_id} at {conflict.slot_key}",
                    conflict_id=conflict.id,
                    target=target,
                ))
            else:
                resolutions.append(ResolutionAction(
                    action_type="move_slot",
                    description=f"Move {target.subject_id} to a slot where {conflict.resource_id} is free",
                    conflict_id=conflict.id,
                    target=target,
                ))
        return resolutions

    def detect_with_resolutions(self) -> ConflictReport:
        report = self.detect()
        for conflict in report.conflicts:
            report.suggested_resolutions.extend(self.generate_resolutions(conflict))
        return report


def detect_conflicts(schedule: Schedule) -> ConflictReport:
    return ConflictDetector(schedule).detect()
