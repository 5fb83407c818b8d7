from chronoplan.models.classroom import Classroom  # noqa: F401
from chronoplan.models.constraint_set import ConstraintSet  # noqa: F401
from chronoplan.models.department import Department  # noqa: F401
from chronoplan.models.faculty import Faculty  # noqa: F401
from chronoplan.models.generation_log import GenerationLog, GenerationStatus  # noqa: F401
from chronoplan.models.subject import Subject  # noqa: F401
from chronoplan.models.timetable_version import (  # noqa: F401
    SEEDING_STATUSES,
    TimetableStatus,
    TimetableVersion,
)
