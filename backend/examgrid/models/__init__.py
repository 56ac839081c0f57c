from examgrid.models.course import VALID_LEVELS, Course  # noqa: F401
from examgrid.models.department import Department  # noqa: F401
from examgrid.models.faculty import Faculty  # noqa: F401
from examgrid.models.timetable import TIME_SLOT_LABELS, ExamSlot, TimeSlot, Timetable  # noqa: F401
