from app.models.course import Course, course_instructor  # noqa: F401
from app.models.department import Department  # noqa: F401
from app.models.enrollment import Enrollment, Grade  # noqa: F401
from app.models.office_assignment import OfficeAssignment  # noqa: F401
from app.models.person import Person, PersonKind  # noqa: F401
