from app.models.activity_log import ActivityLog  # noqa: F401
from app.models.course import Course  # noqa: F401
from app.models.schedule import Schedule, ScheduleEvent, SessionType  # noqa: F401
from app.models.subject import Subject  # noqa: F401
from app.models.subject_offering import SubjectOffering  # noqa: F401
from app.models.teacher_workload import TeacherWorkload  # noqa: F401
from app.models.user import EmploymentType, User, UserRole, UserStatus  # noqa: F401
