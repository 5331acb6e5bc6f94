"""SQLAlchemy 模型汇总导出。"""

from curricula.models.enums import HomeworkType, Role, SubmissionStatus, SubscriptionPlan
from curricula.models.user import StudentProfile, TeacherProfile, User
from curricula.models.curriculum import Curriculum, Enrollment, Note
from curricula.models.lecture import Attachment, Lecture, ReadLecture
from curricula.models.homework import Homework, HomeworkSubmission, McqQuestion

__all__ = [
    "Attachment",
    "Curriculum",
    "Enrollment",
    "Homework",
    "HomeworkSubmission",
    "HomeworkType",
    "Lecture",
    "McqQuestion",
    "Note",
    "ReadLecture",
    "Role",
    "StudentProfile",
    "SubmissionStatus",
    "SubscriptionPlan",
    "TeacherProfile",
    "User",
]
