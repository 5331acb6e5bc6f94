"""多个路由共用的响应模型。"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from curricula.models import HomeworkType, Role, SubmissionStatus, SubscriptionPlan
from curricula.schemas.base import CamelModel


class TeacherProfileOut(CamelModel):
    id: str
    user_id: str
    bio: Optional[str] = None
    subscription_plan: SubscriptionPlan


class StudentProfileOut(CamelModel):
    id: str
    user_id: str
    program: Optional[str] = None


class UserOut(CamelModel):
    id: str
    name: str
    email: str
    university: str
    role: Role
    created_at: datetime
    updated_at: datetime
    teacher_profile: Optional[TeacherProfileOut] = None
    student_profile: Optional[StudentProfileOut] = None


class TeacherBrief(CamelModel):
    id: str
    name: str
    email: str


class CurriculumOut(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    unique_code: str
    teacher_id: str
    created_at: datetime
    updated_at: datetime


class CurriculumListItem(CurriculumOut):
    teacher_name: Optional[str] = None
    lecture_count: int = 0
    enrollment_count: int = 0


class AttachmentOut(CamelModel):
    id: str
    title: str
    file_url: str
    lecture_id: str
    created_at: datetime


class NoteOut(CamelModel):
    id: str
    content: str
    expiry_date: Optional[datetime] = None
    curriculum_id: str
    created_at: datetime


class McqQuestionOut(CamelModel):
    id: str
    question: str
    options: List[str]
    # 学生视图中隐藏
    correct_option: Optional[int] = None


class HomeworkOut(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    type: HomeworkType
    lecture_id: str
    created_at: datetime
    updated_at: datetime


class SubmissionOut(CamelModel):
    id: str
    student_id: str
    homework_id: str
    content: Optional[str] = None
    file_url: Optional[str] = None
    mcq_answers: Optional[Dict[str, int]] = None
    grade: Optional[float] = None
    feedback: Optional[str] = None
    status: SubmissionStatus
    submitted_at: datetime
    updated_at: datetime


class LectureOut(CamelModel):
    id: str
    title: str
    content: str
    week_number: int
    curriculum_id: str
    created_at: datetime
    updated_at: datetime


class LectureDetail(LectureOut):
    homeworks: List[HomeworkOut] = []
    attachments: List[AttachmentOut] = []
    # 仅学生视图填充
    is_read: Optional[bool] = None


class CurriculumDetail(CurriculumOut):
    teacher: Optional[TeacherBrief] = None
    lectures: List[LectureDetail] = []
    notes: List[NoteOut] = []
    enrollment_count: int = 0
