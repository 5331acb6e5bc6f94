"""学生与教师首页数据。"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from curricula.access import Principal
from curricula.config import Settings
from curricula.dependencies import get_db, get_settings, require_student, require_teacher
from curricula.schemas.base import CamelModel
from curricula.schemas.responses import CurriculumListItem, CurriculumOut, LectureOut
from curricula.services import content, curriculums, enrollment
from curricula.services.weeks import current_week
from curricula.api.curriculum import to_list_item

router = APIRouter()


# === Schemas ===

class WeekLecture(LectureOut):
    curriculum_title: str
    is_read: bool = False


class StudentDashboard(CamelModel):
    current_week: int
    curriculums: List[CurriculumOut]
    this_week_lectures: List[WeekLecture]


class TeacherDashboard(CamelModel):
    curriculums: List[CurriculumListItem]
    total_enrollments: int


# === API 端点 ===

@router.get("/student", response_model=StudentDashboard)
def student_dashboard(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    principal: Principal = Depends(require_student),
):
    """已选课程与本周讲义（含是否已读）。"""
    week = current_week(tz_name=settings.calendar_timezone)
    enrolled = [
        CurriculumOut.model_validate(record.curriculum)
        for record in enrollment.list_enrolled(db, principal.student_id)
    ]

    lectures = content.lectures_for_week(db, principal.student_id, week)
    read_ids = content.read_lecture_ids(db, principal.student_id, [l.id for l in lectures])
    this_week = [
        WeekLecture.model_validate(
            {
                **LectureOut.model_validate(lecture).model_dump(),
                "curriculum_title": lecture.curriculum.title,
                "is_read": lecture.id in read_ids,
            }
        )
        for lecture in lectures
    ]
    return {"current_week": week, "curriculums": enrolled, "this_week_lectures": this_week}


@router.get("/teacher", response_model=TeacherDashboard)
def teacher_dashboard(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_teacher),
):
    summaries = curriculums.list_curriculums(db, teacher_id=principal.teacher_id)
    return {
        "curriculums": [to_list_item(s) for s in summaries],
        "total_enrollments": sum(s.enrollment_count for s in summaries),
    }
