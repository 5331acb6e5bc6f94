"""角色与资源归属校验。

所有路由在读取或修改数据前调用 ``authorize``：
- MUTATE/GRADE：调用者必须是拥有该课程的教师。
- READ：教师必须拥有课程；学生必须已选该课程。
- SUBMIT：调用者必须是已选该课程的学生（截止时间由提交服务校验）。

讲义、公告、附件、作业、提交都沿归属链找到所属课程后再套用上述规则。
"""

import enum
import logging
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from curricula.errors import Forbidden
from curricula.models import (
    Attachment,
    Curriculum,
    Enrollment,
    Homework,
    HomeworkSubmission,
    Lecture,
    McqQuestion,
    Note,
    Role,
    User,
)

logger = logging.getLogger(__name__)


class Action(str, enum.Enum):
    READ = "read"
    MUTATE = "mutate"
    SUBMIT = "submit"
    GRADE = "grade"


@dataclass(frozen=True)
class Principal:
    """已认证的调用者。"""

    user_id: str
    role: Role
    teacher_id: Optional[str] = None
    student_id: Optional[str] = None

    @classmethod
    def from_user(cls, user: User) -> "Principal":
        return cls(
            user_id=user.id,
            role=user.role,
            teacher_id=user.teacher_profile.id if user.teacher_profile else None,
            student_id=user.student_profile.id if user.student_profile else None,
        )

    @property
    def is_teacher(self) -> bool:
        return self.role == Role.TEACHER and self.teacher_id is not None

    @property
    def is_student(self) -> bool:
        return self.role == Role.STUDENT and self.student_id is not None


def curriculum_of(resource: Any) -> Optional[Curriculum]:
    """沿归属链返回资源所属的课程。"""
    if resource is None:
        return None
    if isinstance(resource, Curriculum):
        return resource
    if isinstance(resource, (Lecture, Note)):
        return resource.curriculum
    if isinstance(resource, Attachment):
        return resource.lecture.curriculum
    if isinstance(resource, Homework):
        return resource.lecture.curriculum
    if isinstance(resource, McqQuestion):
        return resource.homework.lecture.curriculum
    if isinstance(resource, HomeworkSubmission):
        return resource.homework.lecture.curriculum
    raise TypeError(f"No ownership chain for {type(resource).__name__}")


def owns(principal: Principal, curriculum: Curriculum) -> bool:
    return principal.is_teacher and curriculum.teacher_id == principal.teacher_id


def is_enrolled(db: Session, principal: Principal, curriculum_id: str) -> bool:
    if not principal.is_student:
        return False
    stmt = select(Enrollment.id).where(
        Enrollment.student_id == principal.student_id,
        Enrollment.curriculum_id == curriculum_id,
    )
    return db.execute(stmt).first() is not None


def require_role(principal: Principal, role: Role, message: str) -> None:
    """只校验角色，不涉及具体资源。"""
    allowed = principal.is_teacher if role == Role.TEACHER else principal.is_student
    if not allowed:
        logger.warning("Role %s required, user %s denied", role.value, principal.user_id)
        raise Forbidden(message)


def check(db: Session, principal: Principal, resource: Any, action: Action) -> bool:
    """返回是否允许，不抛异常。"""
    curriculum = curriculum_of(resource)
    if curriculum is None:
        return False
    if action in (Action.MUTATE, Action.GRADE):
        return owns(principal, curriculum)
    if action == Action.READ:
        if principal.role == Role.TEACHER:
            return owns(principal, curriculum)
        return is_enrolled(db, principal, curriculum.id)
    if action == Action.SUBMIT:
        return is_enrolled(db, principal, curriculum.id)
    return False


def authorize(
    db: Session,
    principal: Principal,
    resource: Any,
    action: Action,
    message: str = "Unauthorized",
) -> Curriculum:
    """校验失败抛出 ``Forbidden``，成功返回所属课程。"""
    if not check(db, principal, resource, action):
        logger.warning(
            "Denied %s on %s for user %s",
            action.value,
            type(resource).__name__,
            principal.user_id,
        )
        raise Forbidden(message)
    return curriculum_of(resource)
