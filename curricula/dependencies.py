"""FastAPI 依赖注入工具。"""

from typing import Optional

from fastapi import Depends, Header, Request
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from curricula.access import Principal, require_role
from curricula.config import Settings, get_settings
from curricula.db import get_db
from curricula.errors import Unauthenticated
from curricula.models import Role, User
from curricula.security import decode_token

__all__ = [
    "get_current_principal",
    "get_current_user",
    "get_db",
    "get_settings",
    "require_student",
    "require_teacher",
]


def _extract_token(request: Request, authorization: Optional[str], settings: Settings) -> Optional[str]:
    if authorization and authorization.startswith("Bearer "):
        return authorization[7:]
    return request.cookies.get(settings.session_cookie_name)


def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> User:
    """从会话 Cookie 或 Bearer Token 获取当前用户。"""
    token = _extract_token(request, authorization, settings)
    if not token:
        raise Unauthenticated()

    payload = decode_token(token)
    if not payload or not payload.get("sub"):
        raise Unauthenticated()

    stmt = (
        select(User)
        .options(selectinload(User.teacher_profile), selectinload(User.student_profile))
        .where(User.id == payload["sub"])
    )
    user = db.execute(stmt).scalar_one_or_none()
    if user is None:
        raise Unauthenticated()
    return user


def get_current_principal(user: User = Depends(get_current_user)) -> Principal:
    return Principal.from_user(user)


def require_teacher(principal: Principal = Depends(get_current_principal)) -> Principal:
    """要求教师权限。"""
    require_role(principal, Role.TEACHER, "Only teachers can perform this action")
    return principal


def require_student(principal: Principal = Depends(get_current_principal)) -> Principal:
    """要求学生权限。"""
    require_role(principal, Role.STUDENT, "Only students can perform this action")
    return principal
