"""用户注册、登录与会话 API。"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, Response, status
from pydantic import field_validator
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from curricula.config import Settings
from curricula.dependencies import get_current_user, get_db, get_settings
from curricula.errors import Conflict, Unauthenticated, ValidationFailed
from curricula.models import Role, StudentProfile, TeacherProfile, User
from curricula.schemas.base import CamelModel, MessageResponse
from curricula.schemas.responses import UserOut
from curricula.security import create_token, hash_password, verify_password

logger = logging.getLogger(__name__)

router = APIRouter()

USER_EXISTS = "User already exists"


# === Schemas ===

class SignupRequest(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    university: Optional[str] = None
    role: Optional[str] = None
    program: Optional[str] = None
    bio: Optional[str] = None

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: Optional[str]) -> Optional[str]:
        return value.strip().lower() if value else value


class Token(CamelModel):
    access_token: str
    token_type: str


# === Helpers ===

def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.execute(select(User).where(User.email == email)).scalar_one_or_none()


def _parse_role(value: str) -> Role:
    try:
        return Role(value.upper())
    except ValueError as exc:
        raise ValidationFailed("Role must be TEACHER or STUDENT") from exc


# === API 端点 ===

@router.post("/signup", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def signup(data: SignupRequest, db: Session = Depends(get_db)):
    """用户注册，同时创建对应角色的档案。"""
    if not all([data.name, data.email, data.password, data.university, data.role]):
        raise ValidationFailed("Missing required fields")
    role = _parse_role(data.role)

    if get_user_by_email(db, data.email):
        raise Conflict(USER_EXISTS)

    user = User(
        name=data.name,
        email=data.email,
        password_hash=hash_password(data.password),
        university=data.university,
        role=role,
    )
    if role == Role.TEACHER:
        user.teacher_profile = TeacherProfile(bio=data.bio or None)
    else:
        user.student_profile = StudentProfile(program=data.program or None)
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise Conflict(USER_EXISTS) from exc
    logger.info("Registered %s user %s", role.value, user.id)
    return {"message": "User created successfully"}


@router.post("/login", response_model=Token)
def login(
    response: Response,
    email: str = Form(...),
    password: str = Form(...),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """用户登录：写入会话 Cookie，同时返回 Token。"""
    user = get_user_by_email(db, email.strip().lower())
    if not user or not verify_password(password, user.password_hash):
        raise Unauthenticated("Invalid email or password")

    access_token = create_token(user.id, user.role.value)
    response.set_cookie(
        settings.session_cookie_name,
        access_token,
        max_age=settings.token_expire_hours * 3600,
        httponly=True,
        samesite="lax",
    )
    return {"access_token": access_token, "token_type": "bearer"}


@router.post("/logout", response_model=MessageResponse)
def logout(response: Response, settings: Settings = Depends(get_settings)):
    response.delete_cookie(settings.session_cookie_name)
    return {"message": "Signed out"}


@router.get("/me", response_model=UserOut)
def me(current_user: User = Depends(get_current_user)):
    """获取当前登录用户信息（不含密码）。"""
    return current_user
