"""课程邀请码生成。"""

import logging
import secrets
import string
from typing import Callable, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from curricula.errors import AppError
from curricula.models import Curriculum

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits


class JoinCodeExhausted(AppError):
    """多次重试后仍未找到空闲邀请码，按 500 返回。"""

    default_message = "Could not allocate a join code"


def generate_join_code(length: int = 8) -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


def normalize_code(code: str) -> str:
    return code.strip().upper()


def code_exists(db: Session, code: str) -> bool:
    stmt = select(Curriculum.id).where(Curriculum.unique_code == code)
    return db.execute(stmt).first() is not None


def allocate_unique_code(
    db: Session,
    length: int = 8,
    max_attempts: int = 20,
    generator: Optional[Callable[[int], str]] = None,
) -> str:
    """生成一个当前未被占用的邀请码，冲突时重新生成。

    并发插入仍可能撞码，由 ``curriculums.unique_code`` 唯一约束兜底。
    """
    generator = generator or generate_join_code
    for _ in range(max_attempts):
        code = generator(length)
        if not code_exists(db, code):
            return code
    logger.error("No free join code after %d attempts", max_attempts)
    raise JoinCodeExhausted()
