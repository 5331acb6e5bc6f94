"""作业定义的创建与修改。"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional, Sequence

from sqlalchemy.orm import Session

from curricula.errors import ValidationFailed
from curricula.models import Homework, HomeworkType, McqQuestion

logger = logging.getLogger(__name__)

MIN_MCQ_OPTIONS = 2


def parse_homework_type(value: Any) -> HomeworkType:
    if isinstance(value, HomeworkType):
        return value
    try:
        return HomeworkType(str(value).strip().upper())
    except ValueError as exc:
        allowed = ", ".join(t.value for t in HomeworkType)
        raise ValidationFailed(f"Homework type must be one of {allowed}") from exc


def build_mcq_questions(questions: Sequence[Any]) -> list[McqQuestion]:
    """校验并构造选择题：至少两个选项，正确答案下标在范围内。

    ``questions`` 中的元素需有 ``question``/``options``/``correct_option`` 属性。
    """
    built = []
    for index, item in enumerate(questions, start=1):
        options = [o for o in (item.options or []) if o and o.strip()]
        if not item.question or not item.question.strip():
            raise ValidationFailed(f"Question {index} is missing its text")
        if len(options) < MIN_MCQ_OPTIONS:
            raise ValidationFailed(f"Question {index} needs at least {MIN_MCQ_OPTIONS} options")
        if item.correct_option is None or not 0 <= item.correct_option < len(options):
            raise ValidationFailed(f"Question {index} has an invalid correct option")
        built.append(
            McqQuestion(
                question=item.question.strip(),
                options=options,
                correct_option=item.correct_option,
            )
        )
    return built


def create_homework(
    db: Session,
    lecture_id: str,
    title: str,
    homework_type: HomeworkType,
    description: Optional[str] = None,
    due_date: Optional[datetime] = None,
    questions: Sequence[Any] = (),
) -> Homework:
    # 非选择题忽略 questions
    mcq_questions = build_mcq_questions(questions) if homework_type == HomeworkType.MCQ else []

    homework = Homework(
        title=title,
        description=description,
        due_date=due_date,
        type=homework_type,
        lecture_id=lecture_id,
    )
    homework.mcq_questions.extend(mcq_questions)
    db.add(homework)
    db.commit()
    db.refresh(homework)
    logger.info("Homework %s (%s) created on lecture %s", homework.id, homework_type.value, lecture_id)
    return homework


def update_homework(db: Session, homework: Homework, changes: dict[str, Any]) -> Homework:
    """``title``/``type`` 为空时忽略；``description``/``due_date`` 出现即覆盖（null 清空）。"""
    if changes.get("title"):
        homework.title = changes["title"]
    if changes.get("type"):
        homework.type = parse_homework_type(changes["type"])
    if "description" in changes:
        homework.description = changes["description"]
    if "due_date" in changes:
        homework.due_date = changes["due_date"]
    db.commit()
    db.refresh(homework)
    return homework
