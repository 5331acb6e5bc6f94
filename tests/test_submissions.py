from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from curricula.errors import ValidationFailed
from curricula.models import Homework, HomeworkSubmission
from curricula.services import submissions as submission_service
from curricula.services.submissions import GRADE_ERROR, parse_grade
from helpers import create_homework, register_and_login, submit_pdf, upload_lecture


@pytest.fixture
def homework(client, teacher_headers, curriculum):
    lecture = upload_lecture(client, teacher_headers, curriculum["id"])
    return create_homework(client, teacher_headers, lecture["id"])


@pytest.fixture
def submission(client, homework, enrolled_student):
    response = submit_pdf(client, enrolled_student, homework["id"])
    assert response.status_code == 200, response.text
    return response.json()["submission"]


def test_submit_pdf(client: TestClient, homework, enrolled_student):
    response = submit_pdf(client, enrolled_student, homework["id"])
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["message"] == "Homework submitted successfully"
    assert data["submission"]["fileUrl"].startswith("/uploads/submissions/")
    assert data["submission"]["status"] == "submitted"
    assert data["submission"]["grade"] is None


def test_resubmission_overwrites_single_row(client: TestClient, session, homework, submission, enrolled_student):
    response = submit_pdf(client, enrolled_student, homework["id"], content=b"%PDF-1.4 second")
    assert response.status_code == 200
    second = response.json()["submission"]
    assert second["id"] == submission["id"]
    assert second["fileUrl"] != submission["fileUrl"]
    assert second["submittedAt"] >= submission["submittedAt"]
    assert session.query(HomeworkSubmission).count() == 1


def test_resubmission_keeps_grade(client: TestClient, teacher_headers, homework, submission, enrolled_student):
    client.patch(
        f"/api/homework-submission/{submission['id']}/grade",
        json={"grade": 90, "feedback": "Nice"},
        headers=teacher_headers,
    )
    data = submit_pdf(client, enrolled_student, homework["id"]).json()["submission"]
    assert data["grade"] == 90
    assert data["feedback"] == "Nice"
    assert data["status"] == "graded"


def test_submit_requires_fields(client: TestClient, homework, enrolled_student):
    response = client.post(
        "/api/homework-submission",
        files={"file": ("a.pdf", b"%PDF", "application/pdf")},
        headers=enrolled_student,
    )
    assert response.json() == {"error": "Homework ID is required"}

    response = client.post(
        "/api/homework-submission", data={"homeworkId": homework["id"]}, headers=enrolled_student
    )
    assert response.status_code == 400
    assert response.json() == {"error": "PDF file is required"}


def test_submit_rejects_non_pdf(client: TestClient, settings, homework, enrolled_student):
    response = client.post(
        "/api/homework-submission",
        data={"homeworkId": homework["id"]},
        files={"file": ("a.docx", b"PK", "application/vnd.openxmlformats-officedocument")},
        headers=enrolled_student,
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Only PDF files are accepted"}
    assert not (settings.upload_dir / "submissions").exists()


def test_submit_unknown_homework(client: TestClient, enrolled_student):
    response = submit_pdf(client, enrolled_student, "missing")
    assert response.status_code == 404
    assert response.json() == {"error": "Homework not found"}


def test_submit_requires_enrollment(client: TestClient, settings, homework):
    outsider = register_and_login(client, "outsider@example.com", "STUDENT")
    response = submit_pdf(client, outsider, homework["id"])
    assert response.status_code == 403
    assert response.json() == {"error": "You are not enrolled in this curriculum"}
    assert not (settings.upload_dir / "submissions").exists()


def test_submit_after_due_date(client: TestClient, session, settings, teacher_headers, curriculum, enrolled_student):
    lecture = upload_lecture(client, teacher_headers, curriculum["id"])
    past = (datetime.now(timezone.utc) - timedelta(minutes=1)).isoformat()
    homework = create_homework(client, teacher_headers, lecture["id"], dueDate=past)

    response = submit_pdf(client, enrolled_student, homework["id"])
    assert response.status_code == 400
    assert response.json() == {"error": "The due date for this homework has passed"}
    assert session.query(HomeworkSubmission).count() == 0
    assert not (settings.upload_dir / "submissions").exists()


def test_teacher_cannot_submit(client: TestClient, teacher_headers, homework):
    response = submit_pdf(client, teacher_headers, homework["id"])
    assert response.status_code == 403


def test_get_submission_access(client: TestClient, teacher_headers, curriculum, submission, enrolled_student):
    assert client.get(f"/api/homework-submission/{submission['id']}", headers=enrolled_student).status_code == 200
    assert client.get(f"/api/homework-submission/{submission['id']}", headers=teacher_headers).status_code == 200

    other_student = register_and_login(client, "peer@example.com", "STUDENT")
    response = client.get(f"/api/homework-submission/{submission['id']}", headers=other_student)
    assert response.status_code == 403

    other_teacher = register_and_login(client, "other@example.com", "TEACHER")
    response = client.get(f"/api/homework-submission/{submission['id']}", headers=other_teacher)
    assert response.status_code == 403


# === Grading ===

@pytest.mark.parametrize("value, expected", [(None, None), (0, 0.0), (100, 100.0), ("85", 85.0), (72.5, 72.5)])
def test_parse_grade_accepts(value, expected):
    assert parse_grade(value) == expected


@pytest.mark.parametrize("value", [-1, 100.5, 150, "abc", "", "  ", True, "nan", [90]])
def test_parse_grade_rejects(value):
    with pytest.raises(ValidationFailed):
        parse_grade(value)


def test_grade_submission(client: TestClient, teacher_headers, submission):
    url = f"/api/homework-submission/{submission['id']}/grade"
    response = client.patch(url, json={"grade": "85", "feedback": "Good"}, headers=teacher_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Submission graded successfully"
    assert data["submission"]["grade"] == 85
    assert data["submission"]["status"] == "graded"

    # 清空分数与评语
    data = client.patch(url, json={"grade": None, "feedback": ""}, headers=teacher_headers).json()
    assert data["submission"]["grade"] is None
    assert data["submission"]["feedback"] is None
    assert data["submission"]["status"] == "submitted"


def test_invalid_grade_leaves_value_unchanged(client: TestClient, session, teacher_headers, submission):
    url = f"/api/homework-submission/{submission['id']}/grade"
    client.patch(url, json={"grade": 70}, headers=teacher_headers)

    response = client.patch(url, json={"grade": 150}, headers=teacher_headers)
    assert response.status_code == 400
    assert response.json() == {"error": GRADE_ERROR}

    session.expire_all()
    assert session.get(HomeworkSubmission, submission["id"]).grade == 70


def test_grade_is_required(client: TestClient, teacher_headers, submission):
    response = client.patch(
        f"/api/homework-submission/{submission['id']}/grade",
        json={"feedback": "no grade"},
        headers=teacher_headers,
    )
    assert response.status_code == 400


def test_grading_restricted_to_owner(client: TestClient, submission, enrolled_student):
    url = f"/api/homework-submission/{submission['id']}/grade"
    assert client.patch(url, json={"grade": 100}, headers=enrolled_student).status_code == 403

    other = register_and_login(client, "other@example.com", "TEACHER")
    response = client.patch(url, json={"grade": 100}, headers=other)
    assert response.status_code == 403
    assert response.json() == {"error": "You can only grade submissions for your own curriculums"}


def test_grading_allowed_after_due_date(client: TestClient, session, teacher_headers, homework, submission):
    record = session.get(Homework, homework["id"])
    record.due_date = datetime.now(timezone.utc) - timedelta(days=1)
    session.commit()

    response = client.patch(
        f"/api/homework-submission/{submission['id']}/grade",
        json={"grade": 60},
        headers=teacher_headers,
    )
    assert response.status_code == 200


def test_submit_lost_insert_race_conflicts(client: TestClient, session, settings, homework, submission, enrolled_student, monkeypatch):
    # 预检查看不到另一请求刚写入的提交
    monkeypatch.setattr(submission_service, "find_submission", lambda *args: None)
    response = submit_pdf(client, enrolled_student, homework["id"], content=b"%PDF-1.4 racer")
    assert response.status_code == 409
    assert response.json() == {"error": "A submission for this homework is already being saved"}

    session.expire_all()
    assert session.query(HomeworkSubmission).count() == 1
    # 冲突时刚写入的文件被删除
    stored = list((settings.upload_dir / "submissions").iterdir())
    assert [f"/uploads/submissions/{path.name}" for path in stored] == [submission["fileUrl"]]


def test_teacher_non_pdf_submission_is_forbidden(client: TestClient, teacher_headers, homework):
    response = client.post(
        "/api/homework-submission",
        data={"homeworkId": homework["id"]},
        files={"file": ("notes.txt", b"hello", "text/plain")},
        headers=teacher_headers,
    )
    assert response.status_code == 403
    assert response.json() == {"error": "Only students can submit homework"}


def test_student_grading_without_grade_is_forbidden(client: TestClient, submission, enrolled_student):
    response = client.patch(
        f"/api/homework-submission/{submission['id']}/grade",
        json={"feedback": "self-assessed"},
        headers=enrolled_student,
    )
    assert response.status_code == 403
    assert response.json() == {"error": "Only teachers can grade submissions"}
