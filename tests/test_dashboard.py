from fastapi.testclient import TestClient

from curricula.services.weeks import current_week
from helpers import create_curriculum, join, register_and_login, upload_lecture


def test_student_dashboard_this_week(client: TestClient, teacher_headers, curriculum, enrolled_student):
    week = current_week()
    other_week = week + 1 if week < 52 else 1
    this_week = upload_lecture(client, teacher_headers, curriculum["id"], "Now", week=str(week))
    upload_lecture(client, teacher_headers, curriculum["id"], "Later", week=str(other_week))

    # 未选课的课程不出现
    other = create_curriculum(client, teacher_headers, "Not joined")
    upload_lecture(client, teacher_headers, other["id"], "Elsewhere", week=str(week))

    data = client.get("/api/dashboard/student", headers=enrolled_student).json()
    assert data["currentWeek"] == week
    assert [c["id"] for c in data["curriculums"]] == [curriculum["id"]]
    assert [l["title"] for l in data["thisWeekLectures"]] == ["Now"]
    assert data["thisWeekLectures"][0]["curriculumTitle"] == curriculum["title"]
    assert data["thisWeekLectures"][0]["isRead"] is False

    client.get(f"/api/lecture/{this_week['id']}", headers=enrolled_student)
    data = client.get("/api/dashboard/student", headers=enrolled_student).json()
    assert data["thisWeekLectures"][0]["isRead"] is True


def test_teacher_dashboard_counts(client: TestClient, teacher_headers, curriculum, enrolled_student):
    second = register_and_login(client, "second@example.com", "STUDENT")
    join(client, second, curriculum["uniqueCode"])
    create_curriculum(client, teacher_headers, "Empty course")

    data = client.get("/api/dashboard/teacher", headers=teacher_headers).json()
    assert len(data["curriculums"]) == 2
    assert data["totalEnrollments"] == 2


def test_dashboards_are_role_specific(client: TestClient, teacher_headers, student_headers):
    assert client.get("/api/dashboard/student", headers=teacher_headers).status_code == 403
    assert client.get("/api/dashboard/teacher", headers=student_headers).status_code == 403
