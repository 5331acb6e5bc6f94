from fastapi.testclient import TestClient

from curricula.models import Curriculum, Enrollment, Lecture, Note
from helpers import create_curriculum, join, register_and_login, upload_lecture


def test_create_curriculum(client: TestClient, teacher_headers):
    data = create_curriculum(client, teacher_headers, "Compilers", "Parsing and codegen")
    assert data["title"] == "Compilers"
    assert data["description"] == "Parsing and codegen"
    assert len(data["uniqueCode"]) == 8


def test_create_requires_title(client: TestClient, teacher_headers):
    response = client.post("/api/curriculum", json={"description": "no title"}, headers=teacher_headers)
    assert response.status_code == 400
    assert response.json() == {"error": "Title is required"}


def test_student_cannot_create(client: TestClient, student_headers):
    response = client.post("/api/curriculum", json={"title": "Nope"}, headers=student_headers)
    assert response.status_code == 403
    assert response.json() == {"error": "Only teachers can create curriculums"}


def test_list_shows_only_own_curriculums(client: TestClient, teacher_headers, curriculum):
    other = register_and_login(client, "other@example.com", "TEACHER", name="Other")
    create_curriculum(client, other, "Other course")
    upload_lecture(client, teacher_headers, curriculum["id"])

    mine = client.get("/api/curriculum", headers=teacher_headers).json()
    assert [c["id"] for c in mine] == [curriculum["id"]]
    assert mine[0]["teacherName"] == "Ada Teacher"
    assert mine[0]["lectureCount"] == 1
    assert mine[0]["enrollmentCount"] == 0

    filtered = client.get(
        "/api/curriculum", params={"teacherId": curriculum["teacherId"]}, headers=teacher_headers
    ).json()
    assert [c["id"] for c in filtered] == [curriculum["id"]]

    response = client.get(
        "/api/curriculum", params={"teacherId": curriculum["teacherId"]}, headers=other
    )
    assert response.status_code == 403


def test_list_hides_codes_from_unenrolled_students(client: TestClient, curriculum, student_headers):
    assert client.get("/api/curriculum", headers=student_headers).json() == []

    assert join(client, student_headers, curriculum["uniqueCode"]).status_code == 200
    listed = client.get("/api/curriculum", headers=student_headers).json()
    assert [c["id"] for c in listed] == [curriculum["id"]]


def test_detail_for_owner(client: TestClient, teacher_headers, curriculum, enrolled_student):
    upload_lecture(client, teacher_headers, curriculum["id"], "Week 2", week="2")
    upload_lecture(client, teacher_headers, curriculum["id"], "Week 1", week="1")

    response = client.get(f"/api/curriculum/{curriculum['id']}", headers=teacher_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["teacher"]["name"] == "Ada Teacher"
    assert [l["title"] for l in data["lectures"]] == ["Week 1", "Week 2"]
    assert data["enrollmentCount"] == 1
    # 教师视图不带 isRead
    assert data["lectures"][0]["isRead"] is None


def test_detail_forbidden_for_other_teacher(client: TestClient, curriculum):
    other = register_and_login(client, "other@example.com", "TEACHER")
    response = client.get(f"/api/curriculum/{curriculum['id']}", headers=other)
    assert response.status_code == 403


def test_detail_forbidden_for_unenrolled_student(client: TestClient, curriculum, student_headers):
    response = client.get(f"/api/curriculum/{curriculum['id']}", headers=student_headers)
    assert response.status_code == 403


def test_detail_not_found(client: TestClient, teacher_headers):
    response = client.get("/api/curriculum/missing", headers=teacher_headers)
    assert response.status_code == 404
    assert response.json() == {"error": "Curriculum not found"}


def test_patch_semantics(client: TestClient, teacher_headers):
    curriculum = create_curriculum(client, teacher_headers, "Original", "Desc")
    url = f"/api/curriculum/{curriculum['id']}"

    # 空标题忽略，description 未出现保持不变
    data = client.patch(url, json={"title": ""}, headers=teacher_headers).json()
    assert data["title"] == "Original"
    assert data["description"] == "Desc"

    data = client.patch(url, json={"title": "Renamed"}, headers=teacher_headers).json()
    assert data["title"] == "Renamed"
    assert data["description"] == "Desc"

    data = client.patch(url, json={"description": ""}, headers=teacher_headers).json()
    assert data["description"] == ""

    data = client.patch(url, json={"description": None}, headers=teacher_headers).json()
    assert data["description"] is None


def test_patch_by_other_teacher_forbidden(client: TestClient, curriculum):
    other = register_and_login(client, "other@example.com", "TEACHER")
    response = client.patch(
        f"/api/curriculum/{curriculum['id']}", json={"title": "Hijack"}, headers=other
    )
    assert response.status_code == 403
    assert response.json() == {"error": "Unauthorized"}


def test_delete_cascades(client: TestClient, session, teacher_headers, curriculum, enrolled_student):
    upload_lecture(client, teacher_headers, curriculum["id"])
    client.post(
        "/api/curriculum/notes",
        json={"content": "Welcome", "curriculumId": curriculum["id"]},
        headers=teacher_headers,
    )

    response = client.delete(f"/api/curriculum/{curriculum['id']}", headers=teacher_headers)
    assert response.status_code == 200
    assert response.json() == {"message": "Curriculum deleted successfully"}

    session.expire_all()
    assert session.get(Curriculum, curriculum["id"]) is None
    assert session.query(Lecture).count() == 0
    assert session.query(Note).count() == 0
    assert session.query(Enrollment).count() == 0


def test_delete_by_student_forbidden(client: TestClient, curriculum, enrolled_student):
    response = client.delete(f"/api/curriculum/{curriculum['id']}", headers=enrolled_student)
    assert response.status_code == 403


def test_students_roster(client: TestClient, teacher_headers, curriculum, enrolled_student):
    response = client.get(f"/api/curriculum/{curriculum['id']}/students", headers=teacher_headers)
    assert response.status_code == 200
    roster = response.json()
    assert len(roster) == 1
    assert roster[0]["name"] == "Sam Student"
    assert roster[0]["email"] == "student@example.com"

    denied = client.get(f"/api/curriculum/{curriculum['id']}/students", headers=enrolled_student)
    assert denied.status_code == 403
