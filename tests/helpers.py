"""测试用的请求辅助函数。"""

from fastapi.testclient import TestClient

PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\ntrailer\n<<>>\n%%EOF\n"


def signup(client: TestClient, email: str, role: str = "STUDENT", name: str = None, **extra):
    payload = {
        "name": name or email.split("@")[0],
        "email": email,
        "password": "password123",
        "university": "Test University",
        "role": role,
    }
    payload.update(extra)
    return client.post("/api/auth/signup", json=payload)


def login_headers(client: TestClient, email: str, password: str = "password123"):
    response = client.post("/api/auth/login", data={"email": email, "password": password})
    assert response.status_code == 200, response.text
    # 只用 Bearer 头认证，避免 Cookie 在用户之间串用
    client.cookies.clear()
    return {"Authorization": f"Bearer {response.json()['accessToken']}"}


def register_and_login(client: TestClient, email: str, role: str = "STUDENT", **extra):
    assert signup(client, email, role, **extra).status_code == 201
    return login_headers(client, email)


def create_curriculum(client: TestClient, headers, title: str = "Algorithms", description: str = None):
    response = client.post(
        "/api/curriculum", json={"title": title, "description": description}, headers=headers
    )
    assert response.status_code == 201, response.text
    return response.json()


def join(client: TestClient, headers, code: str):
    return client.post("/api/curriculum/join", json={"code": code}, headers=headers)


def upload_lecture(client: TestClient, headers, curriculum_id: str, title: str = "Intro", week: str = "1"):
    response = client.post(
        "/api/lecture",
        data={"title": title, "weekNumber": week, "curriculumId": curriculum_id},
        files={"pdfFile": ("intro.pdf", PDF_BYTES, "application/pdf")},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


def create_homework(client: TestClient, headers, lecture_id: str, **fields):
    payload = {"title": "Problem set 1", "type": "FILE_UPLOAD", "lectureId": lecture_id}
    payload.update(fields)
    response = client.post("/api/homework", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def submit_pdf(client: TestClient, headers, homework_id: str, content: bytes = PDF_BYTES):
    return client.post(
        "/api/homework-submission",
        data={"homeworkId": homework_id},
        files={"file": ("answer.pdf", content, "application/pdf")},
        headers=headers,
    )


