import os
import sys
import tempfile

import pytest

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# 导入应用前设置，避免测试写入 ./storage
os.environ.setdefault("CURRICULA_DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("CURRICULA_UPLOAD_DIR", tempfile.mkdtemp(prefix="curricula-uploads-"))

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from curricula.config import get_settings
from curricula.db import Base, get_db
from curricula.main import app
from helpers import create_curriculum, join, register_and_login

# Use in-memory SQLite for testing to ensure isolation
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def session():
    """
    Create a fresh database session for each test.
    """
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)

@pytest.fixture(scope="function")
def settings(tmp_path):
    """上传目录指向本测试的临时目录。"""
    return get_settings().model_copy(update={"upload_dir": tmp_path / "uploads"})

@pytest.fixture(scope="function")
def client(session, settings):
    """
    Create a TestClient that uses the override_get_db dependency.
    """
    def override_get_db():
        try:
            yield session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: settings
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()

@pytest.fixture
def teacher_headers(client):
    return register_and_login(client, "teacher@example.com", "TEACHER", name="Ada Teacher")

@pytest.fixture
def student_headers(client):
    return register_and_login(client, "student@example.com", "STUDENT", name="Sam Student")

@pytest.fixture
def curriculum(client, teacher_headers):
    return create_curriculum(client, teacher_headers)

@pytest.fixture
def enrolled_student(client, curriculum, student_headers):
    response = join(client, student_headers, curriculum["uniqueCode"])
    assert response.status_code == 200, response.text
    return student_headers
