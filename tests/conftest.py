import os
import uuid

# Settings are read at import time, so the test environment must be in place first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CACHE_ENABLED"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

import app.models  # noqa: F401
from app.database import Base, SessionLocal, engine, get_db
from app.main import app
from app.models import User


@pytest.fixture(autouse=True)
def fresh_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    def override_get_db():
        db = SessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def make_user():
    def _make(username: str = "reader", role: str = "reader") -> str:
        db = SessionLocal()
        try:
            user = User(username=username, password="not-a-real-hash", role=role)
            db.add(user)
            db.commit()
            return str(user.id)
        finally:
            db.close()

    return _make


@pytest.fixture
def delete_user():
    def _delete(user_id: str) -> None:
        db = SessionLocal()
        try:
            db.query(User).filter(User.id == uuid.UUID(user_id)).delete()
            db.commit()
        finally:
            db.close()

    return _delete


@pytest.fixture
def make_chapter(client):
    def _make(title: str = "Chapter", order: int = 0) -> dict:
        r = client.post("/api/chapters", json={"title": title, "order": order})
        assert r.status_code == 201, r.text
        return r.json()

    return _make


@pytest.fixture
def make_section(client, make_chapter):
    """Section with `pages` pages; the first one is the default page created with it"""

    def _make(chapter_id: str = None, title: str = "Section", order: int = 0, pages: int = 1) -> dict:
        if chapter_id is None:
            chapter_id = make_chapter()["id"]

        r = client.post("/api/sections", json={"chapterId": chapter_id, "title": title, "order": order})
        assert r.status_code == 201, r.text
        section = r.json()

        for number in range(2, pages + 1):
            r = client.post(
                "/api/pages",
                json={"sectionId": section["id"], "pageNumber": number, "content": f"Page {number}"},
            )
            assert r.status_code == 201, r.text

        section["pages"] = client.get(f"/api/sections/{section['id']}/pages").json()
        return section

    return _make


@pytest.fixture
def post_progress(client):
    def _post(user_id: str, section: dict, page_number: int, completed: bool):
        page = section["pages"][page_number - 1]
        return client.post(
            "/api/reading-progress",
            json={
                "userId": user_id,
                "sectionId": section["id"],
                "pageId": page["id"],
                "currentPageNumber": page_number,
                "completed": completed,
            },
        )

    return _post


@pytest.fixture
def progress_writer(post_progress):
    def _write(user_id: str, section: dict, page_number: int, completed: bool) -> dict:
        r = post_progress(user_id, section, page_number, completed)
        assert r.status_code == 200, r.text
        return r.json()

    return _write
