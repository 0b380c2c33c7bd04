import uuid

from app.database import SessionLocal
from app.models import ReadingProgress
from app.schemas.progress import CompletionPolicy
from app.services.progress_service import progress_service


def progress_rows(user_id: str, section_id: str) -> int:
    db = SessionLocal()
    try:
        return db.query(ReadingProgress).filter(
            ReadingProgress.user_id == uuid.UUID(user_id),
            ReadingProgress.section_id == uuid.UUID(section_id),
        ).count()
    finally:
        db.close()


def test_repeated_writes_keep_one_row(client, make_user, make_section, progress_writer):
    user_id = make_user()
    section = make_section(pages=3)

    first = progress_writer(user_id, section, 1, False)
    progress_writer(user_id, section, 2, False)
    progress_writer(user_id, section, 1, False)
    last = progress_writer(user_id, section, 3, True)

    assert last["id"] == first["id"]
    assert progress_rows(user_id, section["id"]) == 1

    r = client.get(f"/api/sections/{section['id']}/progress", params={"userId": user_id})
    assert r.status_code == 200
    body = r.json()
    assert body["currentPageNumber"] == 3
    assert body["pageId"] == section["pages"][2]["id"]
    assert body["completed"] is True


def test_revisiting_first_page_clears_completed(client, make_user, make_section, progress_writer):
    user_id = make_user()
    section = make_section(pages=3)

    done = progress_writer(user_id, section, 3, True)
    assert done["completed"] is True
    assert done["currentPageNumber"] == 3

    # Default policy stores what the reader sends
    back = progress_writer(user_id, section, 1, False)
    assert back["completed"] is False
    assert back["currentPageNumber"] == 1


def test_monotonic_policy_keeps_completed_until_reset(client, make_user, make_section, progress_writer, monkeypatch):
    monkeypatch.setattr(progress_service, "completion_policy", CompletionPolicy.MONOTONIC)
    user_id = make_user()
    section = make_section(pages=2)

    progress_writer(user_id, section, 2, True)
    back = progress_writer(user_id, section, 1, False)
    assert back["completed"] is True
    assert back["currentPageNumber"] == 1

    r = client.delete(f"/api/sections/{section['id']}/progress", params={"userId": user_id})
    assert r.status_code == 204
    assert client.get(f"/api/sections/{section['id']}/progress", params={"userId": user_id}).json() is None

    fresh = progress_writer(user_id, section, 1, False)
    assert fresh["completed"] is False


def test_reset_without_progress_is_fine(client, make_user, make_section):
    user_id = make_user()
    section = make_section()

    r = client.delete(f"/api/sections/{section['id']}/progress", params={"userId": user_id})
    assert r.status_code == 204


def test_concurrent_first_write_falls_back_to_update(make_user, make_section, progress_writer, monkeypatch):
    user_id = make_user()
    section = make_section(pages=2)
    progress_writer(user_id, section, 1, False)

    real_lookup = progress_service.get_progress
    lookups = []

    def lookup_missing_the_other_tab(db, user, section_id):
        # First lookup happens before the other tab's insert became visible
        lookups.append(section_id)
        if len(lookups) == 1:
            return None
        return real_lookup(db, user, section_id)

    monkeypatch.setattr(progress_service, "get_progress", lookup_missing_the_other_tab)

    row = progress_writer(user_id, section, 2, True)
    assert row["currentPageNumber"] == 2
    assert row["completed"] is True
    assert len(lookups) == 2
    assert progress_rows(user_id, section["id"]) == 1


def test_missing_progress_is_null(client, make_user, make_section):
    user_id = make_user()
    section = make_section()

    r = client.get(f"/api/sections/{section['id']}/progress", params={"userId": user_id})
    assert r.status_code == 200
    assert r.json() is None


def test_progress_lookup_requires_user_id(client, make_section):
    section = make_section()

    r = client.get(f"/api/sections/{section['id']}/progress")
    assert r.status_code == 400
    assert r.json() == {"error": "User ID required"}

    r = client.get("/api/reading-progress/last")
    assert r.json() == {"error": "User ID required"}


def test_unknown_user_is_an_invalid_session(client, make_section, post_progress):
    section = make_section()

    r = post_progress(str(uuid.uuid4()), section, 1, False)
    assert r.status_code == 401
    assert r.json() == {
        "error": "Your session has expired. Please log in again.",
        "invalidSession": True,
    }


def test_deleted_user_is_an_invalid_session(make_user, delete_user, make_section, progress_writer, post_progress):
    user_id = make_user()
    section = make_section(pages=2)
    progress_writer(user_id, section, 1, False)

    delete_user(user_id)

    r = post_progress(user_id, section, 2, True)
    assert r.status_code == 401
    assert r.json()["invalidSession"] is True
    assert progress_rows(user_id, section["id"]) == 0


def test_page_must_belong_to_section(client, make_user, make_section):
    user_id = make_user()
    section = make_section()
    other = make_section(pages=2)

    r = client.post(
        "/api/reading-progress",
        json={
            "userId": user_id,
            "sectionId": section["id"],
            "pageId": other["pages"][1]["id"],
            "currentPageNumber": 2,
            "completed": True,
        },
    )
    assert r.status_code == 400
    assert r.json() == {"error": "Page does not belong to this section"}
    assert progress_rows(user_id, section["id"]) == 0


def test_progress_for_unknown_page(client, make_user, make_section):
    user_id = make_user()
    section = make_section()

    r = client.post(
        "/api/reading-progress",
        json={
            "userId": user_id,
            "sectionId": section["id"],
            "pageId": str(uuid.uuid4()),
            "currentPageNumber": 1,
        },
    )
    assert r.status_code == 404
    assert r.json() == {"error": "Page not found"}
    assert progress_rows(user_id, section["id"]) == 0


def test_progress_for_unknown_section(client, make_user):
    r = client.post(
        "/api/reading-progress",
        json={"userId": make_user(), "sectionId": str(uuid.uuid4()), "currentPageNumber": 1},
    )
    assert r.status_code == 404
    assert r.json() == {"error": "Section not found"}


def test_page_numbers_start_at_one(client, make_user, make_section):
    section = make_section()

    r = client.post(
        "/api/reading-progress",
        json={"userId": make_user(), "sectionId": section["id"], "currentPageNumber": 0},
    )
    assert r.status_code == 400


def test_last_read_is_most_recent(client, make_user, make_chapter, make_section, progress_writer):
    user_id = make_user()
    chapter = make_chapter()
    x = make_section(chapter_id=chapter["id"], title="X", order=1)
    y = make_section(chapter_id=chapter["id"], title="Y", order=2)

    progress_writer(user_id, x, 1, True)
    progress_writer(user_id, y, 1, False)

    r = client.get("/api/reading-progress/last", params={"userId": user_id})
    assert r.status_code == 200
    assert r.json()["sectionId"] == y["id"]

    progress_writer(user_id, x, 1, False)
    assert client.get("/api/reading-progress/last", params={"userId": user_id}).json()["sectionId"] == x["id"]


def test_last_read_without_progress(client, make_user):
    r = client.get("/api/reading-progress/last", params={"userId": make_user()})
    assert r.status_code == 200
    assert r.json() is None


def test_user_progress_listing(client, make_user, make_chapter, make_section, progress_writer):
    user_id = make_user()
    someone_else = make_user(username="someone-else")
    chapter = make_chapter()
    x = make_section(chapter_id=chapter["id"], title="X", order=1)
    y = make_section(chapter_id=chapter["id"], title="Y", order=2)

    progress_writer(user_id, x, 1, True)
    progress_writer(user_id, y, 1, False)
    progress_writer(someone_else, x, 1, False)

    rows = client.get(f"/api/users/{user_id}/progress").json()
    assert [row["sectionId"] for row in rows] == [y["id"], x["id"]]

    same = client.get("/api/reading-progress", params={"userId": user_id}).json()
    assert [row["id"] for row in same] == [row["id"] for row in rows]
