import uuid

from sqlalchemy.exc import SQLAlchemyError

from app.database import SessionLocal
from app.models import AnalyticsEvent, Chapter, LikedSection, Page, ReadingProgress, Section
from app.services.content_service import content_service


def count(model) -> int:
    db = SessionLocal()
    try:
        return db.query(model).count()
    finally:
        db.close()


def test_health_ok(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "healthy"


def test_chapters_listed_by_order(client, make_chapter):
    make_chapter(title="Later", order=2)
    make_chapter(title="First", order=1)

    r = client.get("/api/chapters")
    assert r.status_code == 200
    assert [c["title"] for c in r.json()] == ["First", "Later"]


def test_chapter_update_is_partial(client, make_chapter):
    chapter = make_chapter(title="Spring", order=1)

    r = client.patch(f"/api/chapters/{chapter['id']}", json={"coverImage": "/img/spring.jpg"})
    assert r.status_code == 200
    body = r.json()
    assert body["title"] == "Spring"
    assert body["coverImage"] == "/img/spring.jpg"


def test_create_section_creates_one_empty_first_page(client, make_chapter):
    chapter = make_chapter()

    r = client.post(
        "/api/sections",
        json={"chapterId": chapter["id"], "title": "Morning", "order": 1, "mood": ["calm"]},
    )
    assert r.status_code == 201
    section = r.json()
    assert section["chapterId"] == chapter["id"]
    assert section["mood"] == ["calm"]
    assert section["tags"] == []

    pages = client.get(f"/api/sections/{section['id']}/pages").json()
    assert len(pages) == 1
    assert pages[0]["pageNumber"] == 1
    assert pages[0]["content"] == ""


def test_section_not_created_when_default_page_fails(client, make_chapter, monkeypatch):
    chapter = make_chapter()

    def broken_page(section_id):
        raise SQLAlchemyError("pages table unavailable")

    monkeypatch.setattr(content_service, "_build_default_page", broken_page)

    r = client.post("/api/sections", json={"chapterId": chapter["id"], "title": "Lost", "order": 1})
    assert r.status_code == 500
    assert r.json() == {"error": "Server error creating section"}

    assert count(Section) == 0
    assert count(Page) == 0
    assert client.get(f"/api/chapters/{chapter['id']}/sections").json() == []


def test_create_section_in_unknown_chapter(client):
    r = client.post("/api/sections", json={"chapterId": str(uuid.uuid4()), "title": "Orphan", "order": 1})
    assert r.status_code == 404
    assert r.json() == {"error": "Chapter not found"}
    assert count(Section) == 0


def test_section_tags_are_deduplicated(client, make_chapter):
    chapter = make_chapter()

    r = client.post(
        "/api/sections",
        json={"chapterId": chapter["id"], "title": "Tagged", "order": 1, "tags": ["sea", "sun", "sea"]},
    )
    assert r.status_code == 201
    assert r.json()["tags"] == ["sea", "sun"]


def test_pages_listed_by_page_number(client, make_section):
    section = make_section(pages=3)

    numbers = [p["pageNumber"] for p in section["pages"]]
    assert numbers == [1, 2, 3]


def test_duplicate_page_number_is_a_conflict(client, make_section):
    section = make_section(pages=2)

    r = client.post("/api/pages", json={"sectionId": section["id"], "pageNumber": 2, "content": "again"})
    assert r.status_code == 409
    assert r.json() == {"error": "Page number already exists in this section"}


def test_page_content_update(client, make_section):
    section = make_section()
    page_id = section["pages"][0]["id"]

    r = client.patch(f"/api/pages/{page_id}", json={"content": "<p>Dear diary</p>"})
    assert r.status_code == 200
    assert r.json()["content"] == "<p>Dear diary</p>"
    assert r.json()["pageNumber"] == 1


def test_reorder_sections(client, make_chapter, make_section):
    chapter = make_chapter()
    a = make_section(chapter_id=chapter["id"], title="A", order=1)
    b = make_section(chapter_id=chapter["id"], title="B", order=2)

    r = client.patch(
        "/api/sections/reorder",
        json={"sectionOrders": [{"id": a["id"], "order": 2}, {"id": b["id"], "order": 1}]},
    )
    assert r.status_code == 200
    assert r.json() == {"success": True}

    titles = [s["title"] for s in client.get(f"/api/chapters/{chapter['id']}/sections").json()]
    assert titles == ["B", "A"]


def test_reorder_across_chapters_is_rejected_entirely(client, make_chapter, make_section):
    chapter = make_chapter()
    a = make_section(chapter_id=chapter["id"], title="A", order=1)
    b = make_section(chapter_id=chapter["id"], title="B", order=2)
    elsewhere = make_section(title="X", order=5)

    r = client.patch(
        "/api/sections/reorder",
        json={
            "sectionOrders": [
                {"id": a["id"], "order": 2},
                {"id": b["id"], "order": 3},
                {"id": elsewhere["id"], "order": 1},
            ]
        },
    )
    assert r.status_code == 400
    assert r.json() == {"error": "All sections must belong to the same chapter"}

    orders = {s["title"]: s["order"] for s in client.get(f"/api/chapters/{chapter['id']}/sections").json()}
    assert orders == {"A": 1, "B": 2}
    assert client.get(f"/api/sections/{elsewhere['id']}").json()["order"] == 5


def test_reorder_with_duplicate_orders_is_rejected(client, make_chapter, make_section):
    chapter = make_chapter()
    a = make_section(chapter_id=chapter["id"], title="A", order=1)
    b = make_section(chapter_id=chapter["id"], title="B", order=2)

    r = client.patch(
        "/api/sections/reorder",
        json={"sectionOrders": [{"id": a["id"], "order": 3}, {"id": b["id"], "order": 3}]},
    )
    assert r.status_code == 400
    assert r.json() == {"error": "Order values must be unique"}

    orders = {s["title"]: s["order"] for s in client.get(f"/api/chapters/{chapter['id']}/sections").json()}
    assert orders == {"A": 1, "B": 2}


def test_partial_reorder_cannot_collide_with_untouched_sections(client, make_chapter, make_section):
    chapter = make_chapter()
    a = make_section(chapter_id=chapter["id"], title="A", order=1)
    make_section(chapter_id=chapter["id"], title="B", order=2)
    make_section(chapter_id=chapter["id"], title="C", order=3)

    r = client.patch("/api/sections/reorder", json={"sectionOrders": [{"id": a["id"], "order": 2}]})
    assert r.status_code == 400
    assert r.json() == {"error": "Order values must be unique"}

    orders = {s["title"]: s["order"] for s in client.get(f"/api/chapters/{chapter['id']}/sections").json()}
    assert orders == {"A": 1, "B": 2, "C": 3}

    # A free rank is fine
    r = client.patch("/api/sections/reorder", json={"sectionOrders": [{"id": a["id"], "order": 4}]})
    assert r.status_code == 200
    titles = [s["title"] for s in client.get(f"/api/chapters/{chapter['id']}/sections").json()]
    assert titles == ["B", "C", "A"]


def test_reorder_with_unknown_section(client, make_section):
    a = make_section(title="A", order=1)

    r = client.patch(
        "/api/sections/reorder",
        json={"sectionOrders": [{"id": a["id"], "order": 2}, {"id": str(uuid.uuid4()), "order": 1}]},
    )
    assert r.status_code == 404
    assert client.get(f"/api/sections/{a['id']}").json()["order"] == 1


def test_reorder_requires_assignments(client):
    r = client.patch("/api/sections/reorder", json={"sectionOrders": []})
    assert r.status_code == 400
    assert r.json() == {"error": "sectionOrders must be a non-empty array"}

    r = client.patch("/api/sections/reorder", json={})
    assert r.status_code == 400
    assert r.json()["error"] == "Invalid request data"


def test_delete_chapter_cascades(client, make_user, make_section, progress_writer):
    user_id = make_user()
    section = make_section(pages=2)
    chapter_id = section["chapterId"]

    progress_writer(user_id, section, 2, True)
    assert client.post(f"/api/sections/{section['id']}/like", json={"userId": user_id}).status_code == 200
    r = client.post(
        "/api/analytics",
        json={
            "userId": user_id,
            "pageId": section["pages"][1]["id"],
            "sectionId": section["id"],
            "chapterId": chapter_id,
            "eventType": "section_completed",
            "duration": 0,
        },
    )
    assert r.status_code == 201

    r = client.delete(f"/api/chapters/{chapter_id}")
    assert r.status_code == 204

    assert count(Chapter) == 0
    assert count(Section) == 0
    assert count(Page) == 0
    assert count(ReadingProgress) == 0
    assert count(LikedSection) == 0
    assert count(AnalyticsEvent) == 0


def test_delete_section_leaves_siblings(client, make_user, make_chapter, make_section, progress_writer):
    user_id = make_user()
    chapter = make_chapter()
    doomed = make_section(chapter_id=chapter["id"], title="Doomed", order=1, pages=2)
    kept = make_section(chapter_id=chapter["id"], title="Kept", order=2)

    progress_writer(user_id, doomed, 1, False)
    progress_writer(user_id, kept, 1, True)

    assert client.delete(f"/api/sections/{doomed['id']}").status_code == 204

    assert [s["title"] for s in client.get(f"/api/chapters/{chapter['id']}/sections").json()] == ["Kept"]
    assert count(ReadingProgress) == 1
    assert count(Page) == 1


def test_delete_page_drops_progress_pointing_at_it(client, make_user, make_section, progress_writer):
    user_id = make_user()
    section = make_section(pages=2)
    progress_writer(user_id, section, 2, True)

    assert client.delete(f"/api/pages/{section['pages'][1]['id']}").status_code == 204

    r = client.get(f"/api/sections/{section['id']}/progress", params={"userId": user_id})
    assert r.status_code == 200
    assert r.json() is None


def test_missing_content_is_not_found(client):
    missing = str(uuid.uuid4())

    assert client.get(f"/api/chapters/{missing}").json() == {"error": "Chapter not found"}
    assert client.get(f"/api/sections/{missing}").status_code == 404
    assert client.delete(f"/api/pages/{missing}").status_code == 404


def test_malformed_id_is_a_client_error(client):
    r = client.get("/api/sections/not-a-uuid")
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid request data"}
