import uuid

import pytest

from app.services.completion_service import completion_service


@pytest.mark.parametrize(
    "total, flags, expected",
    [
        (0, [], (False, False, 0)),
        (3, [], (False, False, 0)),
        (3, [True, True], (False, True, 2)),
        (3, [False], (False, True, 0)),
        (2, [True, True], (True, False, 2)),
        (2, [True, False], (False, True, 1)),
    ],
)
def test_summarize(total, flags, expected):
    completed, in_progress, completed_sections = expected

    summary = completion_service.summarize(total, flags)

    assert summary == {
        "completed": completed,
        "in_progress": in_progress,
        "total_sections": total,
        "completed_sections": completed_sections,
    }


def test_chapter_progress_two_of_three(client, make_user, make_chapter, make_section, progress_writer):
    user_id = make_user()
    chapter = make_chapter()
    s1 = make_section(chapter_id=chapter["id"], title="S1", order=1)
    s2 = make_section(chapter_id=chapter["id"], title="S2", order=2)
    make_section(chapter_id=chapter["id"], title="S3", order=3)

    progress_writer(user_id, s1, 1, True)
    progress_writer(user_id, s2, 1, True)

    r = client.get(f"/api/chapters/{chapter['id']}/progress", params={"userId": user_id})
    assert r.status_code == 200
    assert r.json() == {
        "completed": False,
        "inProgress": True,
        "totalSections": 3,
        "completedSections": 2,
    }


def test_chapter_progress_all_sections_done(client, make_user, make_chapter, make_section, progress_writer):
    user_id = make_user()
    chapter = make_chapter()
    sections = [make_section(chapter_id=chapter["id"], title=f"S{i}", order=i, pages=2) for i in range(2)]

    for section in sections:
        progress_writer(user_id, section, 2, True)

    body = client.get(f"/api/chapters/{chapter['id']}/progress", params={"userId": user_id}).json()
    assert body["completed"] is True
    assert body["inProgress"] is False

    # Going back to the first page of one section reopens the chapter
    progress_writer(user_id, sections[0], 1, False)
    body = client.get(f"/api/chapters/{chapter['id']}/progress", params={"userId": user_id}).json()
    assert body["completed"] is False
    assert body["inProgress"] is True
    assert body["completedSections"] == 1


def test_chapter_progress_ignores_other_readers(client, make_user, make_section, progress_writer):
    reader = make_user()
    other = make_user(username="other")
    section = make_section()
    progress_writer(other, section, 1, True)

    body = client.get(f"/api/chapters/{section['chapterId']}/progress", params={"userId": reader}).json()
    assert body == {"completed": False, "inProgress": False, "totalSections": 1, "completedSections": 0}


def test_empty_or_unknown_chapter_is_never_completed(client, make_user, make_chapter):
    user_id = make_user()
    chapter = make_chapter()

    expected = {"completed": False, "inProgress": False, "totalSections": 0, "completedSections": 0}
    assert client.get(f"/api/chapters/{chapter['id']}/progress", params={"userId": user_id}).json() == expected
    assert client.get(f"/api/chapters/{uuid.uuid4()}/progress", params={"userId": user_id}).json() == expected


def test_chapter_progress_requires_user_id(client, make_chapter):
    chapter = make_chapter()

    r = client.get(f"/api/chapters/{chapter['id']}/progress")
    assert r.status_code == 400
    assert r.json() == {"error": "User ID required"}
