from __future__ import annotations

import pytest

from lingua_core.errors import StoreError
from lingua_core.seed import load_seed
from lingua_core.store import JsonStore


def test_questions_come_back_in_display_order(store):
    rows = store.questions_for_test("t1")
    assert [r["order_index"] for r in rows] == [1, 2]
    assert store.questions_for_test("other") == []


def test_insert_result_fills_id_and_timestamps(store):
    row = store.insert_result({"user_id": "u1", "test_id": "t1", "answers": {}, "score": 0.0, "band_score": 0.0, "status": "completed"})
    assert row["id"]
    assert row["completed_at"] and row["created_at"]
    assert row["admin_feedback"] is None
    assert store.results_for_user("u1") == [row]
    assert store.results_for_user("u2") == []


def test_results_for_user_newest_first_with_limit(store):
    for stamp in ("2024-01-01", "2024-03-01", "2024-02-01"):
        store.insert_result({"user_id": "u1", "test_id": "t1", "completed_at": stamp, "score": 1.0, "band_score": 0.1, "status": "completed"})
    rows = store.results_for_user("u1", limit=2)
    assert [r["completed_at"] for r in rows] == ["2024-03-01", "2024-02-01"]


def test_corrupt_table_raises_store_error(tmp_path):
    s = JsonStore(tmp_path)
    (tmp_path / "tests.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(StoreError):
        s.get_test("t1")


def test_missing_tables_read_as_empty(tmp_path):
    s = JsonStore(tmp_path / "fresh")
    assert s.is_empty()
    assert s.list_tests() == []
    assert s.get_test("t1") is None


def test_bundled_seed_is_consistent(tmp_path):
    tables = load_seed()
    tests, questions = tables["tests"], tables["test_questions"]
    s = JsonStore(tmp_path)
    s.seed(**tables)
    listed = {t["id"]: t for t in s.list_tests()}
    assert set(listed) == {t["id"] for t in tests}
    assert sum(t["question_count"] for t in listed.values()) == len(questions)
    assert list(listed)[0] == "writing-task-2", "newest test first"
    courses = {c["id"]: c for c in s.list_courses()}
    assert sum(c["lesson_count"] for c in courses.values()) == len(tables["lessons"])
    assert s.get_user("demo-learner")["current_level"] == "beginner"


def test_courses_and_lessons_come_back_in_order(tmp_path):
    s = JsonStore(tmp_path)
    s.seed(
        [],
        [],
        courses=[{"id": "b", "order_index": 2}, {"id": "a", "order_index": 1}, {"id": "c", "order_index": 3}],
        lessons=[
            {"id": "a-2", "course_id": "a", "order_index": 2},
            {"id": "a-1", "course_id": "a", "order_index": 1},
            {"id": "b-1", "course_id": "b", "order_index": 1},
        ],
    )
    assert [(c["id"], c["lesson_count"]) for c in s.list_courses()] == [("a", 2), ("b", 1), ("c", 0)]
    assert [r["id"] for r in s.lessons_for_course("a")] == ["a-1", "a-2"]
    assert s.get_lesson("b-1")["course_id"] == "b"
    assert s.get_course("zzz") is None


def test_upsert_progress_keeps_one_row_per_lesson(store):
    first = store.upsert_progress("u1", "l1")
    again = store.upsert_progress("u1", "l1")
    assert again["id"] == first["id"]
    assert again["completed"] is True and again["completed_at"]
    store.upsert_progress("u1", "l2", completed=False)
    store.upsert_progress("u2", "l3")
    assert store.completed_lesson_ids("u1") == {"l1"}
    assert store.completed_lesson_ids("u2") == {"l3"}
    assert store.completed_lesson_ids("u3") == set()


def test_insert_support_message_defaults(store):
    row = store.insert_support_message({"name": "Ann", "email": "ann@example.com", "subject": "Hi", "message": "Audio fails"})
    assert row["id"] and row["created_at"]
    assert row["status"] == "new"
    assert row["user_id"] is None
    assert store.support_messages() == [row]
