"""File-backed tables standing in for the hosted database.

Each table is a JSON list of rows under ``root``; column names match the
hosted schema so rows can be moved between the two without mapping.
"""

from __future__ import annotations

import json
import logging
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from .errors import StoreError


log = logging.getLogger(__name__)

TESTS = "tests"
QUESTIONS = "test_questions"
RESULTS = "test_results"
USERS = "users"
COURSES = "courses"
LESSONS = "lessons"
PROGRESS = "user_progress"
SUPPORT = "support_messages"

_LOCK = threading.Lock()


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class JsonStore:
    def __init__(self, root: str | Path):
        self.root = Path(root).resolve()

    def _path(self, table: str) -> Path:
        return self.root / f"{table}.json"

    def _read(self, table: str) -> List[Dict[str, Any]]:
        path = self._path(table)
        if not path.exists():
            return []
        try:
            rows = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise StoreError(f"could not read {table}: {e}") from e
        if not isinstance(rows, list):
            raise StoreError(f"table {table} is not a list")
        return rows

    def _write(self, table: str, rows: List[Dict[str, Any]]) -> None:
        path = self._path(table)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp = path.with_suffix(path.suffix + ".tmp")
            tmp.write_text(json.dumps(rows, indent=2, sort_keys=True, ensure_ascii=False), encoding="utf-8")
            tmp.replace(path)
        except OSError as e:
            raise StoreError(f"could not write {table}: {e}") from e

    # ---- reads ----
    def get_test(self, test_id: str) -> Optional[Dict[str, Any]]:
        for row in self._read(TESTS):
            if row.get("id") == test_id:
                return row
        return None

    def questions_for_test(self, test_id: str) -> List[Dict[str, Any]]:
        rows = [r for r in self._read(QUESTIONS) if r.get("test_id") == test_id]
        rows.sort(key=lambda r: int(r.get("order_index") or 0))
        return rows

    def list_tests(self) -> List[Dict[str, Any]]:
        counts: Dict[str, int] = {}
        for q in self._read(QUESTIONS):
            tid = q.get("test_id")
            counts[tid] = counts.get(tid, 0) + 1
        out = []
        for row in self._read(TESTS):
            item = dict(row)
            item["question_count"] = counts.get(row.get("id"), 0)
            out.append(item)
        out.sort(key=lambda r: r.get("created_at") or "", reverse=True)
        return out

    def results_for_user(self, user_id: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        rows = [r for r in self._read(RESULTS) if r.get("user_id") == user_id]
        rows.sort(key=lambda r: r.get("completed_at") or "", reverse=True)
        return rows[:limit] if limit is not None else rows

    def _by_id(self, table: str, row_id: str) -> Optional[Dict[str, Any]]:
        for row in self._read(table):
            if row.get("id") == row_id:
                return row
        return None

    def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        return self._by_id(USERS, user_id)

    def get_course(self, course_id: str) -> Optional[Dict[str, Any]]:
        return self._by_id(COURSES, course_id)

    def get_lesson(self, lesson_id: str) -> Optional[Dict[str, Any]]:
        return self._by_id(LESSONS, lesson_id)

    def list_courses(self) -> List[Dict[str, Any]]:
        counts: Dict[str, int] = {}
        for lesson in self._read(LESSONS):
            cid = lesson.get("course_id")
            counts[cid] = counts.get(cid, 0) + 1
        out = []
        for row in self._read(COURSES):
            item = dict(row)
            item["lesson_count"] = counts.get(row.get("id"), 0)
            out.append(item)
        out.sort(key=lambda r: int(r.get("order_index") or 0))
        return out

    def lessons_for_course(self, course_id: str) -> List[Dict[str, Any]]:
        rows = [r for r in self._read(LESSONS) if r.get("course_id") == course_id]
        rows.sort(key=lambda r: int(r.get("order_index") or 0))
        return rows

    def completed_lesson_ids(self, user_id: str) -> set[str]:
        return {
            r.get("lesson_id")
            for r in self._read(PROGRESS)
            if r.get("user_id") == user_id and r.get("completed")
        }

    def support_messages(self) -> List[Dict[str, Any]]:
        return self._read(SUPPORT)

    # ---- writes ----
    def insert_result(self, row: Dict[str, Any]) -> Dict[str, Any]:
        """Append one result row and return it with id and timestamps filled in."""

        now = utcnow_iso()
        stored = dict(row)
        stored["id"] = stored.get("id") or str(uuid.uuid4())
        stored.setdefault("admin_feedback", None)
        stored["completed_at"] = stored.get("completed_at") or now
        stored["created_at"] = stored.get("created_at") or now
        with _LOCK:
            rows = self._read(RESULTS)
            rows.append(stored)
            self._write(RESULTS, rows)
        log.info("stored result %s for user=%s test=%s", stored["id"], stored.get("user_id"), stored.get("test_id"))
        return stored

    def upsert_progress(self, user_id: str, lesson_id: str, completed: bool = True) -> Dict[str, Any]:
        """One progress row per (user, lesson); repeated calls update it in place."""

        now = utcnow_iso()
        with _LOCK:
            rows = self._read(PROGRESS)
            for row in rows:
                if row.get("user_id") == user_id and row.get("lesson_id") == lesson_id:
                    break
            else:
                row = {"id": str(uuid.uuid4()), "user_id": user_id, "lesson_id": lesson_id, "created_at": now}
                rows.append(row)
            row["completed"] = bool(completed)
            row["completed_at"] = now if completed else None
            row["updated_at"] = now
            self._write(PROGRESS, rows)
        return dict(row)

    def insert_support_message(self, row: Dict[str, Any]) -> Dict[str, Any]:
        stored = dict(row)
        stored["id"] = stored.get("id") or str(uuid.uuid4())
        stored.setdefault("user_id", None)
        stored["status"] = stored.get("status") or "new"
        stored["created_at"] = stored.get("created_at") or utcnow_iso()
        with _LOCK:
            rows = self._read(SUPPORT)
            rows.append(stored)
            self._write(SUPPORT, rows)
        log.info("support message %s from %s", stored["id"], stored.get("email"))
        return stored

    def seed(
        self,
        tests: Iterable[Dict[str, Any]],
        test_questions: Iterable[Dict[str, Any]],
        courses: Iterable[Dict[str, Any]] = (),
        lessons: Iterable[Dict[str, Any]] = (),
        users: Iterable[Dict[str, Any]] = (),
    ) -> None:
        """Replace the catalog tables; results, progress and messages are left alone."""

        with _LOCK:
            self._write(TESTS, list(tests))
            self._write(QUESTIONS, list(test_questions))
            self._write(COURSES, list(courses))
            self._write(LESSONS, list(lessons))
            users = list(users)
            if users:
                self._write(USERS, users)

    def is_empty(self) -> bool:
        return not self._path(TESTS).exists()
