"""Test and course catalog, lesson progress, and per-learner dashboard summaries."""
from __future__ import annotations
from typing import Any, Dict, List, Optional
from .errors import NotFoundError
from .i18n import localized
from .config import DEFAULT_LANG, RECENT_RESULTS


def list_tests(store, test_type: str = "all", difficulty: str = "all", lang: str = DEFAULT_LANG) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for row in store.list_tests():
        if test_type != "all" and row.get("test_type") != test_type:
            continue
        if difficulty != "all" and row.get("difficulty") != difficulty:
            continue
        out.append({
            "id": row.get("id"),
            "title": localized(row, "title", lang),
            "description": localized(row, "description", lang),
            "test_type": row.get("test_type"),
            "difficulty": row.get("difficulty"),
            "duration_minutes": int(row.get("duration_minutes") or 0),
            "question_count": int(row.get("question_count") or 0),
        })
    return out


def dashboard_summary(store, user_id: str, lang: str = DEFAULT_LANG, recent: int = RECENT_RESULTS) -> Dict[str, Any]:
    """Profile, lessons completed, tests taken, average band over the latest results, and those results with test titles."""

    profile = store.get_user(user_id) or {}
    results = store.results_for_user(user_id)
    latest = results[:recent]
    avg = sum(float(r.get("band_score") or 0.0) for r in latest) / len(latest) if latest else 0.0

    titles: Dict[str, Dict[str, Any]] = {}
    recent_rows: List[Dict[str, Any]] = []
    for r in latest:
        tid = r.get("test_id")
        if tid not in titles:
            titles[tid] = store.get_test(tid) or {}
        test = titles[tid]
        recent_rows.append({
            "id": r.get("id"),
            "test_id": tid,
            "title": localized(test, "title", lang),
            "test_type": test.get("test_type"),
            "score": r.get("score"),
            "band_score": r.get("band_score"),
            "status": r.get("status"),
            "completed_at": r.get("completed_at"),
        })
    return {
        "user_id": user_id,
        "name": profile.get("name"),
        "current_level": profile.get("current_level") or "beginner",
        "completed_lessons": len(store.completed_lesson_ids(user_id)),
        "tests_taken": len(results),
        "average_band": round(avg, 2),
        "recent": recent_rows,
    }


def list_courses(store, module_type: str = "all", difficulty: str = "all", lang: str = DEFAULT_LANG) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for row in store.list_courses():
        if module_type != "all" and row.get("module_type") != module_type:
            continue
        if difficulty != "all" and row.get("difficulty") != difficulty:
            continue
        out.append({
            "id": row.get("id"),
            "title": localized(row, "title", lang),
            "description": localized(row, "description", lang),
            "module_type": row.get("module_type"),
            "difficulty": row.get("difficulty"),
            "lesson_count": int(row.get("lesson_count") or 0),
        })
    return out


def course_detail(store, course_id: str, user_id: Optional[str] = None, lang: str = DEFAULT_LANG) -> Optional[Dict[str, Any]]:
    """Course with its ordered lessons; ``completed`` flags only when a user is given."""

    course = store.get_course(course_id)
    if course is None:
        return None
    done = store.completed_lesson_ids(user_id) if user_id else set()
    lessons = []
    for row in store.lessons_for_course(course_id):
        item = {
            "id": row.get("id"),
            "title": localized(row, "title", lang),
            "order_index": int(row.get("order_index") or 0),
        }
        if user_id:
            item["completed"] = row.get("id") in done
        lessons.append(item)
    return {
        "id": course.get("id"),
        "title": localized(course, "title", lang),
        "description": localized(course, "description", lang),
        "module_type": course.get("module_type"),
        "difficulty": course.get("difficulty"),
        "lessons": lessons,
    }


def lesson_detail(store, lesson_id: str, user_id: Optional[str] = None, lang: str = DEFAULT_LANG) -> Optional[Dict[str, Any]]:
    lesson = store.get_lesson(lesson_id)
    if lesson is None:
        return None
    order = int(lesson.get("order_index") or 0)
    later = [r for r in store.lessons_for_course(lesson.get("course_id")) if int(r.get("order_index") or 0) > order]
    completed = bool(user_id) and lesson_id in store.completed_lesson_ids(user_id)
    return {
        "id": lesson.get("id"),
        "course_id": lesson.get("course_id"),
        "title": localized(lesson, "title", lang),
        "content": localized(lesson, "content", lang),
        "audio_url": lesson.get("audio_url"),
        "video_url": lesson.get("video_url"),
        "next_lesson_id": later[0].get("id") if later else None,
        "completed": completed,
    }


def mark_lesson_complete(store, user_id: str, lesson_id: str) -> Dict[str, Any]:
    if store.get_lesson(lesson_id) is None:
        raise NotFoundError(f"lesson {lesson_id} not found")
    return store.upsert_progress(user_id, lesson_id, completed=True)
