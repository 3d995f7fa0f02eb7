from __future__ import annotations

import pytest

from lingua_core.store import JsonStore


def build_catalog(
    *,
    test_id: str = "t1",
    test_type: str = "reading",
    duration_minutes: int = 10,
    points: tuple[int, ...] = (5, 5),
    expected: tuple[str | None, ...] = ("A", "B"),
) -> tuple[list[dict], list[dict]]:
    """Create one test with one multiple-choice question per points/expected pair."""

    tests = [
        {
            "id": test_id,
            "title_en": f"Test {test_id}",
            "title_ru": f"Тест {test_id}",
            "title_uz": "",
            "description_en": "synthetic",
            "test_type": test_type,
            "difficulty": "beginner",
            "duration_minutes": duration_minutes,
            "created_at": "2024-01-01T00:00:00+00:00",
        }
    ]
    questions = []
    for idx, (pts, ans) in enumerate(zip(points, expected), start=1):
        questions.append(
            {
                "id": f"q{idx}",
                "test_id": test_id,
                "question_en": f"Question {idx}",
                "question_ru": f"Вопрос {idx}",
                "question_type": "multiple_choice" if ans is not None else "essay",
                "options": {"options": ["A", "B", "C"]} if ans is not None else None,
                "correct_answer": ans,
                "points": pts,
                "order_index": idx,
            }
        )
    # stored out of order so ordering by order_index is exercised
    questions.reverse()
    return tests, questions


@pytest.fixture
def make_store(tmp_path):
    def _make(name: str = "data", **catalog) -> JsonStore:
        s = JsonStore(tmp_path / name)
        s.seed(*build_catalog(**catalog))
        return s
    return _make


@pytest.fixture
def store(make_store) -> JsonStore:
    return make_store()


class Recorder:
    """Captures navigation targets."""

    def __init__(self):
        self.targets: list[str] = []

    def __call__(self, target: str) -> None:
        self.targets.append(target)


@pytest.fixture
def nav() -> Recorder:
    return Recorder()
