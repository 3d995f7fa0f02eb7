from __future__ import annotations
from typing import Dict, Iterable, Mapping, Tuple
from .types import Question
from .config import BAND_MAX, FREE_RESPONSE_TYPES


def _clamp(x: float, lo: float, hi: float) -> float:
    if x < lo: return lo
    if x > hi: return hi
    return x

def point_totals(questions: Iterable[Question], answers: Mapping[str, str]) -> Tuple[int, int]:
    """
    Returns (total_points, earned_points).
    Questions without a correct_answer (human-graded) count toward the total
    but never earn points here. Matching is exact string equality.
    """
    total = 0
    earned = 0
    for q in questions:
        pts = int(q.points)
        total += pts
        if q.correct_answer is not None and answers.get(q.id) == q.correct_answer:
            earned += pts
    return total, earned

def score_answers(questions: Iterable[Question], answers: Mapping[str, str]) -> Dict[str, float]:
    total, earned = point_totals(questions, answers)
    percentage = (earned / total) * 100.0 if total > 0 else 0.0
    band = _clamp((percentage / 100.0) * BAND_MAX, 0.0, BAND_MAX)
    return {
        "score": percentage,
        "band_score": band,
        "total_points": float(total),
        "earned_points": float(earned),
    }

def result_status(test_type: str) -> str:
    return "grading" if test_type in FREE_RESPONSE_TYPES else "completed"
