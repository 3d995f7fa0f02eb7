
from __future__ import annotations
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Literal, Optional
from .config import TRUE_FALSE_CHOICES
TestType = Literal["reading","writing","listening","speaking"]
Difficulty = Literal["beginner","intermediate","advanced"]
QuestionType = Literal["multiple_choice","true_false","fill_blank","essay","speaking"]
ResultStatus = Literal["completed","grading","graded"]


def _known(cls, row: Dict[str, Any]) -> Dict[str, Any]:
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in row.items() if k in names}


@dataclass(frozen=True)
class Test:
    __test__ = False
    id: str; test_type: TestType; duration_minutes: int
    title_en: str = ""; title_ru: str = ""; title_uz: str = ""
    description_en: str = ""; description_ru: str = ""; description_uz: str = ""
    difficulty: Difficulty = "beginner"
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Test":
        return cls(**_known(cls, row))


@dataclass(frozen=True)
class Question:
    id: str; test_id: str; question_type: QuestionType
    question_en: str = ""; question_ru: str = ""; question_uz: str = ""
    options: Any = None
    correct_answer: Optional[str] = None
    points: int = 1
    order_index: int = 0

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Question":
        return cls(**_known(cls, row))

    @property
    def choices(self) -> List[str]:
        """Choice strings for the question, empty for free-text types."""
        if self.question_type == "true_false":
            return list(TRUE_FALSE_CHOICES)
        if self.question_type != "multiple_choice":
            return []
        opts = self.options
        if isinstance(opts, dict):
            opts = opts.get("options")
        return [str(o) for o in opts] if isinstance(opts, list) else []


@dataclass(frozen=True)
class Result:
    user_id: str
    test_id: str
    score: float
    band_score: float
    status: ResultStatus
    answers: Dict[str, str] = field(default_factory=dict)
    id: Optional[str] = None
    admin_feedback: Optional[str] = None
    completed_at: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Result":
        return cls(**_known(cls, row))

    def to_row(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "test_id": self.test_id,
            "answers": dict(self.answers),
            "score": self.score,
            "band_score": self.band_score,
            "status": self.status,
            "admin_feedback": self.admin_feedback,
            "completed_at": self.completed_at,
            "created_at": self.created_at,
        }
