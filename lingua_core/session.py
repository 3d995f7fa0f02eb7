# lingua_core/session.py
from __future__ import annotations
from typing import Callable, Dict, List, Optional
import logging, threading

from .types import Test, Question, Result
from .errors import LinguaError, StoreError, NotFoundError, TransientLoadError, SubmissionError
from .scoring import score_answers, result_status
from .i18n import localized, format_clock
from .config import DEFAULT_LANG, TICK_SECONDS, DASHBOARD_ROUTE, AUTH_ROUTE


log = logging.getLogger(__name__)

LOADING = "loading"
EMPTY = "empty"
IN_PROGRESS = "in_progress"
SUBMITTED = "submitted"


def _no_navigation(target: str) -> None:
    log.debug("navigation to %s ignored", target)


class Countdown:
    """Background ticker; stops when ``on_tick`` returns False or on cancel()."""

    def __init__(self, on_tick: Callable[[], bool], interval: float = TICK_SECONDS):
        self.interval = float(interval)
        self._on_tick = on_tick
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, name="countdown", daemon=True)
        self._thread.start()

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            if not self._on_tick():
                break

    def cancel(self) -> None:
        self._stop.set()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._stop.is_set()


class TestSession:
    """One learner's attempt at one test: load, answer, count down, submit.

    ``current_user`` returns the signed-in user id or None; ``navigate`` is
    told where to go after a submission (dashboard or login). The answer map
    survives a failed submission so the learner can retry.
    """

    __test__ = False

    def __init__(
        self,
        store,
        current_user: Callable[[], Optional[str]],
        navigate: Optional[Callable[[str], None]] = None,
        lang: str = DEFAULT_LANG,
    ):
        self.store = store
        self.lang = lang
        self._current_user = current_user
        self._navigate = navigate or _no_navigation
        self._lock = threading.RLock()

        self.phase = LOADING
        self.test: Optional[Test] = None
        self.questions: List[Question] = []
        self._question_ids: set[str] = set()
        self.answers: Dict[str, str] = {}
        self.index = 0
        self.remaining = 0
        self.result: Optional[Result] = None
        self.last_error: Optional[LinguaError] = None
        self._in_flight = False
        self._auto_submitted = False
        self._countdown: Optional[Countdown] = None

    # ---- load ----
    def _fetch(self, test_id: str) -> tuple[Test, List[Question], int]:
        try:
            row = self.store.get_test(test_id)
            if row is None:
                raise NotFoundError(f"test {test_id} not found")
            q_rows = self.store.questions_for_test(test_id)
        except StoreError as e:
            raise TransientLoadError(str(e)) from e
        except (TypeError, ValueError) as e:
            raise TransientLoadError(f"malformed question rows for test {test_id}: {e}") from e
        if not q_rows:
            raise NotFoundError(f"test {test_id} has no questions")
        try:
            test = Test.from_row(row)
            questions = [Question.from_row(r) for r in q_rows]
            remaining = max(0, int(test.duration_minutes) * 60)
        except (TypeError, ValueError) as e:
            raise TransientLoadError(f"malformed rows for test {test_id}: {e}") from e
        return test, questions, remaining

    def load(self, test_id: str) -> bool:
        try:
            test, questions, remaining = self._fetch(test_id)
        except LinguaError as e:
            log.warning("load failed for test %s: %s", test_id, e)
            with self._lock:
                self.phase = EMPTY
                self.last_error = e
            return False
        with self._lock:
            self.test = test
            self.questions = questions
            self._question_ids = {q.id for q in questions}
            self.answers = {}
            self.index = 0
            self.remaining = remaining
            self.phase = IN_PROGRESS
            self.last_error = None
        log.info("loaded test %s (%d questions, %ds)", test.id, len(questions), self.remaining)
        return True

    # ---- in-progress transitions ----
    def _accepting(self) -> bool:
        return self.phase == IN_PROGRESS and not self._in_flight

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def select_answer(self, question_id: str, value: str) -> bool:
        with self._lock:
            if not self._accepting() or question_id not in self._question_ids:
                return False
            self.answers[question_id] = value
            return True

    def advance(self, delta: int) -> int:
        with self._lock:
            if self._accepting() and self.questions:
                last = len(self.questions) - 1
                self.index = max(0, min(last, self.index + int(delta)))
            return self.index

    def answered(self) -> List[bool]:
        return [bool(self.answers.get(q.id)) for q in self.questions]

    # ---- countdown ----
    def tick(self) -> bool:
        """Count one second down; returns True while the countdown should keep running."""

        fire = False
        with self._lock:
            if not self._accepting() or self.remaining <= 0:
                return self.phase == IN_PROGRESS and self.remaining > 0
            self.remaining -= 1
            if self.remaining == 0 and not self._auto_submitted:
                self._auto_submitted = True
                fire = True
        if fire:
            log.info("time is up for test %s, submitting", self.test.id if self.test else "?")
            self.submit()
            return False
        return True

    def start_timer(self, interval: float = TICK_SECONDS) -> Optional[Countdown]:
        with self._lock:
            if self.phase != IN_PROGRESS or self.remaining <= 0:
                return None
            if self._countdown is None:
                self._countdown = Countdown(self.tick, interval)
                self._countdown.start()
            return self._countdown

    def close(self) -> None:
        with self._lock:
            cd, self._countdown = self._countdown, None
        if cd is not None:
            cd.cancel()

    # ---- scoring / submission ----
    def score(self) -> Dict[str, float]:
        with self._lock:
            return score_answers(self.questions, dict(self.answers))

    def _write_result(self, answers: Dict[str, str]) -> Result:
        user_id = self._current_user()
        if not user_id:
            raise SubmissionError("sign in to submit your test", redirect=AUTH_ROUTE)
        scored = score_answers(self.questions, answers)
        row = {
            "user_id": user_id,
            "test_id": self.test.id,
            "answers": answers,
            "score": scored["score"],
            "band_score": scored["band_score"],
            "status": result_status(self.test.test_type),
        }
        try:
            stored = self.store.insert_result(row)
        except StoreError as e:
            raise SubmissionError(f"could not save your answers: {e}") from e
        return Result.from_row(stored)

    def submit(self) -> bool:
        with self._lock:
            if self.phase != IN_PROGRESS or self._in_flight:
                return False
            self._in_flight = True
            answers = dict(self.answers)
        try:
            result = self._write_result(answers)
        except SubmissionError as e:
            log.warning("submission failed for test %s: %s", self.test.id, e)
            with self._lock:
                self._in_flight = False
                self.last_error = e
            if e.redirect:
                self._navigate(e.redirect)
            return False
        with self._lock:
            self.result = result
            self.phase = SUBMITTED
            self.last_error = None
        self.close()
        log.info("submitted test %s: score=%.1f band=%.2f status=%s",
                 result.test_id, result.score, result.band_score, result.status)
        self._navigate(DASHBOARD_ROUTE)
        return True

    # ---- display ----
    def view(self) -> Dict[str, object]:
        with self._lock:
            out: Dict[str, object] = {
                "phase": self.phase,
                "in_flight": self._in_flight,
                "message": str(self.last_error) if self.last_error else None,
            }
            if self.test is None:
                return out
            current = self.questions[self.index] if self.questions else None
            out.update({
                "test_id": self.test.id,
                "title": localized(self.test, "title", self.lang),
                "test_type": self.test.test_type,
                "position": self.index,
                "question_count": len(self.questions),
                "answered": self.answered(),
                "remaining": self.remaining,
                "clock": format_clock(self.remaining),
                "question": None if current is None else {
                    "id": current.id,
                    "type": current.question_type,
                    "prompt": localized(current, "question", self.lang),
                    "choices": current.choices,
                    "answer": self.answers.get(current.id),
                },
                "result": self.result.to_row() if self.result else None,
            })
            return out
