from __future__ import annotations
from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
import logging, threading, uuid, typing as t

# ---- Core imports ----
from lingua_core.session import SUBMITTED, TestSession
from lingua_core.store import JsonStore
from lingua_core.catalog import (
    course_detail,
    dashboard_summary,
    lesson_detail,
    list_courses,
    list_tests,
    mark_lesson_complete,
)
from lingua_core.support import submit_support_message
from lingua_core.seed import load_seed
from lingua_core.errors import NotFoundError, StoreError, SubmissionError
from lingua_core.config import (
    ALLOWED_ORIGINS,
    AUTH_ROUTE,
    COUNTDOWN_ENABLED,
    DASHBOARD_ROUTE,
    DATA_DIR,
    DEFAULT_LANG,
    LOG_LEVEL,
    RECENT_RESULTS,
    SEED_ON_START,
    TICK_SECONDS,
)

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
log = logging.getLogger(__name__)

STORE = JsonStore(DATA_DIR)
if SEED_ON_START and STORE.is_empty():
    STORE.seed(**load_seed())
    log.info("seeded sample catalog into %s", STORE.root)

SESS: dict[str, TestSession] = {}
SESSION_INFO: dict[str, dict[str, t.Any]] = {}  # sid -> user_id, redirect
_SESS_LOCK = threading.Lock()

app = FastAPI(title="Lingua Test API")

@app.get("/")
def root():
    return {"status": "ok", "service": "lingua-test-api"}

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(ALLOWED_ORIGINS),
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=False,
)

# ---- Schemas ----
class StartReq(BaseModel):
    test_id: str
    user_id: str | None = None
    lang: str = DEFAULT_LANG

class AnswerReq(BaseModel):
    question_id: str
    value: str

class AdvanceReq(BaseModel):
    delta: int = 1

class SubmitReq(BaseModel):
    user_id: str | None = None

class ProgressReq(BaseModel):
    user_id: str | None = None

class SupportReq(BaseModel):
    name: str
    email: str
    subject: str
    message: str
    user_id: str | None = None

# ---- Helpers ----
def _get(sid: str) -> TestSession:
    sess = SESS.get(sid)
    if not sess:
        raise HTTPException(404, "session not found")
    return sess


def _user_lookup(sid: str) -> t.Callable[[], t.Optional[str]]:
    return lambda: SESSION_INFO.get(sid, {}).get("user_id")


def _navigator(sid: str) -> t.Callable[[str], None]:
    def go(target: str) -> None:
        info = SESSION_INFO.get(sid)
        if info is not None:
            info["redirect"] = target
    return go


def _evict(sid: str) -> bool:
    with _SESS_LOCK:
        sess = SESS.pop(sid, None)
        SESSION_INFO.pop(sid, None)
    if sess is None:
        return False
    sess.close()
    return True

# ---- Health ----
@app.get("/health")
def health():
    return {
        "data_dir": str(STORE.root),
        "countdown_enabled": COUNTDOWN_ENABLED,
        "active_sessions": len(SESS),
    }

# ---- Catalog ----
@app.get("/tests")
def tests(
    test_type: str = Query("all", description="reading|writing|listening|speaking|all"),
    difficulty: str = Query("all"),
    lang: str = Query(DEFAULT_LANG),
):
    try:
        return {"tests": list_tests(STORE, test_type=test_type, difficulty=difficulty, lang=lang)}
    except StoreError as e:
        log.warning("catalog unavailable: %s", e)
        return {"tests": [], "message": str(e)}

# ---- Session endpoints ----
@app.post("/session/start")
def start(req: StartReq):
    sid = str(uuid.uuid4())
    SESSION_INFO[sid] = {"user_id": req.user_id, "redirect": None}
    sess = TestSession(STORE, _user_lookup(sid), navigate=_navigator(sid), lang=req.lang)
    if not sess.load(req.test_id):
        SESSION_INFO.pop(sid, None)
        # not fatal: the client renders its empty state
        return {"session_id": None, "state": "empty", "message": sess.view()["message"]}
    with _SESS_LOCK:
        SESS[sid] = sess
    if COUNTDOWN_ENABLED:
        sess.start_timer(TICK_SECONDS)
    return {"session_id": sid, "view": sess.view()}

@app.get("/session/{sid}")
def session_view(sid: str):
    sess = _get(sid)
    view = sess.view()
    if sess.phase == SUBMITTED:
        # the timer may have submitted it; the client is done with it now
        _evict(sid)
    return view

@app.post("/session/{sid}/answer")
def answer(sid: str, req: AnswerReq):
    sess = _get(sid)
    ok = sess.select_answer(req.question_id, req.value)
    return {"ok": ok, "view": sess.view()}

@app.post("/session/{sid}/advance")
def advance(sid: str, req: AdvanceReq):
    sess = _get(sid)
    delta = 1 if req.delta > 0 else -1 if req.delta < 0 else 0
    sess.advance(delta)
    return sess.view()

@app.post("/session/{sid}/submit")
def submit(sid: str, req: SubmitReq | None = None):
    sess = _get(sid)
    info = SESSION_INFO.setdefault(sid, {})
    if req is not None and req.user_id:
        info["user_id"] = req.user_id
    ok = sess.submit()
    view = sess.view()
    if sess.phase == SUBMITTED:
        redirect = DASHBOARD_ROUTE
        _evict(sid)
    elif isinstance(sess.last_error, SubmissionError):
        redirect = sess.last_error.redirect
    else:
        redirect = None
    return {
        "ok": ok,
        "redirect": redirect,
        "message": view.get("message"),
        "view": view,
    }

@app.delete("/session/{sid}")
def close_session(sid: str):
    if not _evict(sid):
        raise HTTPException(404, "session not found")
    return {"ok": True}

# ---- Courses ----
@app.get("/courses")
def courses(
    module_type: str = Query("all", description="reading|writing|listening|speaking|all"),
    difficulty: str = Query("all"),
    lang: str = Query(DEFAULT_LANG),
):
    try:
        return {"courses": list_courses(STORE, module_type=module_type, difficulty=difficulty, lang=lang)}
    except StoreError as e:
        log.warning("courses unavailable: %s", e)
        return {"courses": [], "message": str(e)}

@app.get("/courses/{course_id}")
def course(course_id: str, user_id: str | None = None, lang: str = Query(DEFAULT_LANG)):
    try:
        detail = course_detail(STORE, course_id, user_id=user_id, lang=lang)
    except StoreError as e:
        log.warning("course %s unavailable: %s", course_id, e)
        return {"course": None, "state": "empty", "message": str(e)}
    if detail is None:
        return {"course": None, "state": "empty", "message": f"course {course_id} not found"}
    return {"course": detail}

@app.get("/lessons/{lesson_id}")
def lesson(lesson_id: str, user_id: str | None = None, lang: str = Query(DEFAULT_LANG)):
    try:
        detail = lesson_detail(STORE, lesson_id, user_id=user_id, lang=lang)
    except StoreError as e:
        log.warning("lesson %s unavailable: %s", lesson_id, e)
        return {"lesson": None, "state": "empty", "message": str(e)}
    if detail is None:
        return {"lesson": None, "state": "empty", "message": f"lesson {lesson_id} not found"}
    return {"lesson": detail}

@app.post("/lessons/{lesson_id}/complete")
def complete_lesson(lesson_id: str, req: ProgressReq):
    if not req.user_id:
        return {"ok": False, "redirect": AUTH_ROUTE, "message": "sign in to track your progress"}
    try:
        row = mark_lesson_complete(STORE, req.user_id, lesson_id)
    except (NotFoundError, StoreError) as e:
        log.warning("could not mark lesson %s for %s: %s", lesson_id, req.user_id, e)
        return {"ok": False, "redirect": None, "message": str(e)}
    return {"ok": True, "redirect": None, "progress": row}

# ---- Support ----
@app.post("/support")
def support(req: SupportReq):
    try:
        row = submit_support_message(
            STORE, req.name, req.email, req.subject, req.message, user_id=req.user_id
        )
    except (ValueError, StoreError) as e:
        return {"ok": False, "message": str(e)}
    return {"ok": True, "id": row["id"]}

# ---- Dashboard ----
@app.get("/users/{user_id}/dashboard")
def dashboard(user_id: str, lang: str = Query(DEFAULT_LANG)):
    try:
        return dashboard_summary(STORE, user_id, lang=lang, recent=RECENT_RESULTS)
    except StoreError as e:
        log.warning("dashboard unavailable for %s: %s", user_id, e)
        return {
            "user_id": user_id,
            "name": None,
            "current_level": "beginner",
            "completed_lessons": 0,
            "tests_taken": 0,
            "average_band": 0.0,
            "recent": [],
            "message": str(e),
        }

@app.get("/users/{user_id}/results")
def results(user_id: str):
    try:
        return {"results": STORE.results_for_user(user_id)}
    except StoreError as e:
        log.warning("results unavailable for %s: %s", user_id, e)
        return {"results": [], "message": str(e)}
