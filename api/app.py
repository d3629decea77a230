from __future__ import annotations
from fastapi import FastAPI, HTTPException, Body, Query, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
import json, logging, os, uuid, typing as t

# ---- Engine imports ----
import sjt_core.question_bank as qb
from sjt_core.engine import PracticeSession
from sjt_core.types import RankEntry
from sjt_core.config import TEST_SIZE, DEBUG_TRACE, make_rng
from sjt_core.scoring import question_total, feedback_rows
from sjt_core.category_stats import performance_highlights, performance_level, study_recommendations
from sjt_core.history import HistoryTracker
from sjt_core.audit_export import to_json as history_to_json, to_csv as history_to_csv
from .storage import JsonHistoryStore, locked, utcnow_iso

log = logging.getLogger(__name__)
if DEBUG_TRACE:
    logging.getLogger("sjt_core").setLevel(logging.DEBUG)

SESS: dict[str, PracticeSession] = {}
SESSION_INFO: dict[str, dict[str, t.Any]] = {}

app = FastAPI(title="SJT Practice API")


@app.get("/")
def root():
    return {"status": "ok", "service": "sjt-practice-api"}


ALLOWED_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=False,
)

# ---- Schemas ----
class StartReq(BaseModel):
    count: int = Field(default=TEST_SIZE, ge=1)
    user_id: str | None = None
    mix_categories: bool = True
    seed: int | None = None

class RankReq(BaseModel):
    option_index: int
    rank: int

class AnswerReq(BaseModel):
    ranking: list[RankReq]

# ---- Helpers ----
def _to_basic(x: t.Any) -> t.Any:
    if x is None or isinstance(x, (bool, int, float, str)):
        return x
    if isinstance(x, dict):
        return {str(k): _to_basic(v) for k, v in x.items()}
    if isinstance(x, (list, tuple, set)):
        return [_to_basic(v) for v in x]
    if hasattr(x, "__dict__"):
        return _to_basic(vars(x))
    return str(x)


def _serialize_item(sess: PracticeSession) -> dict[str, t.Any] | None:
    d = sess.current()
    if d is None: return None
    # display order only; ideal ranks stay server-side until the answer is in
    return {
        "index": sess.index,
        "total": len(sess),
        "category": d.category,
        "scenario": d.scenario,
        "options": list(d.options),
    }


def _session(sid: str) -> PracticeSession:
    sess = SESS.get(sid)
    if not sess: raise HTTPException(404, "session not found")
    return sess


def _tracker(user_id: str) -> HistoryTracker:
    return HistoryTracker(JsonHistoryStore.for_user(user_id))

# ---- Health ----
@app.get("/health")
def health():
    return {"status": "ok", "scenarios": len(qb.load_bank()), "active_sessions": len(SESS)}

# ---- Session endpoints ----
@app.post("/session/start")
def start(req: StartReq):
    sid = str(uuid.uuid4())
    sess = PracticeSession(
        catalog=qb.load_bank(),
        count=req.count,
        rng=make_rng(req.seed),
        mix_categories=req.mix_categories,
    )
    SESS[sid] = sess
    SESSION_INFO[sid] = {"user_id": req.user_id, "started_at": utcnow_iso()}
    log.info("session %s started with %d scenarios", sid, len(sess))
    return {"session_id": sid, "total": len(sess), "item": _serialize_item(sess)}

@app.get("/session/{sid}/current")
def current(sid: str):
    sess = _session(sid)
    return {"item": _serialize_item(sess), "submitted": sess.submitted(), "done": sess.current() is None}

@app.post("/session/{sid}/answer")
def answer(sid: str, req: AnswerReq):
    sess = _session(sid)
    display = sess.current()
    if display is None: raise HTTPException(409, "no scenario left to answer")
    if sess.submitted(): raise HTTPException(409, "scenario already answered")
    ranking = [RankEntry(option_index=r.option_index, rank=r.rank) for r in req.ranking]
    try:
        scores = sess.submit(ranking)
    except ValueError as e:
        raise HTTPException(422, str(e))
    return {
        "index": sess.index,
        "scores": _to_basic(scores),
        "total": _to_basic(question_total(scores)),
        "feedback": feedback_rows(display, scores),
    }

@app.post("/session/{sid}/next")
def next_item(sid: str):
    sess = _session(sid)
    if sess.current() is not None and not sess.submitted():
        raise HTTPException(409, "answer the current scenario first")
    sess.advance()
    return {"done": sess.current() is None, "item": _serialize_item(sess)}

@app.post("/session/{sid}/retry")
def retry(sid: str):
    sess = _session(sid)
    sess.retry()
    return {"item": _serialize_item(sess)}

@app.post("/session/{sid}/finish")
def finish(sid: str):
    sess = _session(sid)
    info = SESSION_INFO.get(sid, {})
    result = sess.finalize()
    perf = result.performance
    total = result.summary.total

    saved, entry_id = False, None
    user_id = info.get("user_id")
    # only fully answered tests go into history
    if user_id and sess.is_complete:
        with locked():
            outcome = _tracker(user_id).record(result.summary, perf)
        saved, entry_id = outcome.saved, outcome.entry.id
    elif user_id:
        log.info("session %s finished with %d of %d answered; not recorded", sid, total.questions_count, len(sess))

    SESS.pop(sid, None)
    SESSION_INFO.pop(sid, None)
    return {
        "session_id": sid,
        "total": _to_basic(total),
        "level": _to_basic(performance_level(total.percentage)),
        "categories": _to_basic(perf.sorted_categories),
        "highlights": _to_basic(performance_highlights(perf.sorted_categories)),
        "recommendations": study_recommendations(perf.sorted_categories),
        "saved": saved,
        "history_id": entry_id,
    }

# ---- History ----
@app.get("/users/{user_id}/history")
def list_history(user_id: str):
    return {"history": [h.to_dict() for h in _tracker(user_id).history()]}

@app.get("/users/{user_id}/history/stats")
def history_stats(user_id: str):
    return _to_basic(_tracker(user_id).stats())

@app.get("/users/{user_id}/history/trend/{category}")
def history_trend(user_id: str, category: str, limit: int = Query(10, ge=1)):
    return _tracker(user_id).category_trend(category, limit)

@app.get("/users/{user_id}/history/export.json")
def export_history_json(user_id: str):
    return history_to_json(h.to_dict() for h in _tracker(user_id).history())

@app.get("/users/{user_id}/history/export.csv")
def export_history_csv(user_id: str):
    body = history_to_csv(h.to_dict() for h in _tracker(user_id).history())
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename=\"{user_id}_history.csv\""},
    )

@app.post("/users/{user_id}/history/import")
def import_history(user_id: str, payload: t.Any = Body(...)):
    with locked():
        ok = _tracker(user_id).import_json(json.dumps(payload))
    if not ok:
        raise HTTPException(400, "history import must be a JSON list of tests")
    return {"ok": True}

@app.delete("/users/{user_id}/history")
def clear_history(user_id: str):
    if not _tracker(user_id).clear():
        raise HTTPException(500, "could not clear history")
    return {"ok": True}
