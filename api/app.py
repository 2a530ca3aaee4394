from __future__ import annotations
from fastapi import FastAPI, HTTPException, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
import uuid, os, threading, typing as t

# ---- Engine imports ----
from placement_core.engine import PlacementExam
from placement_core.question_bank import load_bank
from placement_core.resolver import score_answers
from placement_core.config import load_config, AUDIT_EXPORT_ENABLED
from placement_core.audit_export import to_json as audit_to_json, to_csv as audit_to_csv

# in-memory only; a restart drops every open session
SESS: dict[str, PlacementExam] = {}
LOCKS: dict[str, threading.Lock] = {}
SESSION_INFO: dict[str, dict[str, t.Any]] = {}
_REGISTRY_LOCK = threading.Lock()

app = FastAPI(title="Placement Engine API")


@app.get("/")
def root():
    return {"status": "ok", "service": "placement-engine-api"}


ALLOWED_ORIGINS = [
    o.strip()
    for o in os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",")
    if o.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=False,
)

# ---- Schemas ----
class StartReq(BaseModel):
    user_id: str | None = None

class AnswerReq(BaseModel):
    item_id: str
    answer: str

class ScoreReq(BaseModel):
    answers: dict[str, str]

# ---- Helpers ----
def _bank():
    cfg = load_config()
    return load_bank(cfg.get("PLACEMENT_BANK_PATH"))


def _serialize_item(it):
    if it is None: return None
    return {
        "id": it.id,
        "kind": it.kind,   # "multiple-choice"|"fill-blank"|"reading-comprehension"
        "level": it.level,
        "skill": it.skill,
        "points": it.points,
        "prompt": it.prompt,
        "options": list(getattr(it, "options", None) or []) or None,
        "topics": list(it.topics),
    }


def _session(sid: str) -> tuple[PlacementExam, threading.Lock]:
    with _REGISTRY_LOCK:
        sess = SESS.get(sid)
        lock = LOCKS.get(sid)
    if sess is None or lock is None:
        raise HTTPException(404, "session not found")
    return sess, lock


def _state_view(sess: PlacementExam) -> dict[str, t.Any]:
    st = sess.state
    return {
        "status": st.status,
        "current_level": st.current_level,
        "asked": len(st.asked),
        "progress": round(sess.progress(), 1),
    }

# ---- Health ----
@app.get("/health")
def health():
    return {
        "bank_path": load_config().get("PLACEMENT_BANK_PATH") or "packaged",
        "active_sessions": len(SESS),
        "audit_export_enabled": AUDIT_EXPORT_ENABLED,
    }

# ---- Session endpoints ----
@app.post("/session/start")
def start(req: StartReq | None = None):
    sid = str(uuid.uuid4())
    sess = PlacementExam(_bank())
    item = sess.get_next_question()
    with _REGISTRY_LOCK:
        SESS[sid] = sess
        LOCKS[sid] = threading.Lock()
        SESSION_INFO[sid] = {"user_id": req.user_id if req else None}
    return {"session_id": sid, "item": _serialize_item(item), **_state_view(sess)}


@app.get("/session/{sid}/next")
def next_item(sid: str):
    sess, lock = _session(sid)
    with lock:
        cur = sess.state.current
        if cur is not None and cur not in sess.state.answers:
            # the drawn item is still awaiting its answer; serve it again
            item = sess.policy.item(cur)
        else:
            item = sess.get_next_question()
        return {"item": _serialize_item(item), "done": item is None, **_state_view(sess)}


@app.post("/session/{sid}/answer")
def answer(sid: str, req: AnswerReq):
    sess, lock = _session(sid)
    with lock:
        sess.submit_answer(req.item_id, req.answer)
        nxt = sess.get_next_question()
        return {"done": nxt is None, "item": _serialize_item(nxt), **_state_view(sess)}


@app.get("/session/{sid}/result")
def result(sid: str):
    sess, lock = _session(sid)
    with lock:
        res = sess.calculate_final_result().to_dict()
        res["status"] = sess.state.status
        res["user_id"] = SESSION_INFO.get(sid, {}).get("user_id")
        return res


@app.post("/session/{sid}/reset")
def reset(sid: str):
    sess, lock = _session(sid)
    with lock:
        sess.reset()
        item = sess.get_next_question()
        return {"session_id": sid, "item": _serialize_item(item), **_state_view(sess)}


@app.delete("/session/{sid}")
def delete_session(sid: str):
    with _REGISTRY_LOCK:
        sess = SESS.pop(sid, None)
        LOCKS.pop(sid, None)
        SESSION_INFO.pop(sid, None)
    if sess is None:
        raise HTTPException(404, "session not found")
    return {"ok": True}


@app.get("/session/{sid}/audit.json")
def get_audit_json(sid: str):
    if not AUDIT_EXPORT_ENABLED:
        raise HTTPException(404, "audit export disabled")
    sess, lock = _session(sid)
    with lock:
        events = list(sess.audit_events)
    return {"session_id": sid, **audit_to_json(events)}


@app.get("/session/{sid}/audit.csv")
def get_audit_csv(sid: str):
    if not AUDIT_EXPORT_ENABLED:
        raise HTTPException(404, "audit export disabled")
    sess, lock = _session(sid)
    with lock:
        events = list(sess.audit_events)
    body = audit_to_csv(events)
    filename = f"{sid}_audit.csv"
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename=\"{filename}\""},
    )


@app.post("/score")
def score(req: ScoreReq):
    return score_answers(req.answers, _bank()).to_dict()
