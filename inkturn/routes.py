"""Session endpoints under /api.

Each request is one invocation against a named session, with auto-restore
always on. Session names are reduced to a slug before they touch the filesystem.

    POST   /api/sessions/{session}/turn    body: one GlkOte event → update
    GET    /api/sessions/{session}         persisted turn, gen and metrics
    DELETE /api/sessions/{session}         forget the session
"""

import re
import unicodedata
from pathlib import Path
from typing import Any

from fastapi import APIRouter, Body, HTTPException, Request

from inkturn.driver import commit_turn, restore_session
from inkturn.engine import load_story
from inkturn.errors import InkTurnError, ProtocolError
from inkturn.storage import SessionStore

router = APIRouter()

SLUG_MAX_LENGTH = 64


def session_slug(name: str) -> str:
    """Map a session name onto its snapshot file stem.

    "Harbour Night" → "harbour-night". A name with nothing usable left
    maps to "session".
    """
    ascii_name = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii")
    words = re.findall(r"[a-z0-9]+", re.sub(r"['\"]", "", ascii_name.lower()))
    return "-".join(words)[:SLUG_MAX_LENGTH].rstrip("-") or "session"


def _session_store(request: Request, session: str) -> SessionStore:
    sessions_dir: Path = request.app.state.data_dir / "sessions"
    return SessionStore(sessions_dir, f"{session_slug(session)}.json")


@router.post("/sessions/{session}/turn")
async def session_turn(session: str, request: Request, event: Any = Body(...)):
    """Run one turn of a session and return the GlkOte update."""
    story_path: Path | None = request.app.state.story_path
    if story_path is None:
        raise HTTPException(500, "No story configured (set INKTURN_STORY)")

    store = _session_store(request, session)
    try:
        engine = load_story(story_path)
        context = restore_session(engine, store, autorestore=True)
        update = commit_turn(context, event, engine, store)
    except ProtocolError as e:
        raise HTTPException(400, str(e))
    except InkTurnError as e:
        raise HTTPException(500, str(e))

    return update.to_wire()


@router.get("/sessions/{session}")
async def get_session(session: str, request: Request):
    """Get the persisted counters of a session."""
    store = _session_store(request, session)
    try:
        snapshot = store.load_snapshot()
    except InkTurnError as e:
        raise HTTPException(500, str(e))
    if snapshot is None:
        raise HTTPException(404, "Session not found")
    summary: dict[str, Any] = {"turn": snapshot.turn, "gen": snapshot.gen}
    if snapshot.metrics is not None:
        summary["metrics"] = snapshot.metrics.model_dump()
    return summary


@router.delete("/sessions/{session}")
async def delete_session(session: str, request: Request):
    """Delete a session's snapshot."""
    if not _session_store(request, session).delete():
        raise HTTPException(404, "Session not found")
    return {"ok": True}
