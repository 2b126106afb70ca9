"""Session driver: runs one invocation end-to-end.

Invocation flow:
  1. Load the story file and pick its engine variant.
  2. Restore the persisted context (auto-restore only); a missing snapshot
     means a fresh session.
  3. Read exactly one input event.
  4. Run the turn engine.
  5. Persist the new context.
  6. Emit the output update.

Each step starts only after the previous one finished. Any InkTurnError
raised in steps 1-4 propagates before anything is saved or written, so a
failed invocation leaves the previous snapshot untouched.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any, TextIO

from inkturn.engine import StoryEngine, load_story
from inkturn.models import OutputUpdate, SessionContext
from inkturn.pipeline import process_turn
from inkturn.stanza import read_stanza
from inkturn.storage import SessionStore

logger = logging.getLogger(__name__)


def restore_session(engine: StoryEngine, store: SessionStore, *, autorestore: bool) -> SessionContext:
    """Return the context to resume from, importing its story state into the engine."""
    if not autorestore:
        return SessionContext()
    context = store.load()
    if context is None:
        logger.debug("no snapshot at %s; starting a new session", store.path)
        return SessionContext()
    engine.import_state(context.story_state)
    return context


def commit_turn(
    context: SessionContext, event: Any, engine: StoryEngine, store: SessionStore
) -> OutputUpdate:
    """Process one event and persist the result. Returns the update to emit."""
    new_context, update = process_turn(context, event, engine)
    store.save(new_context)
    return update


def write_update(update: OutputUpdate, stream: TextIO) -> None:
    stream.write(json.dumps(update.to_wire()) + "\n")
    stream.flush()


def run_turn(
    *,
    story_path: Path,
    store: SessionStore,
    autorestore: bool,
    instream: Iterable[str],
    outstream: TextIO,
) -> OutputUpdate:
    """Execute one invocation and return the update that was written."""
    engine = load_story(story_path)
    context = restore_session(engine, store, autorestore=autorestore)
    event = read_stanza(instream)
    update = commit_turn(context, event, engine, store)
    write_update(update, outstream)
    return update
