"""Story engine: the narrative collaborator of the turn engine.

The turn engine talks to the story through the StoryEngine protocol:

    has_more()            more text can be produced before the next choice
    advance()             produce the next chunk of text
    current_choices()     the choices offered once text runs out
    select(index)         take a choice (before advancing again)
    export_state()        opaque token describing the resumable state
    import_state(token)   restore a token produced by export_state()

Stories run on the Blade Ink runtime (bink). Compiled ink files carry an
"inkVersion" and the engine variant is chosen by version range when the
story is loaded:

    JsonStateEngine : inkVersion >= 18; state exported as JSON text.

Older formats saved their state as a raw JSON token and need a runtime
that bink does not provide; loading one fails with FatalInputError.
Tests use ScriptedEngine (defined in conftest.py) instead.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any, Protocol

from bink.story import Story

from inkturn.errors import FatalInputError, SnapshotError, StoryError
from inkturn.models import StoryChoice

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocol: every story engine must match this interface
# ---------------------------------------------------------------------------

class StoryEngine(Protocol):
    def has_more(self) -> bool: ...

    def advance(self) -> str: ...

    def current_choices(self) -> list[StoryChoice]: ...

    def select(self, index: int) -> None: ...

    def export_state(self) -> Any: ...

    def import_state(self, token: Any) -> None: ...


# ---------------------------------------------------------------------------
# JsonStateEngine: ink 18 and later
# ---------------------------------------------------------------------------

class JsonStateEngine:
    """Story engine whose state token is bink's saved-state JSON string."""

    def __init__(self, story: Story) -> None:
        self._story = story

    @classmethod
    def from_json(cls, text: str) -> JsonStateEngine:
        try:
            return cls(Story(text))
        except RuntimeError as e:
            raise FatalInputError(f"ink runtime rejected the story: {e}") from e

    def has_more(self) -> bool:
        return self._story.can_continue()

    def advance(self) -> str:
        try:
            return self._story.cont()
        except RuntimeError as e:
            raise StoryError(f"story could not continue: {e}") from e

    def current_choices(self) -> list[StoryChoice]:
        return [StoryChoice(text=text) for text in self._story.get_current_choices()]

    def select(self, index: int) -> None:
        try:
            self._story.choose_choice_index(index)
        except RuntimeError as e:
            raise StoryError(f"cannot select choice {index}: {e}") from e

    def export_state(self) -> str:
        return self._story.save_state()

    def import_state(self, token: Any) -> None:
        if not isinstance(token, str):
            raise SnapshotError(
                f"expected a JSON string state, got {type(token).__name__}"
            )
        try:
            self._story.load_state(token)
        except RuntimeError as e:
            raise SnapshotError(f"saved story state does not fit this story: {e}") from e


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

# (minimum inkVersion, factory from the story's JSON text), highest first.
ENGINE_VARIANTS: list[tuple[int, Callable[[str], StoryEngine]]] = [
    (18, JsonStateEngine.from_json),
]


def engine_for_version(version: int) -> Callable[[str], StoryEngine]:
    for minimum, factory in ENGINE_VARIANTS:
        if version >= minimum:
            return factory
    oldest = ENGINE_VARIANTS[-1][0]
    raise FatalInputError(
        f"ink.json version {version} is too old (need {oldest} or later); "
        "recompile the story with a current inklecate"
    )


def parse_ink_version(data: dict[str, Any]) -> int:
    raw = data.get("inkVersion")
    if not raw:
        raise FatalInputError("does not appear to be an ink.json file")
    if isinstance(raw, bool):
        raise FatalInputError("ink.json version is not a number")
    try:
        return int(str(raw).strip())
    except ValueError as e:
        raise FatalInputError("ink.json version is not a number") from e


def load_story(path: Path) -> StoryEngine:
    """Read a compiled .ink.json file and return the matching engine variant."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FatalInputError(f"cannot read story file {path}: {e}") from e

    text = text.removeprefix("\ufeff")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise FatalInputError(f"story file {path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise FatalInputError("does not appear to be an ink.json file")

    version = parse_ink_version(data)
    factory = engine_for_version(version)
    logger.debug("loading %s: inkVersion=%d", path, version)
    return factory(text)
