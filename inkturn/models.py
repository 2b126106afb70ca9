"""Core domain models.

The turn engine, the session store and the output encoder all operate on
these types. Pydantic is used for validation and serialisation at every data
boundary: the GlkOte input event, the GlkOte output update and the autosave
snapshot on disk.
"""

from __future__ import annotations

import json
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

# The single buffer window every story is rendered into.
STORY_WINDOW_ID = 1


class Metrics(BaseModel):
    """Display size reported by the client. Other GlkOte metrics are dropped."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    width: int | float
    height: int | float


class SessionContext(BaseModel):
    """Everything one invocation needs to pick up where the previous one stopped.

    Values are immutable; the turn engine returns an updated copy rather than
    mutating the one it was given.
    """

    model_config = ConfigDict(frozen=True)

    generation: int = 0
    turn: int = 0
    display_metrics: Metrics | None = None
    pending_choice_label: str | None = None
    story_state: Any = None  # opaque, owned by the story engine

    def to_snapshot(self) -> Snapshot:
        return Snapshot(
            ink=self.story_state,
            turn=self.turn,
            gen=self.generation,
            metrics=self.display_metrics,
        )

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot) -> SessionContext:
        return cls(
            generation=snapshot.gen,
            turn=snapshot.turn,
            display_metrics=snapshot.metrics,
            story_state=snapshot.ink,
        )


class Snapshot(BaseModel):
    """The autosave file: {"ink": ..., "turn": n, "gen": n, "metrics"?: {...}}."""

    ink: Any
    turn: int
    gen: int
    metrics: Metrics | None = None

    def to_json(self) -> str:
        # exclude_none would also strip nulls inside the opaque ink token
        data = self.model_dump()
        if self.metrics is None:
            del data["metrics"]
        return json.dumps(data) + "\n"


class StoryChoice(BaseModel):
    """One entry of the engine's current choice list."""

    text: str


# ---------------------------------------------------------------------------
# GlkOte output update
# ---------------------------------------------------------------------------

TextStyle = Literal["normal", "input", "note"]


class TextRun(BaseModel):
    style: TextStyle
    text: str
    hyperlink: str | None = None


class Line(BaseModel):
    """One paragraph of buffer-window text. A line without runs is blank."""

    content: list[TextRun] | None = None


class WindowContent(BaseModel):
    id: int
    text: list[Line]


class Window(BaseModel):
    id: int
    type: Literal["buffer"] = "buffer"
    rock: int = 0
    left: int | float = 0
    top: int | float = 0
    width: int | float
    height: int | float


class InputRequest(BaseModel):
    id: int
    gen: int = 0
    hyperlink: bool = True


class OutputUpdate(BaseModel):
    """A GlkOte "update" object. Absent fields mean "unchanged"."""

    type: Literal["update"] = "update"
    gen: int
    windows: list[Window] | None = None
    content: list[WindowContent] | None = None
    input: list[InputRequest] | None = None
    exit: bool | None = None

    @property
    def is_heartbeat(self) -> bool:
        return self.content is None and self.input is None and self.exit is None

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)
