"""Input event classification.

GlkOte sends one event object per turn. Two shapes matter here:

    {"metrics": {"width": w, "height": h, ...}, ...}       capability announcement
    {"type": "hyperlink", "window": 1, "value": "3:0"}     choice selection

Anything else (including malformed versions of the two above) classifies as
UnrecognizedEvent. Whether an event is acceptable in the current state is the
turn engine's call, not this module's.
"""

from __future__ import annotations

import re
from typing import Any, Literal

from pydantic import BaseModel, ValidationError

from inkturn.models import Metrics


class MetricsEvent(BaseModel):
    metrics: Metrics


class HyperlinkEvent(BaseModel):
    type: Literal["hyperlink"]
    window: int
    value: str


class UnrecognizedEvent(BaseModel):
    raw: Any = None


InputEvent = MetricsEvent | HyperlinkEvent | UnrecognizedEvent


def classify_event(raw: Any) -> InputEvent:
    if not isinstance(raw, dict):
        return UnrecognizedEvent(raw=raw)
    if raw.get("type") == "hyperlink":
        try:
            return HyperlinkEvent.model_validate(raw)
        except ValidationError:
            return UnrecognizedEvent(raw=raw)
    if "metrics" in raw:
        try:
            return MetricsEvent.model_validate(raw)
        except ValidationError:
            return UnrecognizedEvent(raw=raw)
    return UnrecognizedEvent(raw=raw)


_TOKEN_PART = re.compile(r"-?[0-9]+")


def parse_hyperlink_token(value: str) -> tuple[int, int] | None:
    """Split a "turn:index" token. Returns None for anything malformed."""
    parts = value.split(":")
    if len(parts) != 2 or not all(_TOKEN_PART.fullmatch(part) for part in parts):
        return None
    return int(parts[0]), int(parts[1])


def hyperlink_token(turn: int, index: int) -> str:
    return f"{turn}:{index}"
