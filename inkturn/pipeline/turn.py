"""Turn protocol engine: one input event in, one output update out.

Turn flow:
  1. Classify the input event.
  2. Decide whether the event completes the pending input request
     (new_input) and whether the story advances (new_turn):
       metrics unknown → the event must announce metrics, else ProtocolError.
                         Both flags are set and the story starts.
       metrics known   → only a hyperlink on the story window whose token
                         names the current turn and an existing choice
                         counts. The choice is applied to the engine.
                         Anything else is ignored.
  3. Bump the generation. Bump the turn if the story advances.
  4. Encode the update. Without a new turn it is a heartbeat (generation
     only). Otherwise: the echoed choice, the drained story text, then
     either the new choice links plus an input request, or exit.
  5. Return the updated context carrying the engine's exported state.

The function is pure apart from the engine it drives: nothing is read from
or written to disk here.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict

from inkturn.engine import StoryEngine
from inkturn.errors import ProtocolError
from inkturn.models import STORY_WINDOW_ID, Line, Metrics, OutputUpdate, SessionContext

from .events import (
    HyperlinkEvent,
    InputEvent,
    MetricsEvent,
    classify_event,
    parse_hyperlink_token,
)
from .render import (
    choice_lines,
    drain_story,
    echo_lines,
    hyperlink_input,
    window_content,
    window_layout,
)

logger = logging.getLogger(__name__)


class TurnDecision(BaseModel):
    model_config = ConfigDict(frozen=True)

    metrics: Metrics
    new_input: bool = False
    new_turn: bool = False
    choice_label: str | None = None


def decide_turn(
    context: SessionContext, event: InputEvent, engine: StoryEngine
) -> TurnDecision:
    """Apply the state-machine rules to one event. May select a story choice."""
    if context.display_metrics is None:
        if not isinstance(event, MetricsEvent):
            raise ProtocolError("missing metrics: the first input must announce display metrics")
        return TurnDecision(metrics=event.metrics, new_input=True, new_turn=True)

    ignored = TurnDecision(metrics=context.display_metrics)

    if not (isinstance(event, HyperlinkEvent) and event.window == STORY_WINDOW_ID):
        logger.debug("ignoring %s", type(event).__name__)
        return ignored

    token = parse_hyperlink_token(event.value)
    if token is None:
        logger.debug("ignoring malformed hyperlink token %r", event.value)
        return ignored

    turn, index = token
    choices = engine.current_choices()
    if turn != context.turn or not 0 <= index < len(choices):
        logger.debug(
            "ignoring hyperlink %r (turn %d, %d choices)", event.value, context.turn, len(choices)
        )
        return ignored

    label = choices[index].text
    engine.select(index)
    return TurnDecision(
        metrics=context.display_metrics, new_input=True, new_turn=True, choice_label=label
    )


def process_turn(
    context: SessionContext, raw_event: Any, engine: StoryEngine
) -> tuple[SessionContext, OutputUpdate]:
    """Run one turn. Returns the context to persist and the update to emit."""
    decision = decide_turn(context, classify_event(raw_event), engine)

    generation = context.generation + 1
    turn = context.turn + 1 if decision.new_turn else context.turn
    context = context.model_copy(
        update={
            "generation": generation,
            "turn": turn,
            "display_metrics": decision.metrics,
            "pending_choice_label": decision.choice_label,
        }
    )

    update = OutputUpdate(gen=generation)
    if generation <= 1:
        update.windows = window_layout(decision.metrics)

    if decision.new_turn:
        lines: list[Line] = []
        if context.pending_choice_label:
            lines.extend(echo_lines(context.pending_choice_label))
        lines.extend(drain_story(engine))

        choices = engine.current_choices()
        if choices:
            lines.extend(choice_lines(choices, turn))
            if decision.new_input:
                update.input = hyperlink_input()
        else:
            update.exit = True
        update.content = window_content(lines)
        logger.debug("turn %d: %d lines, %d choices", turn, len(lines), len(choices))
    else:
        logger.debug("generation %d: heartbeat", generation)

    context = context.model_copy(
        update={"pending_choice_label": None, "story_state": engine.export_state()}
    )
    return context, update
