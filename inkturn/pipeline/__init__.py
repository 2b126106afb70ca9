"""Turn protocol engine.

Bridges three lifecycles for one process invocation:
  - GlkOte's generation/redraw protocol (gen numbers, window layout, input
    requests),
  - the story's continue/choose state machine,
  - a stateless process that must resume from a persisted context.

Entry point: process_turn(context, raw_event, engine) → (context, update).
"""

from .events import (  # noqa: F401
    HyperlinkEvent,
    MetricsEvent,
    UnrecognizedEvent,
    classify_event,
    hyperlink_token,
    parse_hyperlink_token,
)
from .turn import TurnDecision, decide_turn, process_turn  # noqa: F401
