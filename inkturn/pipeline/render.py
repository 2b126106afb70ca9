"""Output encoding: story text and choices → GlkOte buffer-window lines.

Each paragraph the story produces becomes one line. A chunk of story text
is split on its line breaks, so the trailing break of a paragraph yields an
empty string and therefore a blank spacer line after it:

    "It was dark.\\n"   →   [normal "It was dark."], {}

Choices are rendered as note-styled hyperlinks carrying a "turn:index" token.
"""

from __future__ import annotations

from inkturn.engine import StoryEngine
from inkturn.models import (
    STORY_WINDOW_ID,
    InputRequest,
    Line,
    Metrics,
    StoryChoice,
    TextRun,
    Window,
    WindowContent,
)

from .events import hyperlink_token


def blank_line() -> Line:
    return Line()


def text_line(text: str, style: str = "normal", hyperlink: str | None = None) -> Line:
    return Line(content=[TextRun(style=style, text=text, hyperlink=hyperlink)])


def echo_lines(label: str) -> list[Line]:
    """The selected choice, repeated above the text it leads to."""
    return [text_line(label, style="input"), blank_line()]


def story_lines(chunk: str) -> list[Line]:
    return [text_line(val) if val else blank_line() for val in chunk.split("\n")]


def drain_story(engine: StoryEngine) -> list[Line]:
    """Advance the engine until it blocks, rendering everything it produced."""
    lines: list[Line] = []
    while engine.has_more():
        lines.extend(story_lines(engine.advance()))
    return lines


def choice_lines(choices: list[StoryChoice], turn: int) -> list[Line]:
    return [
        text_line(choice.text, style="note", hyperlink=hyperlink_token(turn, ix))
        for ix, choice in enumerate(choices)
    ]


def window_layout(metrics: Metrics) -> list[Window]:
    return [Window(id=STORY_WINDOW_ID, width=metrics.width, height=metrics.height)]


def window_content(lines: list[Line]) -> list[WindowContent] | None:
    if not lines:
        return None
    return [WindowContent(id=STORY_WINDOW_ID, text=lines)]


def hyperlink_input() -> list[InputRequest]:
    return [InputRequest(id=STORY_WINDOW_ID)]
