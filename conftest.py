import os
from pathlib import Path

import pytest

from inkturn.models import StoryChoice

STORIES_DIR = Path(__file__).parent / "tests" / "stories"


class ScriptedEngine:
    """Story engine driven by a dict of scenes. No ink involved.

    scenes = {
        "start": (["It was dark.\\n"], [("Light a match", "lit"), ("Wait", "wait")]),
        "lit":   (["The match flares.\\n"], []),
        ...
    }

    Every call is recorded in .calls so tests can check ordering.
    """

    def __init__(self, scenes: dict, start: str = "start") -> None:
        self.scenes = scenes
        self.scene = start
        self.pending = list(scenes[start][0])
        self.calls: list = []

    def has_more(self) -> bool:
        return bool(self.pending)

    def advance(self) -> str:
        self.calls.append("advance")
        return self.pending.pop(0)

    def current_choices(self) -> list[StoryChoice]:
        if self.pending:
            return []
        return [StoryChoice(text=text) for text, _ in self.scenes[self.scene][1]]

    def select(self, index: int) -> None:
        self.calls.append(("select", index))
        _, target = self.scenes[self.scene][1][index]
        self.scene = target
        self.pending = list(self.scenes[target][0])

    def export_state(self) -> dict:
        return {"scene": self.scene, "pending": list(self.pending)}

    def import_state(self, token: dict) -> None:
        self.scene = token["scene"]
        self.pending = list(token["pending"])


CAVE_SCENES = {
    "start": (["It was dark.\n", "Water dripped somewhere.\n"], [("Light a match", "lit"), ("Wait", "wait")]),
    "lit": (["The match flares.\nShadows jump.\n"], [("Go deeper", "end")]),
    "wait": (["Nothing happens.\n"], [("Light a match", "lit")]),
    "end": (["You find the way out.\n"], []),
}


ENV_VARS = ("INKTURN_STORY", "INKTURN_AUTORESTORE", "INKTURN_AUTODIR",
            "INKTURN_LOG_LEVEL", "INKTURN_DATA_DIR")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep INKTURN_* settings from the developer's shell out of the tests.

    load_dotenv() writes straight into os.environ, so anything a test's .env
    file set is removed again afterwards.
    """
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield
    for name in ENV_VARS:
        os.environ.pop(name, None)

@pytest.fixture
def cave_engine() -> ScriptedEngine:
    return ScriptedEngine(CAVE_SCENES)


@pytest.fixture
def once_story() -> Path:
    return STORIES_DIR / "once.ink.json"


@pytest.fixture
def lighthouse_story() -> Path:
    return STORIES_DIR / "lighthouse.ink.json"


@pytest.fixture
def legacy_story() -> Path:
    return STORIES_DIR / "legacy.ink.json"


@pytest.fixture
def colours_story() -> Path:
    return STORIES_DIR / "colours.ink.json"
