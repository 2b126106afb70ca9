"""Tests for inkturn.driver: one invocation end-to-end, with real story files."""

import io
import json

import pytest

from inkturn.driver import restore_session, run_turn, write_update
from inkturn.engine import load_story
from inkturn.errors import FatalInputError, ProtocolError, SnapshotError
from inkturn.models import OutputUpdate
from inkturn.storage import SessionStore

INIT = {"type": "init", "gen": 0, "metrics": {"width": 800, "height": 480, "charwidth": 9}}


def stanza(event: dict) -> io.StringIO:
    return io.StringIO(json.dumps(event) + "\n")


def link(value: str) -> dict:
    return {"type": "hyperlink", "gen": 1, "window": 1, "value": value}


def texts(wire: dict) -> list[str]:
    return [line["content"][0]["text"] for line in wire["content"][0]["text"] if line]


@pytest.fixture
def store(tmp_path) -> SessionStore:
    return SessionStore(tmp_path)


def play(story, store, event, *, autorestore=True) -> dict:
    out = io.StringIO()
    run_turn(story_path=story, store=store, autorestore=autorestore,
             instream=stanza(event), outstream=out)
    text = out.getvalue()
    assert text.endswith("\n")
    assert text.count("\n") == 1
    return json.loads(text)


# ---------------------------------------------------------------------------
# Happy paths
# ---------------------------------------------------------------------------

class TestRunTurn:
    def test_first_turn(self, once_story, store) -> None:
        wire = play(once_story, store, INIT, autorestore=False)
        assert wire["gen"] == 1
        assert texts(wire) == [
            "Once upon a time...",
            "There were two choices.",
            "There were four lines of content.",
        ]
        assert wire["input"] == [{"id": 1, "gen": 0, "hyperlink": True}]

    def test_snapshot_written(self, once_story, store) -> None:
        play(once_story, store, INIT, autorestore=False)
        data = json.loads(store.path.read_text(encoding="utf-8"))
        assert data["turn"] == 1
        assert data["gen"] == 1
        assert data["metrics"] == {"width": 800, "height": 480}
        assert isinstance(data["ink"], str)

    def test_list_story(self, colours_story, store) -> None:
        wire = play(colours_story, store, INIT)
        assert texts(wire) == ["Colour: red"]
        assert wire["exit"] is True

    def test_resumes_with_autorestore(self, once_story, store) -> None:
        play(once_story, store, INIT)
        wire = play(once_story, store, link("1:1"))
        assert wire["gen"] == 2
        assert "windows" not in wire
        assert texts(wire) == [
            "There were four lines of content.",
            "There were four lines of content.",
            "They lived happily ever after.",
        ]
        assert wire["content"][0]["text"][0]["content"][0]["style"] == "input"
        assert wire["exit"] is True

    def test_full_playthrough(self, lighthouse_story, store) -> None:
        play(lighthouse_story, store, INIT)
        wire = play(lighthouse_story, store, link("1:1"))
        assert texts(wire)[-1] == "Climb"
        wire = play(lighthouse_story, store, link("2:0"))
        assert "The lamp shows you the way." in texts(wire)
        assert wire["exit"] is True
        assert json.loads(store.path.read_text(encoding="utf-8"))["turn"] == 3

    def test_stale_link_is_heartbeat(self, once_story, store) -> None:
        play(once_story, store, INIT)
        wire = play(once_story, store, link("0:0"))
        assert wire == {"type": "update", "gen": 2}
        wire = play(once_story, store, link("1:0"))
        assert wire["gen"] == 3
        assert wire["exit"] is True

    def test_no_turn_after_exit(self, once_story, store) -> None:
        play(once_story, store, INIT)
        assert play(once_story, store, link("1:0"))["exit"] is True
        finished = json.loads(store.path.read_text(encoding="utf-8"))

        wire = play(once_story, store, link("2:0"))
        assert wire == {"type": "update", "gen": 3}
        data = json.loads(store.path.read_text(encoding="utf-8"))
        assert data["turn"] == finished["turn"] == 2
        assert json.loads(data["ink"]) == json.loads(finished["ink"])

    def test_missing_snapshot_starts_fresh(self, once_story, store) -> None:
        wire = play(once_story, store, INIT, autorestore=True)
        assert wire["gen"] == 1


# ---------------------------------------------------------------------------
# Failures leave state untouched
# ---------------------------------------------------------------------------

class TestFailures:
    def test_no_autorestore_means_no_metrics(self, once_story, store) -> None:
        play(once_story, store, INIT)
        before = store.path.read_text(encoding="utf-8")
        out = io.StringIO()
        with pytest.raises(ProtocolError):
            run_turn(story_path=once_story, store=store, autorestore=False,
                     instream=stanza(link("1:0")), outstream=out)
        assert out.getvalue() == ""
        assert store.path.read_text(encoding="utf-8") == before

    def test_malformed_snapshot_before_input(self, once_story, store) -> None:
        store.path.write_text("{broken", encoding="utf-8")
        instream = stanza(INIT)
        with pytest.raises(SnapshotError):
            run_turn(story_path=once_story, store=store, autorestore=True,
                     instream=instream, outstream=io.StringIO())
        assert instream.read() == json.dumps(INIT) + "\n"
        assert store.path.read_text(encoding="utf-8") == "{broken"

    def test_snapshot_with_object_token(self, once_story, store) -> None:
        store.path.write_text(json.dumps({"ink": {"flows": {}}, "turn": 1, "gen": 1}), encoding="utf-8")
        with pytest.raises(SnapshotError, match="expected a JSON string"):
            play(once_story, store, link("1:0"))

    def test_snapshot_not_utf8(self, once_story, store) -> None:
        store.path.write_bytes(b'{"ink": "\xff\xfe", "turn": 1, "gen": 1}\n')
        out = io.StringIO()
        with pytest.raises(SnapshotError, match="cannot read snapshot"):
            run_turn(story_path=once_story, store=store, autorestore=True,
                     instream=stanza(link("1:0")), outstream=out)
        assert out.getvalue() == ""

    def test_old_story_format(self, legacy_story, store) -> None:
        with pytest.raises(FatalInputError, match="too old"):
            play(legacy_story, store, INIT)
        assert not store.exists()

    def test_bad_input_stanza(self, once_story, store) -> None:
        out = io.StringIO()
        with pytest.raises(FatalInputError):
            run_turn(story_path=once_story, store=store, autorestore=False,
                     instream=io.StringIO("not json\n"), outstream=out)
        assert out.getvalue() == ""
        assert not store.exists()

    def test_missing_story(self, tmp_path, store) -> None:
        with pytest.raises(FatalInputError):
            play(tmp_path / "missing.ink.json", store, INIT)
        assert not store.exists()


class TestHelpers:
    def test_restore_without_autorestore_ignores_snapshot(self, once_story, store) -> None:
        play(once_story, store, INIT)
        context = restore_session(load_story(once_story), store, autorestore=False)
        assert context.generation == 0
        assert context.display_metrics is None

    def test_restore_imports_story_state(self, once_story, store) -> None:
        play(once_story, store, INIT)
        engine = load_story(once_story)
        context = restore_session(engine, store, autorestore=True)
        assert context.turn == 1
        assert not engine.has_more()
        assert len(engine.current_choices()) == 2

    def test_write_update(self) -> None:
        out = io.StringIO()
        write_update(OutputUpdate(gen=4), out)
        assert out.getvalue() == '{"type": "update", "gen": 4}\n'
