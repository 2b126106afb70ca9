"""Error taxonomy.

Every failure the turn runner knows how to report derives from InkTurnError.
Events that merely fail validation (stale hyperlink, bad token, unknown
shape) are not errors: the turn engine drops them and emits a heartbeat.

    InkTurnError
      FatalInputError     story file or input stream unusable
        SnapshotError     auto-restore snapshot unreadable or incompatible
      StoryError          the story runtime could not advance
      ProtocolError       input violates the GlkOte handshake
"""


class InkTurnError(Exception):
    """Base class for every failure that aborts an invocation."""


class FatalInputError(InkTurnError):
    """Raised when the story file or the input stream cannot be used."""


class SnapshotError(FatalInputError):
    """Raised when a persisted snapshot exists but cannot be restored."""


class StoryError(InkTurnError):
    """Raised when the story runtime hits an invalid or unsupported operation."""


class ProtocolError(InkTurnError):
    """Raised when an input event breaks the display protocol contract."""
