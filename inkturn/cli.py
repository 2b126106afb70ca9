"""Command-line entry point: one process invocation = one turn.

    inkturn story.ink.json [--autorestore] [--autodir DIR] < event.json > update.json

stdout carries only the JSON update. Diagnostics go to stderr.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Sequence

from inkturn.config import load_settings
from inkturn.driver import run_turn
from inkturn.errors import InkTurnError
from inkturn.storage import SessionStore

logger = logging.getLogger("inkturn")


def main(argv: Sequence[str] | None = None) -> int:
    settings = load_settings(argv)
    logging.basicConfig(
        level=settings.log_level,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        run_turn(
            story_path=settings.story_path,
            store=SessionStore(settings.autosave_dir),
            autorestore=settings.autorestore,
            instream=sys.stdin,
            outstream=sys.stdout,
        )
    except InkTurnError as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
