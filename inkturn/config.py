"""Runtime configuration.

Settings come from the command line, falling back to environment variables
(a .env file in the working directory is loaded first), falling back to
defaults:

    story file      positional argument   INKTURN_STORY
    auto-restore    --autorestore         INKTURN_AUTORESTORE   (default off)
    autosave dir    --autodir DIR         INKTURN_AUTODIR       (default ".")
    log level                             INKTURN_LOG_LEVEL     (default WARNING)
    HTTP data dir                         INKTURN_DATA_DIR      (default "./data")
"""

from __future__ import annotations

import argparse
import os
from collections.abc import Sequence
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel

_TRUTHY = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    story_path: Path
    autorestore: bool = False
    autosave_dir: Path = Path(".")
    log_level: str = "WARNING"


def env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUTHY


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="inkturn",
        description="Run one GlkOte turn of a compiled ink story.",
    )
    parser.add_argument("gamefile", nargs="?", type=Path, default=None,
                        help="Compiled story (.ink.json) (default: $INKTURN_STORY)")
    parser.add_argument("--autorestore", action="store_true", default=None,
                        help="Resume from the autosave file if one exists")
    parser.add_argument("--autodir", type=Path, default=None,
                        help="Directory holding autosave.json (default: .)")
    return parser


def load_settings(argv: Sequence[str] | None = None) -> Settings:
    load_dotenv(Path.cwd() / ".env")
    parser = build_parser()
    args = parser.parse_args(argv)

    story_path = args.gamefile or os.getenv("INKTURN_STORY")
    if not story_path:
        parser.error("a story file is required")

    autorestore = args.autorestore if args.autorestore is not None else env_flag("INKTURN_AUTORESTORE")
    autosave_dir = args.autodir or Path(os.getenv("INKTURN_AUTODIR", "."))

    return Settings(
        story_path=story_path,
        autorestore=autorestore,
        autosave_dir=autosave_dir,
        log_level=os.getenv("INKTURN_LOG_LEVEL", "WARNING").upper(),
    )


def data_dir() -> Path:
    """Where the HTTP surface keeps its session snapshots."""
    return Path(os.getenv("INKTURN_DATA_DIR", "data"))
