"""HTTP surface. Serve with: uvicorn inkturn.app:app"""

import os
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI

from inkturn import config
from inkturn.routes import router

load_dotenv(Path.cwd() / ".env")


def create_app(story_path: Path | None = None, data_dir: Path | None = None) -> FastAPI:
    resolved_story = story_path or os.getenv("INKTURN_STORY") or None

    app = FastAPI(title="inkturn")
    app.state.story_path = Path(resolved_story) if resolved_story else None
    app.state.data_dir = data_dir or config.data_dir()
    app.include_router(router, prefix="/api")
    return app


# Default app instance for uvicorn (uses INKTURN_STORY / INKTURN_DATA_DIR)
app = create_app()
