"""Launch the watch progress FastAPI server."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from watch_progress.config import ServerConfig
from watch_progress.server import create_app


def _load_env_files() -> None:
    """Load environment variables from .env files if present."""

    for filename in (".env.local", ".env"):
        env_path = Path(filename)
        if env_path.exists():
            load_dotenv(env_path, override=False)


def main() -> None:
    _load_env_files()
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
    config = ServerConfig.from_env()
    app = create_app(config)
    uvicorn.run(app, host="0.0.0.0", port=config.port, reload=False)


if __name__ == "__main__":
    main()
