"""Run the backend: ensure the JSON store exists, then serve on HOST:PORT."""
from __future__ import annotations

import logging
import sys

import uvicorn

from social_api.app import create_app
from social_api.core.config import get_settings
from social_api.repositories.json_storage import StorageIOError

logger = logging.getLogger("social_api")


def main() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = create_app(settings)
    try:
        app.state.storage.ensure_db()
    except StorageIOError as exc:
        logger.critical("Cannot initialize storage: %s", exc)
        sys.exit(1)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
