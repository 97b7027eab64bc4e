from __future__ import annotations

import logging


def configure_logging(level: str | int = logging.INFO) -> None:
    """Simple, dev-friendly logging setup.

    Uvicorn config can override this, but this gives us sane defaults when running locally.
    The root level is always applied, even when handlers already exist.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    logging.getLogger().setLevel(level)
