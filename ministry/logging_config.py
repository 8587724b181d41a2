from __future__ import annotations

import logging


def configure_app_logging(level: str = "INFO") -> None:
    """
    Minimal logging configuration for this repo.

    Notes:
    - Stdlib logging only; Uvicorn already configures handlers.
    - This sets the level for the `ministry` package; child loggers inherit it.
    - Set `MINISTRY_LOG_LEVEL=DEBUG` to see every scope decision.
    """

    normalized = level.upper()
    logging.getLogger("ministry").setLevel(normalized)
    logging.getLogger("ministry").propagate = True
