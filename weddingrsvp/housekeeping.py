"""Periodic maintenance jobs."""

from __future__ import annotations

import logging

from .database import engine
from .sessions import prune_expired_sessions

# Use uvicorn's error logger so housekeeping messages show up with level prefixes.
logger = logging.getLogger("uvicorn.error")


def run_housekeeping() -> dict[str, int]:
    """Remove admin sessions that have passed their expiry."""
    logger.info("Housekeeping started")
    stats = {"sessions_pruned": prune_expired_sessions()}
    logger.info("Housekeeping finished: sessions pruned=%d", stats["sessions_pruned"])
    return stats


def vacuum_database() -> None:
    with engine.connect() as connection:
        connection.execution_options(isolation_level="AUTOCOMMIT").exec_driver_sql(
            "VACUUM"
        )
