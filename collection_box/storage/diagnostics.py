"""Statement-level logging for the SQL store (DB_LOG_LEVEL / SLOW_QUERY_MS)."""

from __future__ import annotations

import time

from sqlalchemy import event
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine

from ..core.logging import get_logger

logger = get_logger("collection_box.db")

_RANKS = {"silent": 0, "error": 1, "warn": 2, "info": 3}
_TIMER_KEY = "query_start_time"


def attach_query_diagnostics(engine: AsyncEngine, level: str, slow_query_ms: int) -> None:
    """Log failed, slow and (at ``info``) all statements run by ``engine``."""
    rank = _RANKS.get(level, _RANKS["warn"])
    if rank == 0:
        return

    threshold = slow_query_ms / 1000.0
    sync_engine = engine.sync_engine

    @event.listens_for(sync_engine, "before_cursor_execute")
    def _start_timer(conn, cursor, statement, parameters, context, executemany):
        conn.info.setdefault(_TIMER_KEY, []).append(time.perf_counter())

    @event.listens_for(sync_engine, "after_cursor_execute")
    def _log_statement(conn, cursor, statement, parameters, context, executemany):
        timers = conn.info.get(_TIMER_KEY)
        if not timers:
            return
        elapsed = time.perf_counter() - timers.pop()
        duration_ms = round(elapsed * 1000, 3)

        if threshold > 0 and elapsed > threshold:
            if rank >= _RANKS["warn"]:
                logger.warning(
                    "Slow query",
                    duration_ms=duration_ms,
                    slow_ms=slow_query_ms,
                    rows=cursor.rowcount,
                    sql=statement,
                )
        elif rank >= _RANKS["info"]:
            logger.info("Query", duration_ms=duration_ms, rows=cursor.rowcount, sql=statement)

    @event.listens_for(sync_engine, "handle_error")
    def _log_failure(exception_context):
        connection = exception_context.connection
        if connection is not None:
            timers = connection.info.get(_TIMER_KEY)
            if timers:
                timers.pop()

        # duplicate URLs are expected on the upsert path
        if isinstance(exception_context.sqlalchemy_exception, IntegrityError):
            if rank >= _RANKS["info"]:
                logger.info(
                    "Query constraint violation",
                    sql=exception_context.statement,
                    error=str(exception_context.original_exception),
                )
            return

        logger.error(
            "Query error",
            sql=exception_context.statement,
            error=str(exception_context.original_exception),
        )


__all__ = ["attach_query_diagnostics"]
