"""
Concrete Station Approval - Database Connection Manager
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): Write transactions via BEGIN IMMEDIATE; lock timeouts
                      surface as TransactionConflict
v1.0.0 (2026-09-28): Initial database connection manager with async helpers

Provides centralized async SQLite connection management for all services.
Uses aiosqlite with WAL journal mode and foreign key enforcement. Connections
run in autocommit mode; every multi-statement write goes through
``transaction()`` so the write lock is held from the first read to the commit.
"""

import os
import json
import logging
import aiosqlite
from contextlib import asynccontextmanager

from config import settings
from errors import TransactionConflict

logger = logging.getLogger(__name__)


def get_db_path() -> str:
    """Resolve database path, create data directory if needed"""
    db_path = settings.SQLITE_DB_PATH
    os.makedirs(os.path.dirname(os.path.abspath(db_path)), exist_ok=True)
    return db_path


@asynccontextmanager
async def get_db():
    """Async context manager yielding an aiosqlite connection with WAL + FK"""
    db = await aiosqlite.connect(
        get_db_path(),
        timeout=settings.DB_BUSY_TIMEOUT,
        isolation_level=None,
    )
    db.row_factory = aiosqlite.Row
    await db.execute("PRAGMA journal_mode=WAL")
    await db.execute("PRAGMA foreign_keys=ON")
    try:
        yield db
    finally:
        await db.close()


@asynccontextmanager
async def transaction(db):
    """
    Run a block inside one write transaction.

    BEGIN IMMEDIATE takes the database write lock up front, so concurrent
    recomputations for the same station are serialized instead of each
    reading a stale visit list. Any exception rolls the whole block back.
    """
    try:
        await db.execute("BEGIN IMMEDIATE")
    except aiosqlite.OperationalError as e:
        logger.warning(f"Could not acquire write lock: {e}")
        raise TransactionConflict("Database is busy, retry the update", e)

    try:
        yield db
    except BaseException:
        await db.execute("ROLLBACK")
        raise

    try:
        await db.execute("COMMIT")
    except aiosqlite.OperationalError as e:
        await db.execute("ROLLBACK")
        logger.warning(f"Commit failed: {e}")
        raise TransactionConflict("Commit failed, retry the update", e)


async def execute_one(db, sql: str, params=()) -> dict | None:
    """Execute query and return first row as dict, or None"""
    cursor = await db.execute(sql, params)
    row = await cursor.fetchone()
    return dict(row) if row else None


async def execute_all(db, sql: str, params=()) -> list[dict]:
    """Execute query and return all rows as list of dicts"""
    cursor = await db.execute(sql, params)
    rows = await cursor.fetchall()
    return [dict(row) for row in rows]


async def execute_insert(db, sql: str, params=()) -> int:
    """Execute INSERT and return lastrowid (commit is the caller's transaction)"""
    cursor = await db.execute(sql, params)
    return cursor.lastrowid


async def execute_update(db, sql: str, params=()) -> int:
    """Execute UPDATE/DELETE and return rowcount"""
    cursor = await db.execute(sql, params)
    return cursor.rowcount


def json_col(data) -> str | None:
    """Serialize Python object to JSON TEXT for SQLite storage"""
    if data is None:
        return None
    return json.dumps(data, default=str, ensure_ascii=False)


def from_json(text: str):
    """Deserialize JSON TEXT column to Python object"""
    if not text:
        return None
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None
