"""
Concrete Station Approval - Settings Store
Version: 1.0.0

Changelog:
v1.0.0 (2026-10-05): Initial key/value settings persisted as JSON
"""

import json
import logging
from typing import Any

from database import get_db, transaction, execute_one, from_json
from errors import NotFound, ValidationError
from models.config import ConfigKey
from services.record_store import now, to_db

logger = logging.getLogger(__name__)


def _row_to_setting(row: dict) -> ConfigKey:
    return ConfigKey(
        id=row["id"],
        key=row["key"],
        value=from_json(row["value"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


async def get_setting(key: str) -> ConfigKey:
    async with get_db() as db:
        row = await execute_one(db, "SELECT * FROM settings WHERE key = ?", (key,))
    if not row:
        raise NotFound("Setting", key)
    return _row_to_setting(row)


async def set_setting(key: str, value: Any) -> ConfigKey:
    """Create or replace a setting value"""
    if not key:
        raise ValidationError("Setting key cannot be empty", field="key")

    stamp = to_db("updated_at", now())
    async with get_db() as db:
        async with transaction(db):
            await db.execute("""
                INSERT INTO settings (key, value, created_at, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
            """, (key, json.dumps(value, default=str, ensure_ascii=False), stamp, stamp))
            row = await execute_one(db, "SELECT * FROM settings WHERE key = ?", (key,))

    logger.info(f"Setting '{key}' updated")
    return _row_to_setting(row)
