"""
Concrete Station Approval - Record Store
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): Generic partial update with column whitelist;
                      timezone-aware datetimes stored as naive UTC
v1.0.0 (2026-09-28): Initial row <-> model helpers

Row-level get/list/create/update/delete for stations, visits and payments.
Every function takes an open connection so callers decide the transaction
boundary.
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from database import execute_one, execute_all, execute_insert, execute_update, json_col, from_json
from errors import NotFound
from models.station import Station, StationUpdate
from models.visit import Visit, VisitUpdate
from models.payment import Payment, PaymentUpdate

logger = logging.getLogger(__name__)

JSON_COLUMNS = {"committee", "checks"}

STATION_COLUMNS = set(StationUpdate.model_fields) | {
    "code", "allow_additional_visit", "request_date", "created_by",
    "certificate_expiry_date",
}
VISIT_COLUMNS = set(VisitUpdate.model_fields)
PAYMENT_COLUMNS = set(PaymentUpdate.model_fields)

_TABLE_COLUMNS = {
    "stations": STATION_COLUMNS,
    "visits": VISIT_COLUMNS,
    "payments": PAYMENT_COLUMNS,
}


def now() -> datetime:
    return datetime.now()


def to_db(column: str, value: Any) -> Any:
    """Convert a Python value into its SQLite column representation"""
    if value is None:
        return None
    if column in JSON_COLUMNS:
        return json_col([
            v.model_dump(mode="json") if isinstance(v, BaseModel) else v
            for v in value
        ])
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value.isoformat()
    if isinstance(value, bool):
        return int(value)
    return value


# -- Stations --

def _station_from_row(row: dict) -> Station:
    row["committee"] = from_json(row.get("committee"))
    return Station(**row)


async def get_station(db, station_id: int) -> Station:
    row = await execute_one(db, "SELECT * FROM stations WHERE id = ?", (station_id,))
    if not row:
        raise NotFound("Station", station_id)
    return _station_from_row(row)


async def list_stations(db, status: Optional[str] = None,
                        search: Optional[str] = None, limit: int = 100) -> List[Station]:
    query = "SELECT * FROM stations"
    params: list = []
    conditions = []

    if status:
        conditions.append("status = ?")
        params.append(status)
    if search:
        conditions.append("(name LIKE ? OR code LIKE ? OR owner LIKE ?)")
        params.extend([f"%{search}%"] * 3)

    if conditions:
        query += " WHERE " + " AND ".join(conditions)
    query += " ORDER BY request_date DESC, id DESC LIMIT ?"
    params.append(limit)

    rows = await execute_all(db, query, params)
    return [_station_from_row(r) for r in rows]


async def next_station_serial(db) -> int:
    row = await execute_one(db, "SELECT COALESCE(MAX(id), 0) AS last_id FROM stations")
    return row["last_id"] + 1


async def insert_station(db, values: Dict[str, Any]) -> int:
    return await _insert(db, "stations", values)


async def delete_station(db, station_id: int) -> None:
    await execute_update(db, "DELETE FROM visits WHERE station_id = ?", (station_id,))
    await execute_update(db, "DELETE FROM payments WHERE station_id = ?", (station_id,))
    count = await execute_update(db, "DELETE FROM stations WHERE id = ?", (station_id,))
    if count == 0:
        raise NotFound("Station", station_id)


# -- Visits --

def _visit_from_row(row: dict) -> Visit:
    row["committee"] = from_json(row.get("committee")) or []
    row["checks"] = from_json(row.get("checks"))
    return Visit(**row)


async def get_visit(db, visit_id: int) -> Visit:
    row = await execute_one(db, "SELECT * FROM visits WHERE id = ?", (visit_id,))
    if not row:
        raise NotFound("Visit", visit_id)
    return _visit_from_row(row)


async def list_visits_by_station(db, station_id: int) -> List[Visit]:
    """All visits of a station ordered by (visit_date, created_at)"""
    rows = await execute_all(db, """
        SELECT * FROM visits WHERE station_id = ?
        ORDER BY visit_date ASC, created_at ASC, id ASC
    """, (station_id,))
    return [_visit_from_row(r) for r in rows]


async def insert_visit(db, values: Dict[str, Any]) -> int:
    return await _insert(db, "visits", values)


async def delete_visit(db, visit_id: int) -> None:
    count = await execute_update(db, "DELETE FROM visits WHERE id = ?", (visit_id,))
    if count == 0:
        raise NotFound("Visit", visit_id)


# -- Payments --

async def get_payment(db, payment_id: int) -> Payment:
    row = await execute_one(db, "SELECT * FROM payments WHERE id = ?", (payment_id,))
    if not row:
        raise NotFound("Payment", payment_id)
    return Payment(**row)


async def list_payments_by_station(db, station_id: int) -> List[Payment]:
    rows = await execute_all(
        db, "SELECT * FROM payments WHERE station_id = ? ORDER BY created_at ASC",
        (station_id,))
    return [Payment(**r) for r in rows]


async def insert_payment(db, values: Dict[str, Any]) -> int:
    return await _insert(db, "payments", values)


# -- Shared --

async def _insert(db, table: str, values: Dict[str, Any]) -> int:
    stamp = now()
    values = {**values, "created_at": stamp, "updated_at": stamp}
    columns = list(values)
    placeholders = ", ".join("?" for _ in columns)
    return await execute_insert(
        db,
        f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders})",
        [to_db(c, values[c]) for c in columns],
    )


async def update_row(db, table: str, row_id: int, values: Dict[str, Any]) -> None:
    """Write the given columns plus updated_at; unknown columns are a bug"""
    allowed = _TABLE_COLUMNS[table]
    unknown = set(values) - allowed
    if unknown:
        raise KeyError(f"Unknown {table} columns: {sorted(unknown)}")

    updates = []
    params = []
    for column, value in values.items():
        updates.append(f"{column} = ?")
        params.append(to_db(column, value))

    updates.append("updated_at = ?")
    params.append(to_db("updated_at", now()))
    params.append(row_id)

    count = await execute_update(
        db, f"UPDATE {table} SET {', '.join(updates)} WHERE id = ?", params)
    if count == 0:
        raise NotFound(table.rstrip("s").capitalize(), row_id)
