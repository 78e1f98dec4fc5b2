"""
Concrete Station Approval - Database Models
Version: 1.2.0

Changelog:
v1.2.0 (2026-10-12): stations.allow_additional_visit (added in place on
                      existing databases); visits index on (station_id, visit_date)
v1.1.0 (2026-10-05): payments and settings tables
v1.0.0 (2026-09-28): Initial schema - stations, visits
"""

from .station import (
    Station, StationStatus, StationCreate, StationUpdate, CommitteeAssignment,
)
from .visit import (
    Visit, VisitCheck, VisitCreate, VisitUpdate, VisitType, VisitStatus,
    TestItem, CheckOutcome, CommitteeMember, FIRST_SIX_ITEMS, SEVENTH_ITEM,
)
from .payment import Payment, PaymentCreate, PaymentUpdate, PaymentStatus
from .config import ConfigKey, ConfigUpdate

import aiosqlite
import logging

logger = logging.getLogger(__name__)


async def _add_column_if_missing(db, table, column, col_type, default=None):
    """Idempotent ALTER TABLE ADD COLUMN"""
    cursor = await db.execute(f"PRAGMA table_info({table})")
    existing = {row[1] for row in await cursor.fetchall()}
    if column not in existing:
        default_clause = f" DEFAULT {default}" if default is not None else ""
        await db.execute(f"ALTER TABLE {table} ADD COLUMN {column} {col_type}{default_clause}")
        logger.info(f"Added column {table}.{column}")


async def init_db():
    """Initialize SQLite database with the station approval schema"""
    from database import get_db_path
    db_path = get_db_path()
    logger.info(f"Initializing database: {db_path}")

    async with aiosqlite.connect(db_path) as db:
        await db.execute("PRAGMA journal_mode=WAL")
        await db.execute("PRAGMA foreign_keys=ON")

        # ================================================================
        # STATIONS
        # ================================================================
        await db.execute("""
            CREATE TABLE IF NOT EXISTS stations (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                code TEXT NOT NULL UNIQUE,
                name TEXT NOT NULL,
                owner TEXT NOT NULL,
                tax_number TEXT NOT NULL,
                address TEXT NOT NULL,
                city_district TEXT NOT NULL,
                location TEXT,
                distance INTEGER NOT NULL,
                approval_type TEXT NOT NULL
                    CHECK (approval_type IN ('first-time', 'renewal')),
                certificate_expiry_date TIMESTAMP,
                mixers_count INTEGER NOT NULL,
                max_capacity INTEGER NOT NULL,
                mixing_type TEXT NOT NULL CHECK (mixing_type IN ('normal', 'dry')),
                report_language TEXT NOT NULL
                    CHECK (report_language IN ('arabic', 'english', 'both')),
                representative_name TEXT NOT NULL,
                representative_phone TEXT NOT NULL,
                representative_id TEXT NOT NULL,
                quality_manager_name TEXT NOT NULL,
                quality_manager_phone TEXT NOT NULL,
                accommodation TEXT CHECK (accommodation IN ('station', 'center')),
                status TEXT NOT NULL DEFAULT 'pending-payment',
                committee TEXT,
                fees INTEGER NOT NULL,
                request_date TIMESTAMP NOT NULL,
                approval_start_date TIMESTAMP,
                approval_end_date TIMESTAMP,
                created_by TEXT,
                created_at TIMESTAMP NOT NULL,
                updated_at TIMESTAMP NOT NULL
            )
        """)
        await _add_column_if_missing(
            db, "stations", "allow_additional_visit", "BOOLEAN NOT NULL", default=0)

        # ================================================================
        # PAYMENTS
        # ================================================================
        await db.execute("""
            CREATE TABLE IF NOT EXISTS payments (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                station_id INTEGER NOT NULL REFERENCES stations(id) ON DELETE CASCADE,
                amount INTEGER NOT NULL,
                status TEXT NOT NULL DEFAULT 'pending'
                    CHECK (status IN ('paid', 'pending', 'cancelled')),
                payment_method TEXT
                    CHECK (payment_method IN ('bank_transfer', 'cash', 'cheque')),
                invoice_number TEXT,
                invoice_date TIMESTAMP,
                notes TEXT,
                created_at TIMESTAMP NOT NULL,
                updated_at TIMESTAMP NOT NULL
            )
        """)

        # ================================================================
        # VISITS (checks: JSON array of {item_id, status, notes})
        # ================================================================
        await db.execute("""
            CREATE TABLE IF NOT EXISTS visits (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                station_id INTEGER NOT NULL REFERENCES stations(id) ON DELETE CASCADE,
                visit_type TEXT NOT NULL
                    CHECK (visit_type IN ('first', 'second', 'additional')),
                visit_date TIMESTAMP NOT NULL,
                visit_time TEXT NOT NULL,
                status TEXT NOT NULL DEFAULT 'scheduled'
                    CHECK (status IN ('scheduled', 'completed', 'cancelled')),
                committee TEXT NOT NULL DEFAULT '[]',
                checks TEXT,
                report TEXT,
                certificate_issued BOOLEAN NOT NULL DEFAULT 0,
                certificate_url TEXT,
                created_at TIMESTAMP NOT NULL,
                updated_at TIMESTAMP NOT NULL
            )
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_visits_station_date
            ON visits (station_id, visit_date, created_at)
        """)

        # ================================================================
        # SETTINGS (key -> JSON value)
        # ================================================================
        await db.execute("""
            CREATE TABLE IF NOT EXISTS settings (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                key TEXT NOT NULL UNIQUE,
                value TEXT NOT NULL,
                created_at TIMESTAMP NOT NULL,
                updated_at TIMESTAMP NOT NULL
            )
        """)

        await db.commit()

    logger.info("Database schema ready")
