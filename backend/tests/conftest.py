"""Shared fixtures: throwaway SQLite database and record builders"""

from datetime import datetime, timedelta
from typing import Dict, Optional

import pytest

from config import settings
from models import init_db
from models.visit import (
    Visit, VisitCheck, VisitType, VisitStatus, CheckOutcome, TestItem,
    FIRST_SIX_ITEMS, SEVENTH_ITEM,
)

P = CheckOutcome.PASSED
F = CheckOutcome.FAILED
PEND = CheckOutcome.PENDING


@pytest.fixture
def temp_settings(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "SQLITE_DB_PATH", str(tmp_path / "stations.db"))
    monkeypatch.setattr(settings, "DOCUMENTS_DIR", str(tmp_path / "documents"))
    return settings


@pytest.fixture
async def db_ready(temp_settings):
    await init_db()
    return temp_settings.SQLITE_DB_PATH


def make_visit(visit_id: int, visit_type: VisitType, day: int,
               checks: Optional[Dict[TestItem, CheckOutcome]] = None,
               created_minute: int = 0) -> Visit:
    """In-memory visit on 2026-03-<day>; checks=None means nothing recorded"""
    created = datetime(2026, 3, 1, 8, created_minute)
    return Visit(
        id=visit_id,
        station_id=1,
        visit_type=visit_type,
        visit_date=datetime(2026, 3, day),
        visit_time="09:00",
        status=VisitStatus.COMPLETED if checks else VisitStatus.SCHEDULED,
        checks=None if checks is None else [
            VisitCheck(item_id=item, status=outcome) for item, outcome in checks.items()
        ],
        created_at=created,
        updated_at=created,
    )


def six(outcome: CheckOutcome = P, **overrides: CheckOutcome) -> Dict[TestItem, CheckOutcome]:
    """All first-six items set to ``outcome``; override by enum member name"""
    checks = {item: outcome for item in FIRST_SIX_ITEMS}
    for name, value in overrides.items():
        checks[TestItem[name]] = value
    return checks


def seven(outcome: CheckOutcome = P, seventh: CheckOutcome = P) -> Dict[TestItem, CheckOutcome]:
    checks = six(outcome)
    checks[SEVENTH_ITEM] = seventh
    return checks


def checks_payload(checks: Dict[TestItem, CheckOutcome]) -> list:
    return [{"item_id": item.value, "status": outcome.value} for item, outcome in checks.items()]


def station_payload(**overrides) -> dict:
    payload = {
        "name": "Nasr Ready-Mix Station",
        "owner": "Nasr Concrete Co.",
        "tax_number": "123-456-789",
        "address": "Industrial Zone 3",
        "city_district": "6th of October",
        "location": "29.97,30.94",
        "distance": 120,
        "approval_type": "first-time",
        "mixers_count": 2,
        "max_capacity": 90,
        "mixing_type": "normal",
        "report_language": "arabic",
        "representative_name": "Ahmed Saleh",
        "representative_phone": "01000000000",
        "representative_id": "29001011234567",
        "quality_manager_name": "Mona Adel",
        "quality_manager_phone": "01111111111",
        "accommodation": "station",
    }
    payload.update(overrides)
    return payload


COMMITTEE = {"chairman": "Eng. Samir", "engineer": "Eng. Hala", "secretary": "Karim"}


def visit_day(offset: int) -> str:
    return (datetime(2026, 4, 1) + timedelta(days=offset)).isoformat()


@pytest.fixture
async def ready_station(db_ready):
    """Station with payment confirmed and committee assigned"""
    from services import station_registry

    station = await station_registry.create_station(station_payload())
    await station_registry.confirm_payment(station.id)
    return await station_registry.assign_committee(station.id, COMMITTEE)
