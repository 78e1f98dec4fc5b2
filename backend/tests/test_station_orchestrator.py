"""Status recomputation on station and visit updates (against a temp SQLite file)"""

import aiosqlite
import pytest

from config import settings
from errors import NotFound, ValidationError, TransactionConflict
from models.station import StationStatus
from models.visit import TestItem, VisitStatus, SEVENTH_ITEM
from services import station_orchestrator, station_registry

from conftest import (
    station_payload, checks_payload, visit_day, six, seven, P, F, PEND,
)


async def schedule(station_id, visit_type="first", day=0):
    return await station_registry.schedule_visit({
        "station_id": station_id, "visit_type": visit_type, "visit_date": visit_day(day),
    })


async def submit(visit_id, checks, **extra):
    return await station_orchestrator.update_visit(
        visit_id, {"checks": checks_payload(checks), "status": "completed", **extra})


# -- Scenarios --

async def test_first_visit_six_passed_seventh_pending(ready_station):
    visit = await schedule(ready_station.id)
    await submit(visit.id, seven(P, PEND))

    station = await station_registry.get_station(ready_station.id)
    assert station.status == StationStatus.OPERATION_LETTER_ELIGIBLE
    assert station.allow_additional_visit is True


async def test_all_seven_passed_approved(ready_station):
    visit = await schedule(ready_station.id)
    await submit(visit.id, seven(P, P))

    station = await station_registry.get_station(ready_station.id)
    assert station.status == StationStatus.APPROVED
    assert station.allow_additional_visit is False


async def test_additional_visit_clears_failure(ready_station):
    first = await schedule(ready_station.id)
    await submit(first.id, six(P, SCALE_CALIBRATION=F))
    station = await station_registry.get_station(ready_station.id)
    assert station.status == StationStatus.SOME_TESTS_FAILED
    assert station.allow_additional_visit is True

    additional = await schedule(ready_station.id, "additional", day=7)
    await submit(additional.id, {TestItem.SCALE_CALIBRATION: P})

    station = await station_registry.get_station(ready_station.id)
    assert station.status == StationStatus.OPERATION_LETTER_ELIGIBLE
    results = await station_orchestrator.get_station_results(ready_station.id)
    assert results["items"]["scale-calibration"]["source_visit_id"] == additional.id


async def test_pending_item_under_testing(ready_station):
    visit = await schedule(ready_station.id)
    await submit(visit.id, six(P, PRESS_CALIBRATION=PEND))
    station = await station_registry.get_station(ready_station.id)
    assert station.status == StationStatus.UNDER_TESTING


async def test_explicit_status_without_visits(db_ready):
    station = await station_registry.create_station(station_payload())
    updated = await station_orchestrator.update_station(
        station.id, {"status": "pending-documents"})
    assert updated.status == StationStatus.PENDING_DOCUMENTS
    assert updated.allow_additional_visit is True


# -- Station update path --

async def test_override_wins_over_derived(ready_station):
    visit = await schedule(ready_station.id)
    await submit(visit.id, seven(P, P))

    updated = await station_orchestrator.update_station(
        ready_station.id, {"status": "visited"})
    assert updated.status == StationStatus.VISITED
    # flag still recomputed from the approved derivation
    assert updated.allow_additional_visit is False


async def test_plain_update_rederives_status(ready_station):
    visit = await schedule(ready_station.id)
    await submit(visit.id, six(P))
    await station_orchestrator.update_station(ready_station.id, {"status": "visited"})

    updated = await station_orchestrator.update_station(ready_station.id, {"max_capacity": 120})
    assert updated.max_capacity == 120
    assert updated.status == StationStatus.OPERATION_LETTER_ELIGIBLE


async def test_null_status_is_not_an_override(ready_station):
    visit = await schedule(ready_station.id)
    await submit(visit.id, six(P, UNIFORMITY_TESTS=F))
    updated = await station_orchestrator.update_station(
        ready_station.id, {"status": None, "name": "Renamed"})
    assert updated.name == "Renamed"
    assert updated.status == StationStatus.SOME_TESTS_FAILED


async def test_update_without_checks_keeps_workflow_status(ready_station):
    updated = await station_orchestrator.update_station(ready_station.id, {"owner": "New Owner"})
    assert updated.status == StationStatus.COMMITTEE_ASSIGNED
    assert updated.owner == "New Owner"
    assert updated.allow_additional_visit is True


async def test_recalculate_without_checks_keeps_status(ready_station):
    await schedule(ready_station.id)
    station = await station_orchestrator.recalculate_station_status(ready_station.id)
    assert station.status == StationStatus.SCHEDULED
    assert station.allow_additional_visit is True


async def test_recalculate_repairs_manual_status(ready_station):
    visit = await schedule(ready_station.id)
    await submit(visit.id, seven(P, P))
    await station_orchestrator.update_station(ready_station.id, {"status": "pending-payment"})

    station = await station_orchestrator.recalculate_station_status(ready_station.id)
    assert station.status == StationStatus.APPROVED


async def test_recalculate_is_idempotent(ready_station):
    visit = await schedule(ready_station.id)
    await submit(visit.id, six(P, WATER_CHEMICAL_TESTS=F))
    first = await station_orchestrator.recalculate_station_status(ready_station.id)
    second = await station_orchestrator.recalculate_station_status(ready_station.id)
    assert (first.status, first.allow_additional_visit) == (second.status, second.allow_additional_visit)


async def test_unknown_station(db_ready):
    with pytest.raises(NotFound):
        await station_orchestrator.update_station(999, {"name": "x"})


async def test_unknown_station_field_rejected(ready_station):
    with pytest.raises(ValidationError):
        await station_orchestrator.update_station(ready_station.id, {"colour": "blue"})


async def test_invalid_status_rejected(ready_station):
    with pytest.raises(ValidationError):
        await station_orchestrator.update_station(ready_station.id, {"status": "done"})


@pytest.mark.parametrize("column", ["name", "distance", "report_language", "fees"])
async def test_null_required_column_rejected(ready_station, column):
    with pytest.raises(ValidationError) as exc_info:
        await station_orchestrator.update_station(ready_station.id, {column: None})
    assert exc_info.value.field == column

    station = await station_registry.get_station(ready_station.id)
    assert station.name == ready_station.name
    assert station.fees == ready_station.fees


async def test_null_optional_column_clears_it(ready_station):
    updated = await station_orchestrator.update_station(ready_station.id, {"location": None})
    assert updated.location is None


# -- Visit update path --

async def test_checks_without_completion_still_recompute(ready_station):
    visit = await schedule(ready_station.id)
    await station_orchestrator.update_visit(visit.id, {"checks": checks_payload(six(P))})
    station = await station_registry.get_station(ready_station.id)
    assert station.status == StationStatus.OPERATION_LETTER_ELIGIBLE


async def test_visit_update_overrides_manual_status(ready_station):
    visit = await schedule(ready_station.id)
    await submit(visit.id, six(P))
    await station_orchestrator.update_station(ready_station.id, {"status": "visited"})

    await station_orchestrator.update_visit(visit.id, {"checks": checks_payload(seven(P, P))})
    station = await station_registry.get_station(ready_station.id)
    assert station.status == StationStatus.APPROVED


async def test_report_only_update_leaves_status(ready_station):
    visit = await schedule(ready_station.id)
    updated = await station_orchestrator.update_visit(visit.id, {"report": "Site visited"})
    assert updated.report == "Site visited"
    station = await station_registry.get_station(ready_station.id)
    assert station.status == StationStatus.SCHEDULED


async def test_unknown_item_rejected_before_write(ready_station):
    visit = await schedule(ready_station.id)
    with pytest.raises(ValidationError):
        await station_orchestrator.update_visit(visit.id, {
            "checks": [{"item_id": "slump-test", "status": "passed"}]})
    assert (await station_registry.get_visit(visit.id)).checks is None


async def test_invalid_outcome_rejected(ready_station):
    visit = await schedule(ready_station.id)
    with pytest.raises(ValidationError):
        await station_orchestrator.update_visit(visit.id, {
            "checks": [{"item_id": "scale-calibration", "status": "ok"}]})


async def test_duplicate_item_rejected(ready_station):
    visit = await schedule(ready_station.id)
    with pytest.raises(ValidationError):
        await station_orchestrator.update_visit(visit.id, {"checks": [
            {"item_id": "scale-calibration", "status": "passed"},
            {"item_id": "scale-calibration", "status": "failed"},
        ]})


async def test_unknown_visit(db_ready):
    with pytest.raises(NotFound):
        await station_orchestrator.update_visit(42, {"report": "x"})


async def test_failure_rolls_back_visit_write(ready_station, monkeypatch):
    visit = await schedule(ready_station.id)

    def boom(visits):
        raise RuntimeError("derivation failed")

    monkeypatch.setattr(station_orchestrator, "compute_station_status", boom)
    with pytest.raises(RuntimeError):
        await submit(visit.id, seven(P, P))

    stored = await station_registry.get_visit(visit.id)
    assert stored.checks is None
    assert stored.status == VisitStatus.SCHEDULED
    station = await station_registry.get_station(ready_station.id)
    assert station.status == StationStatus.SCHEDULED


async def test_locked_database_raises_conflict(ready_station, monkeypatch):
    monkeypatch.setattr(settings, "DB_BUSY_TIMEOUT", 0.1)
    holder = await aiosqlite.connect(settings.SQLITE_DB_PATH, isolation_level=None)
    try:
        await holder.execute("BEGIN IMMEDIATE")
        with pytest.raises(TransactionConflict):
            await station_orchestrator.update_station(ready_station.id, {"name": "x"})
        await holder.execute("ROLLBACK")
    finally:
        await holder.close()

    station = await station_registry.get_station(ready_station.id)
    assert station.name == ready_station.name


async def test_delete_visit_recomputes(ready_station):
    first = await schedule(ready_station.id)
    await submit(first.id, six(P, SCALE_CALIBRATION=F))
    additional = await schedule(ready_station.id, "additional", day=7)
    await submit(additional.id, {TestItem.SCALE_CALIBRATION: P, SEVENTH_ITEM: P})
    assert (await station_registry.get_station(ready_station.id)).status == StationStatus.APPROVED

    await station_orchestrator.delete_visit(additional.id)
    station = await station_registry.get_station(ready_station.id)
    assert station.status == StationStatus.SOME_TESTS_FAILED
    assert station.allow_additional_visit is True

    with pytest.raises(NotFound):
        await station_orchestrator.delete_visit(additional.id)


async def test_results_report_stored_and_derived(ready_station):
    visit = await schedule(ready_station.id)
    await submit(visit.id, six(P, CHLORIDE_SULFATE_TESTS=F))
    await station_orchestrator.update_station(ready_station.id, {"status": "visited"})

    results = await station_orchestrator.get_station_results(ready_station.id)
    assert results["stored_status"] == "visited"
    assert results["derived_status"] == StationStatus.SOME_TESTS_FAILED.value
    assert results["failed_items"] == ["chloride-sulfate-tests"]
