"""
Concrete Station Approval - Station Update Orchestrator
Version: 1.2.1

Changelog:
v1.2.1 (2026-10-19): Nulls for required columns rejected before any write
v1.2.0 (2026-10-12): Explicit status override on station updates;
                      visit deletion re-derives the station status
v1.1.0 (2026-10-05): Single write transaction per update (BEGIN IMMEDIATE)
v1.0.0 (2026-09-28): Initial recomputation on visit check submission

Keeps stations.status and stations.allow_additional_visit in line with the
aggregated checks of all the station's visits.

Two entry points:
- Station update: writes the derived status unless the payload carries an
  explicit status, which wins. While no visit has recorded checks the
  current workflow status is kept. allow_additional_visit is always
  recomputed.
- Visit update: when checks change or the visit becomes completed, the
  station status and flag are overwritten unconditionally.

The record write and the status write happen inside one transaction. The
``apply_*`` methods take an open connection so other services can join an
existing transaction; the public methods open their own.
"""

import logging
from typing import Any, Dict, List, Union

from database import get_db, transaction
from errors import ValidationError, parse_payload
from models.station import Station, StationUpdate
from models.visit import Visit, VisitUpdate, VisitStatus, VisitCheck
from services import record_store
from services.visit_aggregator import AggregatedResults, aggregate_visits
from services.status_deriver import StatusDecision, derive_status

logger = logging.getLogger(__name__)


def compute_station_status(visits: List[Visit]) -> StatusDecision:
    """Aggregate + derive in one call"""
    return derive_status(aggregate_visits(visits))


def _has_recorded_checks(visits: List[Visit]) -> bool:
    return any(v.checks for v in visits)


STATION_REQUIRED_COLUMNS = (
    "name", "owner", "tax_number", "address", "city_district", "distance",
    "approval_type", "mixers_count", "max_capacity", "mixing_type",
    "report_language", "representative_name", "representative_phone",
    "representative_id", "quality_manager_name", "quality_manager_phone", "fees",
)
VISIT_REQUIRED_COLUMNS = ("visit_date", "visit_time", "status", "committee", "certificate_issued")


def _reject_nulls(changes: Dict[str, Any], columns) -> None:
    for column in columns:
        if column in changes and changes[column] is None:
            raise ValidationError("Field cannot be null", field=column)


def _validate_checks(checks: List[VisitCheck]) -> None:
    seen = set()
    for check in checks:
        if check.item_id in seen:
            raise ValidationError(
                "Duplicate test item in visit checks",
                field="checks", invalid_value=check.item_id.value)
        seen.add(check.item_id)


class StationUpdateOrchestrator:
    """Recomputes derived station status on every station/visit mutation."""

    # -- Station update path --

    async def update_station(self, station_id: int,
                             partial: Union[Dict[str, Any], StationUpdate]) -> Station:
        """
        Apply a partial station update and recompute its status atomically.

        Raises:
            ValidationError: malformed payload (nothing is written)
            NotFound: station does not exist
            TransactionConflict: write lock not acquired; retry the call
        """
        update = parse_payload(StationUpdate, partial)
        async with get_db() as db:
            async with transaction(db):
                return await self.apply_station_update(db, station_id, update)

    async def apply_station_update(self, db, station_id: int,
                                   partial: Union[Dict[str, Any], StationUpdate]) -> Station:
        update = parse_payload(StationUpdate, partial)
        changes = update.model_dump(exclude_unset=True)
        override = changes.pop("status", None)
        _reject_nulls(changes, STATION_REQUIRED_COLUMNS)

        station = await record_store.get_station(db, station_id)
        visits = await record_store.list_visits_by_station(db, station_id)
        decision = compute_station_status(visits)

        if override is not None:
            new_status = override
        elif _has_recorded_checks(visits):
            new_status = decision.status
        else:
            # Nothing to derive from yet; keep the last workflow transition
            new_status = station.status

        changes["status"] = new_status
        changes["allow_additional_visit"] = decision.allow_additional_visit
        await record_store.update_row(db, "stations", station_id, changes)

        if new_status != station.status:
            logger.info(
                f"Station {station_id} status {station.status.value} -> {new_status.value}"
                f"{' (override)' if override is not None else ''}")

        return await record_store.get_station(db, station_id)

    async def recalculate_station_status(self, station_id: int) -> Station:
        """Force a recomputation with an empty update (repair operation)"""
        return await self.update_station(station_id, {})

    # -- Visit update path --

    async def update_visit(self, visit_id: int,
                           partial: Union[Dict[str, Any], VisitUpdate]) -> Visit:
        """
        Apply a partial visit update; re-derive the station status when the
        checks changed or the visit was completed.

        Raises:
            ValidationError: malformed checks/fields (nothing is written)
            NotFound: visit does not exist
            TransactionConflict: write lock not acquired; retry the call
        """
        update = parse_payload(VisitUpdate, partial)
        async with get_db() as db:
            async with transaction(db):
                return await self.apply_visit_update(db, visit_id, update)

    async def apply_visit_update(self, db, visit_id: int,
                                 partial: Union[Dict[str, Any], VisitUpdate]) -> Visit:
        update = parse_payload(VisitUpdate, partial)
        changes = update.model_dump(exclude_unset=True)
        if changes.get("checks"):
            _validate_checks(update.checks)
        _reject_nulls(changes, VISIT_REQUIRED_COLUMNS)

        visit = await record_store.get_visit(db, visit_id)
        if not changes:
            return visit

        await record_store.update_row(db, "visits", visit_id, changes)

        checks_changed = "checks" in changes
        completed_now = (changes.get("status") == VisitStatus.COMPLETED
                         and visit.status != VisitStatus.COMPLETED)
        reordered = "visit_date" in changes and bool(visit.checks)

        if checks_changed or completed_now or reordered:
            await self.refresh_station_status(db, visit.station_id)

        return await record_store.get_visit(db, visit_id)

    async def delete_visit(self, visit_id: int) -> None:
        async with get_db() as db:
            async with transaction(db):
                visit = await record_store.get_visit(db, visit_id)
                await record_store.delete_visit(db, visit_id)
                if visit.checks:
                    await self.refresh_station_status(db, visit.station_id)
        logger.info(f"Visit {visit_id} deleted (station {visit.station_id})")

    async def refresh_station_status(self, db, station_id: int) -> StatusDecision:
        """Unconditionally overwrite status + flag from the station's visits"""
        station = await record_store.get_station(db, station_id)
        visits = await record_store.list_visits_by_station(db, station_id)
        decision = compute_station_status(visits)

        await record_store.update_row(db, "stations", station_id, {
            "status": decision.status,
            "allow_additional_visit": decision.allow_additional_visit,
        })

        logger.info(
            f"Station {station_id} status {station.status.value} -> "
            f"{decision.status.value} (additional visit "
            f"{'allowed' if decision.allow_additional_visit else 'not allowed'})")
        return decision

    # -- Read side --

    async def get_station_results(self, station_id: int) -> Dict[str, Any]:
        """Aggregated per-item outcomes plus the status they derive"""
        async with get_db() as db:
            station = await record_store.get_station(db, station_id)
            visits = await record_store.list_visits_by_station(db, station_id)

        results: AggregatedResults = aggregate_visits(visits)
        decision = derive_status(results)
        return {
            "station_id": station.id,
            "stored_status": station.status.value,
            "derived_status": decision.status.value,
            "allow_additional_visit": decision.allow_additional_visit,
            "items": results.to_dict(),
            "failed_items": [
                item.value for item, r in results.first_six.items()
                if r.status.value == "failed"
            ],
        }


# Singleton
_orchestrator = StationUpdateOrchestrator()


async def update_station(station_id: int, partial) -> Station:
    return await _orchestrator.update_station(station_id, partial)


async def update_visit(visit_id: int, partial) -> Visit:
    return await _orchestrator.update_visit(visit_id, partial)


async def recalculate_station_status(station_id: int) -> Station:
    return await _orchestrator.recalculate_station_status(station_id)


async def delete_visit(visit_id: int) -> None:
    await _orchestrator.delete_visit(visit_id)


async def get_station_results(station_id: int) -> Dict[str, Any]:
    return await _orchestrator.get_station_results(station_id)


def get_orchestrator() -> StationUpdateOrchestrator:
    return _orchestrator
