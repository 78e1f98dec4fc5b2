"""
Concrete Station Approval - Station Registry
Version: 1.2.0

Changelog:
v1.2.0 (2026-10-12): Workflow status changes routed through the update
                      orchestrator as explicit overrides
v1.1.0 (2026-10-05): Payment confirmation, committee assignment, visit
                      scheduling rules
v1.0.0 (2026-09-28): Initial station registration

Workflow operations around a station's approval request:

    register -> confirm payment -> assign committee -> schedule visits

Every write runs in one transaction. Status transitions set here are explicit
overrides; once visits carry checks the derived status takes over.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from config import station_code
from database import get_db, transaction
from errors import ValidationError, parse_payload
from models.station import Station, StationCreate, StationStatus, CommitteeAssignment
from models.visit import Visit, VisitCreate, VisitType
from models.payment import (
    Payment, PaymentCreate, PaymentUpdate, PaymentConfirmation, PaymentStatus,
)
from services import record_store
from services.fee_calculator import station_fees
from services.station_orchestrator import get_orchestrator

logger = logging.getLogger(__name__)


# -- Stations --

async def create_station(data: Union[Dict[str, Any], StationCreate]) -> Station:
    """Register a station; fees default to the computed approval fees"""
    data = parse_payload(StationCreate, data)
    values = data.model_dump()
    if values["fees"] is None:
        values["fees"] = station_fees(
            data.distance, data.mixers_count, data.report_language, data.accommodation)

    stamp = record_store.now()
    async with get_db() as db:
        async with transaction(db):
            serial = await record_store.next_station_serial(db)
            values.update({
                "code": station_code(stamp.year, serial),
                "status": StationStatus.PENDING_PAYMENT,
                "allow_additional_visit": False,
                "request_date": stamp,
            })
            station_id = await record_store.insert_station(db, values)
            station = await record_store.get_station(db, station_id)

    logger.info(f"Registered station {station.id} ({station.code}) fees={station.fees}")
    return station


async def get_station(station_id: int) -> Station:
    async with get_db() as db:
        return await record_store.get_station(db, station_id)


async def list_stations(status: Optional[str] = None, search: Optional[str] = None,
                        limit: int = 100) -> List[Station]:
    async with get_db() as db:
        return await record_store.list_stations(db, status=status, search=search, limit=limit)


async def delete_station(station_id: int) -> None:
    async with get_db() as db:
        async with transaction(db):
            await record_store.delete_station(db, station_id)
    logger.info(f"Deleted station {station_id} with its visits and payments")


# -- Payments --

async def confirm_payment(station_id: int,
                          confirmation: Union[Dict[str, Any], PaymentConfirmation, None] = None
                          ) -> Dict[str, Any]:
    """
    Record the approval fee payment and move the station to payment-confirmed.

    Raises:
        ValidationError: station is not waiting for payment
        NotFound: station does not exist
    """
    confirmation = parse_payload(PaymentConfirmation, confirmation or {})
    async with get_db() as db:
        async with transaction(db):
            station = await record_store.get_station(db, station_id)
            if station.status != StationStatus.PENDING_PAYMENT:
                raise ValidationError(
                    "Payment can only be confirmed for a station pending payment",
                    field="status", invalid_value=station.status.value)

            values = confirmation.model_dump()
            if values["amount"] is None:
                values["amount"] = station.fees
            values.update({"station_id": station_id, "status": PaymentStatus.PAID})
            payment_id = await record_store.insert_payment(db, values)

            station = await get_orchestrator().apply_station_update(
                db, station_id, {"status": StationStatus.PAYMENT_CONFIRMED})
            payment = await record_store.get_payment(db, payment_id)

    logger.info(f"Payment {payment.id} confirmed for station {station_id} ({payment.amount} EGP)")
    return {"station": station, "payment": payment}


async def _confirm_if_paid(db, payment: Payment) -> None:
    if payment.status != PaymentStatus.PAID:
        return
    station = await record_store.get_station(db, payment.station_id)
    if station.status == StationStatus.PENDING_PAYMENT:
        await get_orchestrator().apply_station_update(
            db, station.id, {"status": StationStatus.PAYMENT_CONFIRMED})


async def create_payment(data: Union[Dict[str, Any], PaymentCreate]) -> Payment:
    data = parse_payload(PaymentCreate, data)
    async with get_db() as db:
        async with transaction(db):
            await record_store.get_station(db, data.station_id)
            payment_id = await record_store.insert_payment(db, data.model_dump())
            payment = await record_store.get_payment(db, payment_id)
            await _confirm_if_paid(db, payment)
    return payment


async def update_payment(payment_id: int,
                         data: Union[Dict[str, Any], PaymentUpdate]) -> Payment:
    data = parse_payload(PaymentUpdate, data)
    changes = data.model_dump(exclude_none=True)
    async with get_db() as db:
        async with transaction(db):
            await record_store.get_payment(db, payment_id)
            if changes:
                await record_store.update_row(db, "payments", payment_id, changes)
            payment = await record_store.get_payment(db, payment_id)
            await _confirm_if_paid(db, payment)
    return payment


async def list_payments_by_station(station_id: int) -> List[Payment]:
    async with get_db() as db:
        await record_store.get_station(db, station_id)
        return await record_store.list_payments_by_station(db, station_id)


# -- Committee --

async def assign_committee(station_id: int,
                           assignment: Union[Dict[str, Any], CommitteeAssignment]) -> Station:
    """Store the inspection committee; requires a confirmed payment"""
    assignment = parse_payload(CommitteeAssignment, assignment)
    async with get_db() as db:
        async with transaction(db):
            station = await record_store.get_station(db, station_id)
            if station.status == StationStatus.PENDING_PAYMENT:
                raise ValidationError(
                    "Committee cannot be assigned before the payment is confirmed",
                    field="status", invalid_value=station.status.value)

            station = await get_orchestrator().apply_station_update(db, station_id, {
                "committee": [m.model_dump() for m in assignment.members()],
                "status": StationStatus.COMMITTEE_ASSIGNED,
            })

    logger.info(f"Committee assigned to station {station_id}: {assignment.chairman} (chairman)")
    return station


# -- Visits --

async def schedule_visit(data: Union[Dict[str, Any], VisitCreate]) -> Visit:
    """
    Schedule an inspection visit.

    Rules:
    - the station must have a committee
    - the first visit of a station must be of type ``first``
    - an ``additional`` visit requires allow_additional_visit
    - an empty committee is copied from the station
    """
    data = parse_payload(VisitCreate, data)
    async with get_db() as db:
        async with transaction(db):
            station = await record_store.get_station(db, data.station_id)
            if not station.committee:
                raise ValidationError(
                    "A committee must be assigned before scheduling a visit",
                    field="committee")

            visits = await record_store.list_visits_by_station(db, station.id)
            if not visits and data.visit_type != VisitType.FIRST:
                raise ValidationError(
                    "The first visit of a station must be of type 'first'",
                    field="visit_type", invalid_value=data.visit_type.value)
            if data.visit_type == VisitType.ADDITIONAL and not station.allow_additional_visit:
                raise ValidationError(
                    "Additional visits are not allowed for this station",
                    field="visit_type", invalid_value=data.visit_type.value)

            values = data.model_dump()
            if not values["committee"]:
                values["committee"] = station.committee
            visit_id = await record_store.insert_visit(db, values)

            if any(v.checks for v in visits):
                await get_orchestrator().apply_station_update(db, station.id, {})
            else:
                await get_orchestrator().apply_station_update(
                    db, station.id, {"status": StationStatus.SCHEDULED})
            visit = await record_store.get_visit(db, visit_id)

    logger.info(f"Scheduled {visit.visit_type.value} visit {visit.id} for station "
                f"{visit.station_id} on {visit.visit_date.date()}")
    return visit


async def get_visit(visit_id: int) -> Visit:
    async with get_db() as db:
        return await record_store.get_visit(db, visit_id)


async def list_visits_by_station(station_id: int) -> List[Visit]:
    async with get_db() as db:
        await record_store.get_station(db, station_id)
        return await record_store.list_visits_by_station(db, station_id)
