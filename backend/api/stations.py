"""
Concrete Station Approval - Station API
Version: 1.2.0

Changelog:
v1.2.0 (2026-10-12): PATCH recomputes the derived status; recalculate-status
                      and results endpoints
v1.1.0 (2026-10-05): Payment confirmation, committee assignment, documents
v1.0.0 (2026-09-28): Initial station CRUD
"""

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse
from pydantic import BaseModel
from typing import List, Literal, Optional
import logging

from api.http_errors import to_http
from errors import StationApprovalError
from models.station import Station, StationCreate, StationUpdate, CommitteeAssignment
from models.visit import Visit
from models.payment import Payment, PaymentConfirmation
from services import station_registry, station_orchestrator, document_issuer

router = APIRouter(prefix="/stations", tags=["stations"])
logger = logging.getLogger(__name__)


class OperationLetterRequest(BaseModel):
    language: Literal["ar", "en"] = "ar"


@router.get("", response_model=List[Station])
async def list_stations(status: Optional[str] = None, search: Optional[str] = None,
                        limit: int = 100):
    """List stations, optionally filtered by status or search term"""
    return await station_registry.list_stations(status=status, search=search, limit=limit)


@router.get("/{station_id}", response_model=Station)
async def get_station(station_id: int):
    try:
        return await station_registry.get_station(station_id)
    except StationApprovalError as e:
        raise to_http(e)


@router.post("", response_model=Station, status_code=201)
async def create_station(data: StationCreate):
    """Register a new approval request"""
    try:
        return await station_registry.create_station(data)
    except StationApprovalError as e:
        raise to_http(e)
    except Exception as e:
        logger.error(f"Failed to create station: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.patch("/{station_id}", response_model=Station)
async def update_station(station_id: int, data: StationUpdate):
    """
    Partial update. The station status is re-derived from its visits unless
    the body carries an explicit status.
    """
    try:
        return await station_orchestrator.update_station(station_id, data)
    except StationApprovalError as e:
        raise to_http(e)
    except Exception as e:
        logger.error(f"Failed to update station {station_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("/{station_id}")
async def delete_station(station_id: int):
    try:
        await station_registry.delete_station(station_id)
        return {"success": True, "station_id": station_id}
    except StationApprovalError as e:
        raise to_http(e)


@router.post("/{station_id}/recalculate-status", response_model=Station)
async def recalculate_status(station_id: int):
    """Re-run the status derivation over all visits"""
    try:
        return await station_orchestrator.recalculate_station_status(station_id)
    except StationApprovalError as e:
        raise to_http(e)
    except Exception as e:
        logger.error(f"Failed to recalculate station {station_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/{station_id}/results")
async def get_station_results(station_id: int):
    """Aggregated test item outcomes and the status they derive"""
    try:
        return await station_orchestrator.get_station_results(station_id)
    except StationApprovalError as e:
        raise to_http(e)


@router.post("/{station_id}/confirm-payment")
async def confirm_payment(station_id: int, data: Optional[PaymentConfirmation] = None):
    try:
        return await station_registry.confirm_payment(station_id, data)
    except StationApprovalError as e:
        raise to_http(e)
    except Exception as e:
        logger.error(f"Failed to confirm payment for station {station_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/{station_id}/assign-committee", response_model=Station)
async def assign_committee(station_id: int, data: CommitteeAssignment):
    try:
        return await station_registry.assign_committee(station_id, data)
    except StationApprovalError as e:
        raise to_http(e)
    except Exception as e:
        logger.error(f"Failed to assign committee to station {station_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/{station_id}/visits", response_model=List[Visit])
async def list_station_visits(station_id: int):
    try:
        return await station_registry.list_visits_by_station(station_id)
    except StationApprovalError as e:
        raise to_http(e)


@router.get("/{station_id}/payments", response_model=List[Payment])
async def list_station_payments(station_id: int):
    try:
        return await station_registry.list_payments_by_station(station_id)
    except StationApprovalError as e:
        raise to_http(e)


@router.post("/{station_id}/generate-approval-certificate")
async def generate_approval_certificate(station_id: int):
    """Issue the approval certificate PDF (approved stations only)"""
    try:
        pdf_path = await document_issuer.generate_approval_certificate(station_id)
    except StationApprovalError as e:
        raise to_http(e)
    except Exception as e:
        logger.error(f"Failed to issue certificate for station {station_id}: {e}",
                     exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    return FileResponse(str(pdf_path), media_type="application/pdf",
                        filename=pdf_path.name)


@router.post("/{station_id}/generate-operation-letter")
async def generate_operation_letter(station_id: int,
                                    data: Optional[OperationLetterRequest] = None):
    """Issue the operation letter PDF in Arabic or English"""
    language = data.language if data else "ar"
    try:
        pdf_path = await document_issuer.generate_operation_letter(station_id, language)
    except StationApprovalError as e:
        raise to_http(e)
    except Exception as e:
        logger.error(f"Failed to issue operation letter for station {station_id}: {e}",
                     exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    return FileResponse(str(pdf_path), media_type="application/pdf",
                        filename=pdf_path.name)
