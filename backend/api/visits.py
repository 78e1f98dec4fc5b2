"""
Concrete Station Approval - Visit API
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): Check submission re-derives the station status
v1.0.0 (2026-09-28): Initial visit scheduling endpoints
"""

from fastapi import APIRouter, HTTPException
import logging

from api.http_errors import to_http
from errors import StationApprovalError
from models.visit import Visit, VisitCreate, VisitUpdate
from services import station_registry, station_orchestrator

router = APIRouter(prefix="/visits", tags=["visits"])
logger = logging.getLogger(__name__)


@router.post("", response_model=Visit, status_code=201)
async def schedule_visit(data: VisitCreate):
    try:
        return await station_registry.schedule_visit(data)
    except StationApprovalError as e:
        raise to_http(e)
    except Exception as e:
        logger.error(f"Failed to schedule visit: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/{visit_id}", response_model=Visit)
async def get_visit(visit_id: int):
    try:
        return await station_registry.get_visit(visit_id)
    except StationApprovalError as e:
        raise to_http(e)


@router.patch("/{visit_id}", response_model=Visit)
async def update_visit(visit_id: int, data: VisitUpdate):
    """Partial update; submitting checks or completing the visit updates the station status"""
    try:
        return await station_orchestrator.update_visit(visit_id, data)
    except StationApprovalError as e:
        raise to_http(e)
    except Exception as e:
        logger.error(f"Failed to update visit {visit_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("/{visit_id}")
async def delete_visit(visit_id: int):
    try:
        await station_orchestrator.delete_visit(visit_id)
        return {"success": True, "visit_id": visit_id}
    except StationApprovalError as e:
        raise to_http(e)
