"""
Concrete Station Approval - Settings API
Version: 1.0.0

Changelog:
v1.0.0 (2026-10-05): Initial key/value settings endpoints
"""

from fastapi import APIRouter

from api.http_errors import to_http
from errors import StationApprovalError
from models.config import ConfigKey, ConfigUpdate
from services import settings_store

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("/{key}", response_model=ConfigKey)
async def get_setting(key: str):
    try:
        return await settings_store.get_setting(key)
    except StationApprovalError as e:
        raise to_http(e)


@router.post("", response_model=ConfigKey)
async def set_setting(data: ConfigUpdate):
    """Create or update a setting"""
    try:
        return await settings_store.set_setting(data.key, data.value)
    except StationApprovalError as e:
        raise to_http(e)
