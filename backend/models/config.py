"""
Concrete Station Approval - Settings Models
Version: 1.0.0

Changelog:
v1.0.0 (2026-10-05): Initial key/value settings models
"""

from pydantic import BaseModel, Field
from typing import Any, Optional
from datetime import datetime


class ConfigKey(BaseModel):
    """Configuration key-value pair"""
    id: Optional[int] = None
    key: str = Field(..., description="Configuration key")
    value: Any = Field(..., description="Configuration value (any JSON value)")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")


class ConfigUpdate(BaseModel):
    """Configuration create/update request"""
    key: str = Field(..., min_length=1, description="Configuration key")
    value: Any = Field(..., description="Configuration value (any JSON value)")
