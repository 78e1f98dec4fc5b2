"""
Concrete Station Approval - Service Error Mapping
Version: 1.0.0

Changelog:
v1.0.0 (2026-10-05): Initial service exception -> HTTP status mapping
"""

from fastapi import HTTPException

from errors import StationApprovalError, NotFound, ValidationError, TransactionConflict

STATUS_CODES = {
    NotFound: 404,
    ValidationError: 400,
    TransactionConflict: 409,
}


def to_http(error: StationApprovalError) -> HTTPException:
    for error_type, status_code in STATUS_CODES.items():
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=str(error))
    return HTTPException(status_code=500, detail=str(error))
