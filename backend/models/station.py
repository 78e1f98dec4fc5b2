"""
Concrete Station Approval - Station Data Models
Version: 1.2.0

Changelog:
v1.2.0 (2026-10-12): Derived test statuses stored with their Arabic labels;
                      allow_additional_visit flag
v1.1.0 (2026-10-05): Committee assignment and payment confirmation payloads
v1.0.0 (2026-09-28): Initial station models
"""

from pydantic import BaseModel, ConfigDict, Field
from enum import Enum
from typing import Optional, List
from datetime import datetime

from .visit import CommitteeMember


class StationStatus(str, Enum):
    """Station lifecycle status"""
    # Set explicitly by workflow actions
    PENDING_PAYMENT = "pending-payment"
    PAYMENT_CONFIRMED = "payment-confirmed"
    COMMITTEE_ASSIGNED = "committee-assigned"
    SCHEDULED = "scheduled"
    VISITED = "visited"
    PENDING_DOCUMENTS = "pending-documents"

    # Derived from visit checks
    UNDER_TESTING = "تحت الإختبار"
    SOME_TESTS_FAILED = "هناك فشل في بعض التجارب"
    OPERATION_LETTER_ELIGIBLE = "يمكن للمحطة استخراج خطاب تشغيل"
    APPROVED = "تم اعتماد المحطة"


STATION_STATUS_NAMES = {
    StationStatus.PENDING_PAYMENT: "بانتظار الدفع",
    StationStatus.PAYMENT_CONFIRMED: "تم الموافقة على الطلب",
    StationStatus.COMMITTEE_ASSIGNED: "تم تعيين اللجنة",
    StationStatus.SCHEDULED: "تمت جدولة الزيارة",
    StationStatus.VISITED: "تمت الزيارة",
    StationStatus.PENDING_DOCUMENTS: "بانتظار المستندات",
    StationStatus.UNDER_TESTING: "تحت الإختبار",
    StationStatus.SOME_TESTS_FAILED: "هناك فشل في بعض التجارب",
    StationStatus.OPERATION_LETTER_ELIGIBLE: "يمكن للمحطة استخراج خطاب تشغيل",
    StationStatus.APPROVED: "تم اعتماد المحطة",
}


class ApprovalType(str, Enum):
    FIRST_TIME = "first-time"
    RENEWAL = "renewal"


class MixingType(str, Enum):
    NORMAL = "normal"
    DRY = "dry"


class ReportLanguage(str, Enum):
    ARABIC = "arabic"
    ENGLISH = "english"
    BOTH = "both"


class AccommodationType(str, Enum):
    STATION = "station"
    CENTER = "center"


class Station(BaseModel):
    """Complete station record"""
    id: int
    code: str
    name: str
    owner: str
    tax_number: str
    address: str
    city_district: str
    location: Optional[str] = None
    distance: int
    approval_type: ApprovalType
    certificate_expiry_date: Optional[datetime] = None
    mixers_count: int
    max_capacity: int
    mixing_type: MixingType
    report_language: ReportLanguage
    representative_name: str
    representative_phone: str
    representative_id: str
    quality_manager_name: str
    quality_manager_phone: str
    accommodation: Optional[AccommodationType] = None
    status: StationStatus
    allow_additional_visit: bool = False
    committee: Optional[List[CommitteeMember]] = None
    fees: int
    request_date: datetime
    approval_start_date: Optional[datetime] = None
    approval_end_date: Optional[datetime] = None
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class StationCreate(BaseModel):
    """Registration request for a new station"""
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1)
    owner: str = Field(..., min_length=1)
    tax_number: str
    address: str
    city_district: str
    location: Optional[str] = Field(None, description="Map coordinates 'lat,lng'")
    distance: int = Field(..., ge=0, description="Distance from the center in km")
    approval_type: ApprovalType
    certificate_expiry_date: Optional[datetime] = None
    mixers_count: int = Field(..., ge=1)
    max_capacity: int = Field(..., ge=0, description="Max capacity in m3/h")
    mixing_type: MixingType
    report_language: ReportLanguage
    representative_name: str
    representative_phone: str
    representative_id: str
    quality_manager_name: str
    quality_manager_phone: str
    accommodation: Optional[AccommodationType] = None
    fees: Optional[int] = Field(None, ge=0, description="Computed from the fee formula when omitted")
    created_by: Optional[str] = None


class StationUpdate(BaseModel):
    """
    Partial station update. Only fields that were sent are written.
    A non-null ``status`` is an explicit override of the derived status.
    """
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    owner: Optional[str] = None
    tax_number: Optional[str] = None
    address: Optional[str] = None
    city_district: Optional[str] = None
    location: Optional[str] = None
    distance: Optional[int] = Field(None, ge=0)
    approval_type: Optional[ApprovalType] = None
    certificate_expiry_date: Optional[datetime] = None
    mixers_count: Optional[int] = Field(None, ge=1)
    max_capacity: Optional[int] = Field(None, ge=0)
    mixing_type: Optional[MixingType] = None
    report_language: Optional[ReportLanguage] = None
    representative_name: Optional[str] = None
    representative_phone: Optional[str] = None
    representative_id: Optional[str] = None
    quality_manager_name: Optional[str] = None
    quality_manager_phone: Optional[str] = None
    accommodation: Optional[AccommodationType] = None
    status: Optional[StationStatus] = None
    committee: Optional[List[CommitteeMember]] = None
    fees: Optional[int] = Field(None, ge=0)
    approval_start_date: Optional[datetime] = None
    approval_end_date: Optional[datetime] = None


class CommitteeAssignment(BaseModel):
    """Committee members for a station's inspection visits"""
    chairman: str = Field(..., min_length=1)
    engineer: str = Field(..., min_length=1)
    secretary: str = Field(..., min_length=1)

    def members(self) -> List[CommitteeMember]:
        return [
            CommitteeMember(name=self.chairman, role="chairman"),
            CommitteeMember(name=self.engineer, role="engineer"),
            CommitteeMember(name=self.secretary, role="secretary"),
        ]
