"""
Concrete Station Approval - Visit Data Models
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): VisitUpdate rejects unknown fields; checks validated
                      against the fixed test item list
v1.0.0 (2026-09-28): Initial visit models
"""

from pydantic import BaseModel, ConfigDict, Field
from enum import Enum
from typing import Optional, List
from datetime import datetime


class TestItem(str, Enum):
    """Fixed test items checked during inspection visits (order matters)"""
    __test__ = False  # not a pytest class

    SCALE_CALIBRATION = "scale-calibration"
    PRESS_CALIBRATION = "press-calibration"
    UNIFORMITY_TESTS = "uniformity-tests"
    CHLORIDE_SULFATE_TESTS = "chloride-sulfate-tests"
    WATER_CHEMICAL_TESTS = "water-chemical-tests"
    COMPRESSION_7DAY = "7day-compression-strength"
    COMPRESSION_28DAY = "28day-compression-strength"


# Baseline-and-retest items
FIRST_SIX_ITEMS = (
    TestItem.SCALE_CALIBRATION,
    TestItem.PRESS_CALIBRATION,
    TestItem.UNIFORMITY_TESTS,
    TestItem.CHLORIDE_SULFATE_TESTS,
    TestItem.WATER_CHEMICAL_TESTS,
    TestItem.COMPRESSION_7DAY,
)

# Always-latest item
SEVENTH_ITEM = TestItem.COMPRESSION_28DAY

TEST_ITEM_LABELS = {
    TestItem.SCALE_CALIBRATION: "الانتهاء من معايرة الموازين",
    TestItem.PRESS_CALIBRATION: "الانتهاء من معايرة ماكينة اختبار الضغط",
    TestItem.UNIFORMITY_TESTS: "الانتهاء من اختبارات التجانس",
    TestItem.CHLORIDE_SULFATE_TESTS: "اختبارات محتوى الكلوريدات والكبريتات تفي بحدود الكود المصري",
    TestItem.WATER_CHEMICAL_TESTS: "الاختبارات الكيميائية للماء تفي بحدود الكود المصري",
    TestItem.COMPRESSION_7DAY: "مقاومة الضغط الخرسانة عند عمر 7 أيام تفي بالمقاومة المطلوبة",
    TestItem.COMPRESSION_28DAY: "مقاومة الضغط الخرسانة عند عمر 28 أيام تفي بالمقاومة المطلوبة",
}


class CheckOutcome(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    PENDING = "pending"


class VisitType(str, Enum):
    FIRST = "first"
    SECOND = "second"
    ADDITIONAL = "additional"


class VisitStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class CommitteeMember(BaseModel):
    name: str = Field(..., min_length=1)
    role: str = Field(..., min_length=1)


class VisitCheck(BaseModel):
    """Outcome of one test item within one visit"""
    item_id: TestItem
    status: CheckOutcome
    notes: str = ""


class Visit(BaseModel):
    """Inspection visit record"""
    id: int
    station_id: int
    visit_type: VisitType
    visit_date: datetime
    visit_time: str
    status: VisitStatus = VisitStatus.SCHEDULED
    committee: List[CommitteeMember] = Field(default_factory=list)
    checks: Optional[List[VisitCheck]] = None
    report: Optional[str] = None
    certificate_issued: bool = False
    certificate_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class VisitCreate(BaseModel):
    """Schedule a visit for a station"""
    model_config = ConfigDict(extra="forbid")

    station_id: int = Field(..., ge=1)
    visit_type: VisitType
    visit_date: datetime
    visit_time: str = "09:00"
    committee: List[CommitteeMember] = Field(default_factory=list)


class VisitUpdate(BaseModel):
    """Partial visit update; only fields that were sent are applied"""
    model_config = ConfigDict(extra="forbid")

    visit_date: Optional[datetime] = None
    visit_time: Optional[str] = None
    status: Optional[VisitStatus] = None
    committee: Optional[List[CommitteeMember]] = None
    checks: Optional[List[VisitCheck]] = None
    report: Optional[str] = None
    certificate_issued: Optional[bool] = None
    certificate_url: Optional[str] = None
