"""
Concrete Station Approval - Fee Calculator
Version: 1.0.0

Changelog:
v1.0.0 (2026-10-05): Initial approval fee formula

Approval fees (EGP):
    distance cost       = distance_km * FEE_DISTANCE_RATE
    mixers cost         = mixers_count * FEE_MIXER_RATE
    accommodation cost  = FEE_ACCOMMODATION_COST when the committee stays at
                          the center and the station is farther than
                          FEE_ACCOMMODATION_MIN_DISTANCE_KM
    additional report   = FEE_ADDITIONAL_REPORT_RATE of the above for
                          bilingual reports
    tax                 = FEE_TAX_RATE of the subtotal
"""

from dataclasses import dataclass, asdict
from typing import Optional

from config import settings
from models.station import ReportLanguage, AccommodationType


@dataclass(frozen=True)
class FeeBreakdown:
    distance_cost: float
    mixers_cost: float
    accommodation_cost: float
    additional_report_cost: float
    subtotal: float
    tax: float
    total: float

    def to_dict(self) -> dict:
        return asdict(self)


def calculate_fees(distance: float, mixers_count: int,
                   report_language: ReportLanguage,
                   accommodation: Optional[AccommodationType] = None) -> FeeBreakdown:
    if distance < 0:
        raise ValueError(f"Distance cannot be negative: {distance}")
    if mixers_count < 0:
        raise ValueError(f"Mixers count cannot be negative: {mixers_count}")

    distance_cost = distance * settings.FEE_DISTANCE_RATE
    mixers_cost = mixers_count * settings.FEE_MIXER_RATE

    accommodation_cost = 0.0
    if (distance > settings.FEE_ACCOMMODATION_MIN_DISTANCE_KM
            and accommodation == AccommodationType.CENTER):
        accommodation_cost = settings.FEE_ACCOMMODATION_COST

    base = distance_cost + mixers_cost + accommodation_cost
    additional_report_cost = 0.0
    if report_language == ReportLanguage.BOTH:
        additional_report_cost = base * settings.FEE_ADDITIONAL_REPORT_RATE

    subtotal = base + additional_report_cost
    tax = subtotal * settings.FEE_TAX_RATE

    return FeeBreakdown(
        distance_cost=distance_cost,
        mixers_cost=mixers_cost,
        accommodation_cost=accommodation_cost,
        additional_report_cost=additional_report_cost,
        subtotal=subtotal,
        tax=tax,
        total=subtotal + tax,
    )


def station_fees(distance: float, mixers_count: int,
                 report_language: ReportLanguage,
                 accommodation: Optional[AccommodationType] = None) -> int:
    """Rounded total stored on the station record"""
    return round(calculate_fees(distance, mixers_count, report_language, accommodation).total)
