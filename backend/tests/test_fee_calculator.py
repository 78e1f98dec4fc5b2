"""Approval fee formula"""

import pytest

from models.station import ReportLanguage, AccommodationType
from services.fee_calculator import calculate_fees, station_fees


def test_basic_fees():
    fees = calculate_fees(100, 2, ReportLanguage.ARABIC)
    assert fees.distance_cost == 1500
    assert fees.mixers_cost == 2000
    assert fees.accommodation_cost == 0
    assert fees.additional_report_cost == 0
    assert fees.subtotal == 3500
    assert fees.tax == pytest.approx(490)
    assert fees.total == pytest.approx(3990)


def test_accommodation_only_far_and_at_center():
    far_center = calculate_fees(250, 1, ReportLanguage.ENGLISH, AccommodationType.CENTER)
    far_station = calculate_fees(250, 1, ReportLanguage.ENGLISH, AccommodationType.STATION)
    near_center = calculate_fees(200, 1, ReportLanguage.ENGLISH, AccommodationType.CENTER)
    assert far_center.accommodation_cost == 1000
    assert far_station.accommodation_cost == 0
    assert near_center.accommodation_cost == 0


def test_bilingual_report_surcharge():
    fees = calculate_fees(300, 1, ReportLanguage.BOTH, AccommodationType.CENTER)
    # 4500 + 1000 + 1000
    assert fees.additional_report_cost == pytest.approx(325)
    assert fees.subtotal == pytest.approx(6825)
    assert fees.total == pytest.approx(6825 * 1.14)


def test_station_fees_rounded():
    assert station_fees(100, 2, ReportLanguage.ARABIC) == 3990
    assert isinstance(station_fees(33, 1, ReportLanguage.BOTH), int)


def test_negative_distance_rejected():
    with pytest.raises(ValueError):
        calculate_fees(-1, 1, ReportLanguage.ARABIC)


def test_rates_from_settings(monkeypatch):
    from config import settings
    monkeypatch.setattr(settings, "FEE_TAX_RATE", 0.0)
    assert calculate_fees(10, 1, ReportLanguage.ARABIC).total == 1150
