"""
Concrete Station Approval - Visit Aggregator
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): 28-day compression strength split into its own
                      always-latest pass
v1.0.0 (2026-09-28): Initial aggregation of per-item outcomes across visits

Reduces a station's visit history to one authoritative outcome per test item.

Two rules apply and are kept in separate functions:

- First six items (baseline and retest): the first-type visit sets the
  baseline. A later visit may only replace an outcome that is currently
  ``failed``. A ``passed`` or ``pending`` baseline stays put. Without a
  first-type visit these items remain ``pending``.
- 28-day compression strength (always latest): the visit with the latest
  visit_date that recorded the item wins, whatever its type.

Pure functions, no I/O.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from models.visit import (
    Visit, VisitType, CheckOutcome, TestItem, FIRST_SIX_ITEMS, SEVENTH_ITEM,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ItemResult:
    """Authoritative outcome of one test item and the visit it came from"""
    status: CheckOutcome
    source_visit_id: Optional[int] = None
    source_visit_date: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "source_visit_id": self.source_visit_id,
            "source_visit_date": (self.source_visit_date.isoformat()
                                  if self.source_visit_date else None),
        }


@dataclass
class AggregatedResults:
    """Per-item outcomes for a station; seventh is None if never recorded"""
    first_six: Dict[TestItem, ItemResult] = field(default_factory=dict)
    seventh: Optional[ItemResult] = None

    def outcome(self, item: TestItem) -> Optional[CheckOutcome]:
        if item == SEVENTH_ITEM:
            return self.seventh.status if self.seventh else None
        return self.first_six[item].status

    def to_dict(self) -> dict:
        items = {item.value: result.to_dict() for item, result in self.first_six.items()}
        items[SEVENTH_ITEM.value] = self.seventh.to_dict() if self.seventh else None
        return items


def sort_visits(visits: Iterable[Visit]) -> List[Visit]:
    """Chronological order: visit_date, then created_at"""
    return sorted(visits, key=lambda v: (v.visit_date, v.created_at))


def aggregate_first_six(visits: List[Visit]) -> Dict[TestItem, ItemResult]:
    """Baseline-and-retest rule. ``visits`` must be in chronological order."""
    results = {item: ItemResult(CheckOutcome.PENDING) for item in FIRST_SIX_ITEMS}

    for visit in visits:
        if not visit.checks:
            continue
        is_first_visit = visit.visit_type == VisitType.FIRST

        for check in visit.checks:
            if check.item_id not in results:
                continue
            stored = results[check.item_id]
            if is_first_visit or stored.status == CheckOutcome.FAILED:
                results[check.item_id] = ItemResult(
                    status=check.status,
                    source_visit_id=visit.id,
                    source_visit_date=visit.visit_date,
                )

    return results


def aggregate_seventh(visits: List[Visit]) -> Optional[ItemResult]:
    """Always-latest rule. Ties on visit_date go to the later visit in order."""
    latest: Optional[ItemResult] = None

    for visit in visits:
        if not visit.checks:
            continue
        for check in visit.checks:
            if check.item_id != SEVENTH_ITEM:
                continue
            if latest is None or visit.visit_date >= latest.source_visit_date:
                latest = ItemResult(
                    status=check.status,
                    source_visit_id=visit.id,
                    source_visit_date=visit.visit_date,
                )

    return latest


def aggregate_visits(visits: Iterable[Visit]) -> AggregatedResults:
    """Aggregate all visits of one station into per-item outcomes"""
    ordered = sort_visits(visits)
    results = AggregatedResults(
        first_six=aggregate_first_six(ordered),
        seventh=aggregate_seventh(ordered),
    )
    logger.debug(f"Aggregated {len(ordered)} visits: {results.to_dict()}")
    return results
