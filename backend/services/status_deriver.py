"""
Concrete Station Approval - Station Status Deriver
Version: 1.0.0

Changelog:
v1.0.0 (2026-09-28): Initial decision table

Maps aggregated test outcomes to a station status:

1. Any of the first six failed        -> some tests failed, additional visit allowed
2. All first six passed, 28-day passed -> approved, no additional visit
   All first six passed, otherwise     -> operation letter eligible, allowed
3. Anything else (some still pending)  -> under testing, allowed
"""

from dataclasses import dataclass

from models.station import StationStatus
from models.visit import CheckOutcome
from services.visit_aggregator import AggregatedResults


@dataclass(frozen=True)
class StatusDecision:
    status: StationStatus
    allow_additional_visit: bool


def derive_status(results: AggregatedResults) -> StatusDecision:
    outcomes = [r.status for r in results.first_six.values()]

    if any(o == CheckOutcome.FAILED for o in outcomes):
        return StatusDecision(StationStatus.SOME_TESTS_FAILED, True)

    if outcomes and all(o == CheckOutcome.PASSED for o in outcomes):
        seventh = results.seventh
        if seventh is not None and seventh.status == CheckOutcome.PASSED:
            return StatusDecision(StationStatus.APPROVED, False)
        return StatusDecision(StationStatus.OPERATION_LETTER_ELIGIBLE, True)

    return StatusDecision(StationStatus.UNDER_TESTING, True)
