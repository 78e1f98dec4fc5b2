"""Aggregation of per-item outcomes across a station's visits"""

from models.visit import VisitType, TestItem, SEVENTH_ITEM, FIRST_SIX_ITEMS
from services.visit_aggregator import aggregate_visits, aggregate_first_six, sort_visits

from conftest import make_visit, six, P, F, PEND


def test_no_visits_everything_pending():
    results = aggregate_visits([])
    assert all(r.status == PEND for r in results.first_six.values())
    assert results.seventh is None
    assert set(results.first_six) == set(FIRST_SIX_ITEMS)


def test_first_visit_sets_baseline():
    visit = make_visit(1, VisitType.FIRST, 1, six(P, PRESS_CALIBRATION=F))
    results = aggregate_visits([visit])
    assert results.outcome(TestItem.SCALE_CALIBRATION) == P
    assert results.outcome(TestItem.PRESS_CALIBRATION) == F
    assert results.first_six[TestItem.PRESS_CALIBRATION].source_visit_id == 1


def test_failed_item_replaced_by_retest():
    first = make_visit(1, VisitType.FIRST, 1, six(P, SCALE_CALIBRATION=F))
    retest = make_visit(2, VisitType.ADDITIONAL, 10, {TestItem.SCALE_CALIBRATION: P})
    results = aggregate_visits([first, retest])
    assert results.outcome(TestItem.SCALE_CALIBRATION) == P
    assert results.first_six[TestItem.SCALE_CALIBRATION].source_visit_id == 2


def test_passed_item_never_replaced():
    first = make_visit(1, VisitType.FIRST, 1, six(P))
    later = make_visit(2, VisitType.SECOND, 10, six(F))
    results = aggregate_visits([first, later])
    assert all(r.status == P for r in results.first_six.values())


def test_pending_baseline_not_replaced_by_later_visit():
    first = make_visit(1, VisitType.FIRST, 1, six(P, UNIFORMITY_TESTS=PEND))
    later = make_visit(2, VisitType.SECOND, 10, {TestItem.UNIFORMITY_TESTS: P})
    assert aggregate_visits([first, later]).outcome(TestItem.UNIFORMITY_TESTS) == PEND


def test_retest_can_fail_again():
    first = make_visit(1, VisitType.FIRST, 1, six(P, WATER_CHEMICAL_TESTS=F))
    retest = make_visit(2, VisitType.ADDITIONAL, 5, {TestItem.WATER_CHEMICAL_TESTS: F})
    fixed = make_visit(3, VisitType.ADDITIONAL, 9, {TestItem.WATER_CHEMICAL_TESTS: P})
    results = aggregate_visits([first, retest, fixed])
    assert results.outcome(TestItem.WATER_CHEMICAL_TESTS) == P
    assert results.first_six[TestItem.WATER_CHEMICAL_TESTS].source_visit_id == 3


def test_without_first_visit_items_stay_pending():
    second = make_visit(2, VisitType.SECOND, 10, six(P))
    results = aggregate_visits([second])
    assert all(r.status == PEND for r in results.first_six.values())


def test_visit_without_checks_ignored():
    first = make_visit(1, VisitType.FIRST, 1, six(P))
    scheduled = make_visit(2, VisitType.SECOND, 10, None)
    assert aggregate_visits([first, scheduled]).to_dict() == aggregate_visits([first]).to_dict()


def test_input_order_does_not_matter():
    first = make_visit(1, VisitType.FIRST, 1, six(P, SCALE_CALIBRATION=F))
    retest = make_visit(2, VisitType.ADDITIONAL, 10, {TestItem.SCALE_CALIBRATION: P})
    assert (aggregate_visits([retest, first]).to_dict()
            == aggregate_visits([first, retest]).to_dict())


def test_sort_ties_broken_by_creation_time():
    a = make_visit(1, VisitType.FIRST, 5, None, created_minute=30)
    b = make_visit(2, VisitType.SECOND, 5, None, created_minute=10)
    assert [v.id for v in sort_visits([a, b])] == [2, 1]


def test_first_six_ignores_seventh_item():
    first = make_visit(1, VisitType.FIRST, 1, {SEVENTH_ITEM: F})
    results = aggregate_first_six([first])
    assert SEVENTH_ITEM not in results


def test_seventh_takes_latest_visit():
    first = make_visit(1, VisitType.FIRST, 1, {**six(P), SEVENTH_ITEM: P})
    later = make_visit(2, VisitType.ADDITIONAL, 20, {SEVENTH_ITEM: F})
    results = aggregate_visits([first, later])
    assert results.outcome(SEVENTH_ITEM) == F
    assert results.seventh.source_visit_id == 2


def test_seventh_failed_then_passed():
    first = make_visit(1, VisitType.FIRST, 1, {**six(P), SEVENTH_ITEM: F})
    later = make_visit(2, VisitType.SECOND, 28, {SEVENTH_ITEM: P})
    assert aggregate_visits([later, first]).outcome(SEVENTH_ITEM) == P


def test_seventh_recorded_without_first_visit():
    second = make_visit(2, VisitType.SECOND, 28, {SEVENTH_ITEM: P})
    assert aggregate_visits([second]).outcome(SEVENTH_ITEM) == P


def test_seventh_same_day_goes_to_later_created():
    a = make_visit(1, VisitType.SECOND, 28, {SEVENTH_ITEM: F}, created_minute=5)
    b = make_visit(2, VisitType.ADDITIONAL, 28, {SEVENTH_ITEM: P}, created_minute=40)
    assert aggregate_visits([b, a]).seventh.source_visit_id == 2


def test_to_dict_lists_all_seven_items():
    items = aggregate_visits([]).to_dict()
    assert len(items) == 7
    assert items[SEVENTH_ITEM.value] is None
    assert items["scale-calibration"]["status"] == "pending"
