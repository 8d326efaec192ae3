from datetime import datetime, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from services.report_service import ReportService

from conftest import GROCERIES, RESTAURANTS, SALARY, make_tx


def test_pairing_drops_unknown_categories():
    txs = [make_tx(1, category_id=GROCERIES.id), make_tx(2, category_id=SALARY.id)]
    paired = ReportService.pair_with_categories(txs, [GROCERIES, RESTAURANTS])
    assert paired == [(txs[0], GROCERIES)]


def test_total_and_percentage():
    items = [(make_tx(1, "12.5"), GROCERIES), (make_tx(2, "87.5"), GROCERIES)]
    total = ReportService.total(items)
    assert total == Decimal("100.0")
    assert ReportService.percentage(Decimal("12.5"), total) == "12.5%"
    assert ReportService.percentage(Decimal("1"), Decimal("3")) == "33.3%"
    assert ReportService.percentage(Decimal("5"), Decimal("0")) == "0%"
    assert ReportService.total([]) == Decimal("0")


def test_sort_items():
    early = (make_tx(1, "50", when=datetime(2025, 7, 1, tzinfo=timezone.utc)), GROCERIES)
    late = (make_tx(2, "5", when=datetime(2025, 7, 2, tzinfo=timezone.utc)), GROCERIES)
    assert ReportService.sort_items([early, late], "date") == [late, early]
    assert ReportService.sort_items([late, early], "amount") == [early, late]
    with pytest.raises(ValueError):
        ReportService.sort_items([early], "name")


def test_clamp_period_moves_the_other_bound():
    tz = ZoneInfo("Europe/Moscow")
    report = ReportService(tz)
    start = datetime(2025, 7, 20, 15, tzinfo=tz)
    end = datetime(2025, 7, 10, 8, tzinfo=tz)

    assert report.clamp_period(start, end, moved="start") == (
        datetime(2025, 7, 20, tzinfo=tz), datetime(2025, 7, 20, 23, 59, tzinfo=tz),
    )
    assert report.clamp_period(start, end, moved="end") == (
        datetime(2025, 7, 10, tzinfo=tz), datetime(2025, 7, 10, 23, 59, tzinfo=tz),
    )


def test_clamp_period_snaps_valid_range_to_whole_days():
    report = ReportService(timezone.utc)
    start, end = report.clamp_period(
        datetime(2025, 7, 1, 13, tzinfo=timezone.utc), datetime(2025, 7, 3, 1, tzinfo=timezone.utc)
    )
    assert start == datetime(2025, 7, 1, tzinfo=timezone.utc)
    assert end == datetime(2025, 7, 3, 23, 59, tzinfo=timezone.utc)
