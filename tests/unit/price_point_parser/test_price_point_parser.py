from datetime import date
from decimal import Decimal

import pytest

from pricesync.data_models import ChangeType
from pricesync.exceptions import PayloadValidationError, ValidationError
from pricesync.price_point_parser import (
    ChartBucketParser,
    PricePointParser,
    latest_per_instrument,
    to_date,
    to_decimal,
)


def _row(**overrides):
    row = {
        "metal_code": "CU",
        "metal_name_kr": "구리",
        "price_krw_per_kg": 12345.678,
        "change_percent": 1.234,
        "change_type": "positive",
        "price_date": "2024-01-02",
    }
    row.update(overrides)
    return row


def test_to_decimal_rounds_half_up():
    assert to_decimal("1.005") == Decimal("1.01")
    assert to_decimal(2) == Decimal("2.00")
    with pytest.raises(ValidationError):
        to_decimal(float("nan"))
    with pytest.raises(ValidationError):
        to_decimal("abc")
    with pytest.raises(ValidationError):
        to_decimal(True)


def test_to_date_accepts_plain_dates_and_timestamps():
    assert to_date("2024-02-29") == date(2024, 2, 29)
    assert to_date("2024-02-29T10:00:00Z") == date(2024, 2, 29)
    with pytest.raises(ValidationError):
        to_date("")


def test_parse_row_builds_price_point():
    point = PricePointParser.parse_row(_row())

    assert point.instrument_code == "CU"
    assert point.observed_date == date(2024, 1, 2)
    assert point.price_minor == Decimal("12345.68")
    assert point.change_percent == Decimal("1.23")
    assert point.change_type is ChangeType.POSITIVE


def test_parse_rows_skips_invalid_rows(caplog):
    payload = [_row(), _row(price_krw_per_kg=0), _row(price_date=None), _row(metal_code="AL")]

    points = PricePointParser.parse_rows(payload, context="test")

    assert [point.instrument_code for point in points] == ["CU", "AL"]
    assert "Skipping invalid test row" in caplog.text


def test_parse_rows_rejects_non_list_payload():
    with pytest.raises(PayloadValidationError):
        PricePointParser.parse_rows({"rows": []}, context="test")
    assert PricePointParser.parse_rows(None, context="test") == []


def test_chart_bucket_parser_fills_missing_extremes_and_sorts():
    payload = [
        {"period_start": "2024-01-08", "period_label": "01/08", "avg_price": "110", "data_points": 5},
        {
            "period_start": "2024-01-01",
            "period_label": "01/01",
            "avg_price": "100",
            "min_price": "95",
            "max_price": "104",
            "change_percent": None,
            "data_points": 5,
        },
    ]

    buckets = ChartBucketParser.parse_rows(payload, context="chart")

    assert [bucket.label for bucket in buckets] == ["01/01", "01/08"]
    assert buckets[1].min_price == buckets[1].max_price == Decimal("110.00")
    assert buckets[0].change_percent == Decimal("0.00")
    assert buckets[0].change_type is ChangeType.UNCHANGED


@pytest.mark.parametrize("zero", [0, "0", 0.0])
def test_chart_bucket_parser_rejects_zero_extremes(zero):
    base = {"period_start": "2024-01-01", "period_label": "01/01", "avg_price": "100"}

    for field in ("min_price", "max_price"):
        with pytest.raises(ValidationError):
            ChartBucketParser.parse_row({**base, field: zero})

    payload = [{**base, "min_price": zero}, {**base, "period_start": "2024-01-08", "period_label": "01/08"}]
    assert [bucket.label for bucket in ChartBucketParser.parse_rows(payload, context="chart")] == ["01/08"]


def test_latest_per_instrument_keeps_newest_point():
    rows = [
        _row(price_date="2024-01-01", price_krw_per_kg=1),
        _row(price_date="2024-01-03", price_krw_per_kg=3),
        _row(metal_code="AL", price_date="2024-01-02", price_krw_per_kg=2),
    ]
    points = PricePointParser.parse_rows(rows, context="latest")

    latest = latest_per_instrument(points)

    assert [(p.instrument_code, p.price_minor) for p in latest] == [("AL", Decimal("2.00")), ("CU", Decimal("3.00"))]
