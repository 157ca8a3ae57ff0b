from datetime import date, timezone, timedelta

import pytest

from conftest import make_order
from src.tracking.core.analytics.aggregate import (
    Bucket,
    build_chart_data,
    end_of_day,
    sort_keys,
    start_of_day,
)
from src.tracking.core.models.chart import ChartFilters, ChartQuery
from src.tracking.core.models.enums import ChartDimension, ChartKind, ChartMetric, OrderStatus

UTC = timezone.utc


@pytest.fixture
def hourly_orders():
    return [
        make_order(1, amount=100, created_at="2024-01-01T09:15:00Z"),
        make_order(2, amount=300, created_at="2024-01-01T09:45:00Z"),
        make_order(3, amount=50, created_at="2024-01-01T14:00:00Z"),
    ]


def q(dimension, metric, **filters):
    return ChartQuery(
        kind=ChartKind.BAR,
        dimension=ChartDimension(dimension),
        metric=ChartMetric(metric),
        filters=ChartFilters(**filters),
    )


def test_hour_total_revenue(hourly_orders):
    res = build_chart_data(hourly_orders, q("hour", "totalRevenue"), tz=UTC)
    assert list(res.labels) == ["09:00", "14:00"]
    assert list(res.data) == [400, 50]


def test_hour_order_count(hourly_orders):
    res = build_chart_data(hourly_orders, q("hour", "orderCount"), tz=UTC)
    assert list(res.labels) == ["09:00", "14:00"]
    assert list(res.data) == [2, 1]


def test_hour_uses_target_zone(hourly_orders):
    ist = timezone(timedelta(hours=5, minutes=30))
    res = build_chart_data(hourly_orders, q("hour", "orderCount"), tz=ist)
    # 09:15Z/09:45Z -> 14:45/15:15 IST, 14:00Z -> 19:30 IST
    assert list(res.labels) == ["14:00", "15:00", "19:00"]
    assert list(res.data) == [1, 1, 1]


def test_status_filter_without_matches_is_empty(hourly_orders):
    res = build_chart_data(hourly_orders, q("date", "orderCount", status=OrderStatus.DELIVERED), tz=UTC)
    assert res.labels == ()
    assert res.data == ()


def test_date_metrics_match_bucket_contents():
    orders = [
        make_order(1, amount=120.5, created_at="2024-01-02T10:00:00Z"),
        make_order(2, amount=80, created_at="2024-01-01T11:00:00Z"),
        make_order(3, amount=200, created_at="2024-01-02T23:30:00Z"),
        make_order(4, amount=33.3, created_at="2024-01-01T01:00:00Z"),
        make_order(5, amount=999, created_at=None),
    ]
    count = build_chart_data(orders, q("date", "orderCount"), tz=UTC)
    revenue = build_chart_data(orders, q("date", "totalRevenue"), tz=UTC)
    avg = build_chart_data(orders, q("date", "avgOrderValue"), tz=UTC)

    assert list(count.labels) == ["2024-01-01", "2024-01-02"]
    assert list(count.data) == [2, 2]
    assert list(revenue.data) == [80 + 33.3, 120.5 + 200]
    assert avg.data[0] == pytest.approx((80 + 33.3) / 2)
    assert avg.data[1] == pytest.approx((120.5 + 200) / 2)


def test_status_and_customer_dimensions_sorted_lexicographically():
    orders = [
        make_order(1, customer="Zoya", status=OrderStatus.DELIVERED, amount=10),
        make_order(2, customer="Arjun", amount=20),
        make_order(3, customer="Meera", amount=30),
        make_order(4, customer="Arjun", status=OrderStatus.DELIVERED, amount=40),
    ]
    by_status = build_chart_data(orders, q("status", "totalRevenue"))
    assert list(by_status.labels) == ["DELIVERED", "ON_ROUTE"]
    assert list(by_status.data) == [50, 50]

    by_customer = build_chart_data(orders, q("customer", "orderCount"))
    assert list(by_customer.labels) == ["Arjun", "Meera", "Zoya"]
    assert list(by_customer.data) == [2, 1, 1]


def test_status_dimension_keeps_orders_without_timestamp():
    orders = [make_order(1, created_at=None), make_order(2, created_at=None)]
    res = build_chart_data(orders, q("status", "orderCount"))
    assert res.pairs() == [("ON_ROUTE", 2)]


def test_hour_keys_sort_numerically():
    assert sort_keys(["14:00", "09:00", "10:00", "00:00"], ChartDimension.HOUR) == [
        "00:00",
        "09:00",
        "10:00",
        "14:00",
    ]


def test_date_range_is_inclusive_per_day():
    orders = [
        make_order(1, created_at="2023-12-31T23:59:59Z"),
        make_order(2, created_at="2024-01-01T00:00:00Z"),
        make_order(3, created_at="2024-01-02T23:59:59.500Z"),
        make_order(4, created_at="2024-01-03T00:00:00Z"),
        make_order(5, created_at=None),
    ]
    query = q("date", "orderCount", from_date=date(2024, 1, 1), to_date=date(2024, 1, 2))
    res = build_chart_data(orders, query, tz=UTC)
    assert res.pairs() == [("2024-01-01", 1), ("2024-01-02", 1)]


def test_open_ended_ranges():
    orders = [
        make_order(1, created_at="2024-01-01T08:00:00Z"),
        make_order(2, created_at="2024-03-01T08:00:00Z"),
    ]
    only_from = build_chart_data(orders, q("date", "orderCount", from_date=date(2024, 2, 1)), tz=UTC)
    only_to = build_chart_data(orders, q("date", "orderCount", to_date=date(2024, 2, 1)), tz=UTC)
    assert list(only_from.labels) == ["2024-03-01"]
    assert list(only_to.labels) == ["2024-01-01"]


def test_status_and_range_combined():
    orders = [
        make_order(1, status=OrderStatus.DELIVERED, amount=10, created_at="2024-01-01T08:00:00Z"),
        make_order(2, status=OrderStatus.ON_ROUTE, amount=20, created_at="2024-01-01T09:00:00Z"),
        make_order(3, status=OrderStatus.DELIVERED, amount=30, created_at="2024-02-01T09:00:00Z"),
    ]
    query = q(
        "status",
        "totalRevenue",
        status=OrderStatus.DELIVERED,
        from_date=date(2024, 1, 1),
        to_date=date(2024, 1, 31),
    )
    assert build_chart_data(orders, query, tz=UTC).pairs() == [("DELIVERED", 10)]


def test_unparseable_timestamp_is_dropped_from_hour_buckets():
    orders = [make_order(1, created_at="not-a-date"), make_order(2, created_at="2024-01-01T07:05:00Z")]
    res = build_chart_data(orders, q("hour", "orderCount"), tz=UTC)
    assert res.pairs() == [("07:00", 1)]


def test_deterministic_and_input_untouched(hourly_orders):
    before = [o.to_payload() for o in hourly_orders]
    a = build_chart_data(hourly_orders, q("customer", "avgOrderValue"), tz=UTC)
    b = build_chart_data(hourly_orders, q("customer", "avgOrderValue"), tz=UTC)
    assert a == b
    assert [o.to_payload() for o in hourly_orders] == before


def test_empty_bucket_average_is_zero():
    assert Bucket().value(ChartMetric.AVG_ORDER_VALUE) == 0.0


def test_day_bounds():
    d = date(2024, 5, 6)
    assert start_of_day(d, UTC).isoformat() == "2024-05-06T00:00:00+00:00"
    assert end_of_day(d, UTC).isoformat() == "2024-05-06T23:59:59.999000+00:00"
