import pytest

from conftest import make_order
from src.tracking.core.analytics.summary import DashboardStats, format_currency


@pytest.mark.parametrize(
    "amount, expected",
    [
        (0, "₹0"),
        (999, "₹999"),
        (1000, "₹1,000"),
        (123456, "₹1,23,456"),
        (12345678.5, "₹1,23,45,678.5"),
        (2500.25, "₹2,500.25"),
        (-1500, "-₹1,500"),
    ],
)
def test_format_currency(amount, expected):
    assert format_currency(amount) == expected


def test_dashboard_stats(store):
    store.load(
        [
            make_order(1, customer="A", amount=700, created_at="2024-01-01T08:00:00.000Z"),
            make_order(2, customer="B", amount=1200, created_at="2024-01-01T09:00:00.000Z"),
            make_order(3, customer="C", amount=5000, created_at="2023-12-30T09:00:00.000Z"),
        ]
    )
    stats = DashboardStats.from_store(store)
    assert stats.todays_count == 2
    assert stats.todays_revenue == 1900
    assert stats.top_labels == ["B", "A"]
    assert stats.top_amounts == [1200, 700]

    text = stats.render()
    assert "₹1,900" in text
    assert "#2 B" in text
