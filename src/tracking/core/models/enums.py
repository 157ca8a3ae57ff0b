from __future__ import annotations
from enum import Enum


class OrderStatus(str, Enum):
    ON_ROUTE = "ON_ROUTE"
    DELIVERED = "DELIVERED"


class ChartKind(str, Enum):
    BAR = "bar"
    LINE = "line"
    PIE = "pie"
    DOUGHNUT = "doughnut"


class ChartDimension(str, Enum):
    DATE = "date"
    HOUR = "hour"
    STATUS = "status"
    CUSTOMER = "customer"


class ChartMetric(str, Enum):
    ORDER_COUNT = "orderCount"
    TOTAL_REVENUE = "totalRevenue"
    AVG_ORDER_VALUE = "avgOrderValue"


CHART_KIND_LABELS = {
    ChartKind.BAR: "Bar",
    ChartKind.LINE: "Line",
    ChartKind.PIE: "Pie",
    ChartKind.DOUGHNUT: "Doughnut",
}

DIMENSION_LABELS = {
    ChartDimension.DATE: "Date",
    ChartDimension.HOUR: "Hour of Day",
    ChartDimension.STATUS: "Status",
    ChartDimension.CUSTOMER: "Customer",
}

METRIC_LABELS = {
    ChartMetric.ORDER_COUNT: "Order Count",
    ChartMetric.TOTAL_REVENUE: "Total Revenue",
    ChartMetric.AVG_ORDER_VALUE: "Average Order Value",
}
