# src/tracking/core/analytics/__init__.py
from .aggregate import build_chart_data
from .registry import ChartRegistry

__all__ = ["build_chart_data", "ChartRegistry"]
