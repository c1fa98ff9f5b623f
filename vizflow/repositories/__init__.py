"""
Repository layer for data access
"""
from vizflow.repositories.chart_repository import ChartRepository
from vizflow.repositories.widget_repository import WidgetRepository
from vizflow.repositories.job_repository import JobRepository

__all__ = [
    "ChartRepository",
    "WidgetRepository",
    "JobRepository",
]
