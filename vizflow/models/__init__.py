"""
Models - database tables
"""
from vizflow.models.chart_model import Chart
from vizflow.models.dashboard_model import Dashboard
from vizflow.models.job_model import (
    GenerationJob,
    JOB_PENDING,
    JOB_PROCESSING,
    JOB_COMPLETED,
    JOB_FAILED,
)

__all__ = [
    "Chart",
    "Dashboard",
    "GenerationJob",
    "JOB_PENDING",
    "JOB_PROCESSING",
    "JOB_COMPLETED",
    "JOB_FAILED",
]
