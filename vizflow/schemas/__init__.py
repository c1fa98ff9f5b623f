from .chart_schema import (
    GenerateChartRequest,
    GenerateChartResponse,
    GenerateJobResponse,
    ChartRecordResponse,
    ChartListResponse,
)
from .widget_schema import (
    UpdateWidgetRequest,
    AppliedChangeInfo,
    ChangeLog,
    UpdatedWidgetSummary,
    UpdateWidgetResponse,
)
from .dashboard_schema import (
    CreateDashboardRequest,
    DashboardResponse,
    DashboardListResponse,
    ReorderWidgetsRequest,
)
from .job_schema import JobStatusResponse

__all__ = [
    "GenerateChartRequest",
    "GenerateChartResponse",
    "GenerateJobResponse",
    "ChartRecordResponse",
    "ChartListResponse",
    "UpdateWidgetRequest",
    "AppliedChangeInfo",
    "ChangeLog",
    "UpdatedWidgetSummary",
    "UpdateWidgetResponse",
    "CreateDashboardRequest",
    "DashboardResponse",
    "DashboardListResponse",
    "ReorderWidgetsRequest",
    "JobStatusResponse",
]
