"""
Named error conditions for the chart pipeline

Controllers translate these into HTTP responses; nothing else
should escape the service layer.
"""
from typing import List, Optional

from fastapi import HTTPException


class PipelineError(Exception):
    """Base class for every per-request pipeline failure"""


class InputError(PipelineError):
    """Missing or invalid required field, rejected before any side effect"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class LLMTransportError(PipelineError):
    """LLM runtime unreachable, timed out, over quota or returned garbage"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ChartExtractionError(PipelineError):
    """The model finished without producing a usable chart fragment"""

    def __init__(
        self,
        message: str,
        tool_call_count: int = 0,
        tool_names: Optional[List[str]] = None,
        ai_response: Optional[str] = None,
    ):
        super().__init__(message)
        self.tool_call_count = tool_call_count
        self.tool_names = tool_names or []
        self.ai_response = ai_response


class DashboardNotFoundError(PipelineError):
    def __init__(self, dashboard_id: str):
        super().__init__(f"Dashboard with ID {dashboard_id} not found")
        self.dashboard_id = dashboard_id


class WidgetNotFoundError(PipelineError):
    """Widget id missing from an existing dashboard"""

    def __init__(self, dashboard_id: str, widget_id: str, available_widget_ids: List[str]):
        super().__init__(f"Widget with ID {widget_id} not found in dashboard {dashboard_id}")
        self.dashboard_id = dashboard_id
        self.widget_id = widget_id
        self.available_widget_ids = available_widget_ids


def to_http_exception(error: PipelineError) -> HTTPException:
    """Map a named pipeline error to its HTTP response"""
    if isinstance(error, InputError):
        return HTTPException(status_code=400, detail={"success": False, "error": str(error), "field": error.field})
    if isinstance(error, LLMTransportError):
        return HTTPException(status_code=502, detail={"success": False, "error": str(error)})
    if isinstance(error, WidgetNotFoundError):
        return HTTPException(status_code=404, detail={
            "success": False,
            "error": str(error),
            "dashboardId": error.dashboard_id,
            "widgetId": error.widget_id,
            "availableWidgetIds": error.available_widget_ids,
        })
    if isinstance(error, DashboardNotFoundError):
        return HTTPException(status_code=404, detail={
            "success": False,
            "error": str(error),
            "dashboardId": error.dashboard_id,
        })
    if isinstance(error, ChartExtractionError):
        return HTTPException(status_code=500, detail={
            "success": False,
            "error": str(error),
            "debug": {
                "toolCallCount": error.tool_call_count,
                "toolNames": error.tool_names,
                "aiResponse": error.ai_response,
            },
        })
    return HTTPException(status_code=500, detail={"success": False, "error": str(error)})
