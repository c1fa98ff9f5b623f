"""
Widget Update Controller
Natural-language edits of dashboard widgets, applied without calling the LLM
"""
import logging
from fastapi import APIRouter, Depends

from vizflow.core.errors import InputError, PipelineError, to_http_exception
from vizflow.dtos import UpdateRequest, parse_chart_type
from vizflow.schemas import (
    UpdateWidgetRequest,
    UpdateWidgetResponse,
    AppliedChangeInfo,
    ChangeLog,
    UpdatedWidgetSummary,
)
from vizflow.pipeline.stages import COLOR_PALETTE
from vizflow.services import PipelineService
from vizflow.dependencies.pipeline import get_pipeline_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/dashboards", tags=["Widgets"])


UPDATE_CAPABILITIES = {
    "endpoint": "PATCH /api/dashboards/{dashboardId}/widgets/{widgetId}/update",
    "body": {
        "updatePrompt": "string, required, the edit instruction",
        "newChartOptions": "optional object, replaces the chart configuration",
        "newTitle": "optional string, overrides any title in the instruction",
        "newChartType": "optional string, overrides any chart type in the instruction",
    },
    "operations": [
        {"family": "chart_type", "keywords": ["pie", "line", "bar", "column", "scatter", "area"]},
        {"family": "styling", "keywords": sorted(COLOR_PALETTE) + ["#rrggbb"]},
        {"family": "title", "keywords": ["title", "heading", "name it", "call it", "rename"]},
        {"family": "legend", "keywords": ["hide legend", "show legend"]},
        {"family": "axis", "keywords": ["x axis", "y axis", "logarithmic", "rotate labels"]},
        {"family": "filter", "keywords": ["top N", "first N", "last N", "above X", "below X"]},
    ],
    "examples": [
        "make this a pie chart and hide the legend",
        "change the colors to blue and green",
        "set the title to \"Quarterly Revenue\"",
        "rename the y axis to \"Revenue (USD)\"",
        "only show the top 5",
    ],
    "notes": "Unrecognized parts of an instruction are returned as warnings; the rest is still applied.",
}


@router.patch("/{dashboard_id}/widgets/{widget_id}/update", response_model=UpdateWidgetResponse)
def update_widget(
    dashboard_id: str,
    widget_id: str,
    p: UpdateWidgetRequest,
    service: PipelineService = Depends(get_pipeline_service)
):
    """
    Apply an edit instruction to a widget and save it in place

    Example request:
    {
        "updatePrompt": "make this a pie chart and hide the legend",
        "newTitle": "Revenue share"   // optional, wins over the instruction
    }

    404 responses list the widget ids that do exist on the dashboard.
    """
    try:
        request = UpdateRequest(
            dashboard_id=dashboard_id,
            widget_id=widget_id,
            update_prompt=p.updatePrompt or "",
            new_chart_options=p.newChartOptions,
            new_title=p.newTitle,
            new_chart_type=_chart_type_override(p.newChartType),
        )
        report = service.update(request)
    except PipelineError as e:
        raise to_http_exception(e)

    widget = report.widget
    return UpdateWidgetResponse(
        success=report.success,
        widgetId=widget_id,
        dashboardId=dashboard_id,
        message=report.message or "",
        changes=ChangeLog(
            applied=[AppliedChangeInfo(**change.model_dump()) for change in report.applied],
            warnings=report.warnings,
        ),
        updatedWidget=UpdatedWidgetSummary(
            id=widget.id,
            title=widget.title,
            type=widget.type,
            lastUpdated=widget.last_updated,
        ),
        warnings=report.warnings,
        noop=report.noop,
        saved=report.saved,
        saveError=report.save_error,
        chartConfig=report.chart_config,
    )


@router.get("/{dashboard_id}/widgets/{widget_id}/update")
def describe_widget_update(dashboard_id: str, widget_id: str):
    """Static description of the supported edit instructions"""
    return {"success": True, "dashboardId": dashboard_id, "widgetId": widget_id, **UPDATE_CAPABILITIES}


def _chart_type_override(value):
    if value is None:
        return None
    chart_type = parse_chart_type(value)
    if chart_type is None:
        raise InputError(f"Unknown chart type '{value}'", field="newChartType")
    return chart_type
