"""
Dashboard and widget management endpoints
"""
import logging
from fastapi import APIRouter, Depends
from sqlmodel import Session

from vizflow.core.database import get_db
from vizflow.core.errors import PipelineError, to_http_exception
from vizflow.models import Dashboard
from vizflow.repositories import WidgetRepository
from vizflow.schemas import (
    CreateDashboardRequest,
    DashboardResponse,
    DashboardListResponse,
    ReorderWidgetsRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/dashboards", tags=["Dashboards"])


@router.post("", response_model=DashboardResponse, status_code=201)
def create_dashboard(p: CreateDashboardRequest, db: Session = Depends(get_db)):
    dashboard = WidgetRepository(db).create_dashboard(p.name, p.description)
    return _dashboard_response(dashboard)


@router.get("", response_model=DashboardListResponse)
def list_dashboards(limit: int = 50, db: Session = Depends(get_db)):
    """Most recently updated dashboards first"""
    dashboards = WidgetRepository(db).list_dashboards(limit=limit)
    return DashboardListResponse(
        success=True,
        dashboards=[_dashboard_response(d) for d in dashboards],
        count=len(dashboards),
    )


@router.get("/{dashboard_id}", response_model=DashboardResponse)
def get_dashboard(dashboard_id: str, db: Session = Depends(get_db)):
    try:
        dashboard = WidgetRepository(db).get_dashboard(dashboard_id)
    except PipelineError as e:
        raise to_http_exception(e)
    return _dashboard_response(dashboard)


@router.put("/{dashboard_id}/widgets/order", response_model=DashboardResponse)
def reorder_widgets(dashboard_id: str, p: ReorderWidgetsRequest, db: Session = Depends(get_db)):
    """
    Rearrange widgets; widgetIds must contain every widget id exactly once
    """
    repo = WidgetRepository(db)
    try:
        repo.reorder(dashboard_id, p.widgetIds)
        dashboard = repo.get_dashboard(dashboard_id)
    except PipelineError as e:
        raise to_http_exception(e)
    return _dashboard_response(dashboard)


@router.get("/{dashboard_id}/widgets/{widget_id}")
def get_widget(dashboard_id: str, widget_id: str, db: Session = Depends(get_db)):
    """Stored widget, including highchartsConfig for rendering"""
    try:
        widget = WidgetRepository(db).fetch(dashboard_id, widget_id)
    except PipelineError as e:
        raise to_http_exception(e)
    return {"success": True, "widget": widget.to_record()}


@router.delete("/{dashboard_id}/widgets/{widget_id}")
def delete_widget(dashboard_id: str, widget_id: str, db: Session = Depends(get_db)):
    try:
        WidgetRepository(db).delete(dashboard_id, widget_id)
    except PipelineError as e:
        raise to_http_exception(e)
    return {"success": True, "deletedWidgetId": widget_id, "dashboardId": dashboard_id}


def _dashboard_response(dashboard: Dashboard) -> DashboardResponse:
    return DashboardResponse(
        id=dashboard.id,
        name=dashboard.name,
        description=dashboard.description,
        widgets=list(dashboard.widgets or []),
        createdAt=dashboard.created_at,
        updatedAt=dashboard.updated_at,
    )
