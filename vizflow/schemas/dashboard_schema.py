"""
Dashboard schemas
"""
from pydantic import BaseModel
from typing import Dict, Any, List, Optional
from datetime import datetime


class CreateDashboardRequest(BaseModel):
    name: str
    description: Optional[str] = None


class DashboardResponse(BaseModel):
    """Dashboard with its widgets in display order"""
    id: str
    name: str
    description: Optional[str] = None
    widgets: List[Dict[str, Any]]  # Serialized widgets (camelCase)
    createdAt: datetime
    updatedAt: datetime


class ReorderWidgetsRequest(BaseModel):
    widgetIds: List[str]  # Every widget id of the dashboard, in the new order


class DashboardListResponse(BaseModel):
    success: bool
    dashboards: List[DashboardResponse]
    count: int
