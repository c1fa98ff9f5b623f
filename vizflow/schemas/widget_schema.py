"""
Widget update schemas
"""
from pydantic import BaseModel
from typing import Dict, Any, List, Optional
from datetime import datetime


class UpdateWidgetRequest(BaseModel):
    """Edit instruction plus optional explicit overrides"""
    updatePrompt: Optional[str] = None  # required; blank is rejected with 400
    newChartOptions: Optional[Dict[str, Any]] = None  # Replaces the chart wholesale
    newTitle: Optional[str] = None
    newChartType: Optional[str] = None


class AppliedChangeInfo(BaseModel):
    operation: str
    description: str
    fragment: Optional[str] = None


class ChangeLog(BaseModel):
    applied: List[AppliedChangeInfo]
    warnings: List[str]


class UpdatedWidgetSummary(BaseModel):
    id: str
    title: str
    type: str
    lastUpdated: datetime


class UpdateWidgetResponse(BaseModel):
    success: bool
    widgetId: str
    dashboardId: str
    message: str
    changes: ChangeLog
    updatedWidget: UpdatedWidgetSummary
    warnings: List[str] = []
    noop: bool = False
    saved: bool = False
    saveError: Optional[str] = None
    chartConfig: Optional[Dict[str, Any]] = None
