"""
Chart generation schemas
"""
from pydantic import BaseModel
from typing import Dict, Any, List, Optional
from datetime import datetime


class GenerateChartRequest(BaseModel):
    """Request to generate a chart from query results"""
    sqlQuery: Optional[str] = None
    sqlResults: Optional[List[Dict[str, Any]]] = None
    userPrompt: Optional[str] = None
    csvId: Optional[str] = None
    dashboardId: Optional[str] = None  # Also add the chart as a widget here
    title: Optional[str] = None


class GenerateChartResponse(BaseModel):
    success: bool
    chartId: Optional[str] = None
    chartConfig: Optional[Dict[str, Any]] = None
    chartType: Optional[str] = None
    dataPreview: List[Dict[str, Any]] = []
    totalRows: int = 0
    saved: bool = False
    saveError: Optional[str] = None
    aiResponse: Optional[str] = None
    widgetId: Optional[str] = None


class GenerateJobResponse(BaseModel):
    success: bool
    jobId: str
    status: str


class ChartRecordResponse(BaseModel):
    """Stored chart row"""
    id: str
    csvId: str
    chartType: Optional[str] = None
    chartOptions: Dict[str, Any]
    spec: Dict[str, Any]
    sqlQuery: str
    userPrompt: Optional[str] = None
    dashboardId: Optional[str] = None
    createdAt: datetime
    updatedAt: datetime


class ChartListResponse(BaseModel):
    success: bool
    charts: List[ChartRecordResponse]
    count: int
