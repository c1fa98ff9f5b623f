"""
Chart model - one row per synthesized chart
"""
from typing import Optional, Dict, Any
from datetime import datetime
from sqlalchemy import JSON, Column, Text
from sqlmodel import SQLModel, Field


class Chart(SQLModel, table=True):
    """
    Persisted chart produced by the generate path

    Stores both the renderer configuration (chart_options) and the
    canonical ChartSpec (spec) so the chart can be re-rendered or
    re-edited without calling the model again.
    """
    __tablename__ = "charts"

    id: str = Field(primary_key=True)  # UUID
    csv_id: str = Field(index=True)  # Data source the SQL ran against
    chart_options: Dict[str, Any] = Field(sa_column=Column(JSON, nullable=False))
    spec: Dict[str, Any] = Field(sa_column=Column(JSON, nullable=False))
    sql_query: str = Field(sa_column=Column(Text, nullable=False))
    chart_type: Optional[str] = Field(default=None, index=True)
    user_prompt: Optional[str] = Field(default=None, sa_column=Column(Text))
    dashboard_id: Optional[str] = Field(default=None, index=True)
    created_at: datetime = Field(index=True)
    updated_at: datetime
