"""
Dashboard model - owns an ordered array of widgets
"""
from typing import Optional, List, Dict, Any
from datetime import datetime
from sqlalchemy import JSON, Column, Text
from sqlmodel import SQLModel, Field


class Dashboard(SQLModel, table=True):
    """
    Dashboard row

    Widgets live in a JSON array column; array order is display order.
    Each entry is a serialized Widget (camelCase keys).
    """
    __tablename__ = "dashboards"

    id: str = Field(primary_key=True)  # UUID
    name: str
    description: Optional[str] = Field(default=None, sa_column=Column(Text))
    widgets: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    created_at: datetime
    updated_at: datetime
