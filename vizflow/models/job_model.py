"""
Generation job model - durable status record for background synthesis
"""
from typing import Optional, Dict, Any
from datetime import datetime
from sqlalchemy import JSON, Column, Text
from sqlmodel import SQLModel, Field

JOB_PENDING = "pending"
JOB_PROCESSING = "processing"
JOB_COMPLETED = "completed"
JOB_FAILED = "failed"


class GenerationJob(SQLModel, table=True):
    """
    Status record polled by clients of the async generate endpoint

    The worker is the only writer; HTTP handlers only read it.
    """
    __tablename__ = "generation_jobs"

    id: str = Field(primary_key=True)  # UUID
    status: str = Field(default=JOB_PENDING, index=True)  # pending, processing, completed, failed
    progress: int = Field(default=0)  # 0-100
    current_stage: Optional[str] = None
    error_message: Optional[str] = Field(default=None, sa_column=Column(Text))
    result: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON))
    created_at: datetime = Field(index=True)
    updated_at: datetime
    completed_at: Optional[datetime] = None
