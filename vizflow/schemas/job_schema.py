"""
Generation job schemas
"""
from pydantic import BaseModel
from typing import Dict, Any, Optional
from datetime import datetime


class JobStatusResponse(BaseModel):
    """Polled status of a background generation"""
    jobId: str
    status: str  # pending, processing, completed, failed
    progress: int
    currentStage: Optional[str] = None
    errorMessage: Optional[str] = None
    result: Optional[Dict[str, Any]] = None  # PipelineReport once finished
    createdAt: datetime
    updatedAt: datetime
    completedAt: Optional[datetime] = None
