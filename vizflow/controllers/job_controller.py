"""
Generation job status endpoint
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from vizflow.core.database import get_db
from vizflow.repositories import JobRepository
from vizflow.schemas import JobStatusResponse
from vizflow.services import JobService

router = APIRouter(prefix="/api/jobs", tags=["Jobs"])


@router.get("/{job_id}", response_model=JobStatusResponse)
def get_job(job_id: str, db: Session = Depends(get_db)):
    """Poll a background generation; result holds the report once finished"""
    job = JobService(JobRepository(db)).get_job(job_id)
    if not job:
        raise HTTPException(status_code=404, detail=f"Job with ID {job_id} not found")

    return JobStatusResponse(
        jobId=job.id,
        status=job.status,
        progress=job.progress,
        currentStage=job.current_stage,
        errorMessage=job.error_message,
        result=job.result,
        createdAt=job.created_at,
        updatedAt=job.updated_at,
        completedAt=job.completed_at,
    )
