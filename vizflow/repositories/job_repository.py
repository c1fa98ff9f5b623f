"""
Repository for GenerationJob status records
"""
import uuid
import logging
from datetime import datetime
from typing import Any, Dict, Optional
from sqlmodel import Session
from vizflow.models import GenerationJob, JOB_PENDING, JOB_PROCESSING, JOB_COMPLETED, JOB_FAILED

logger = logging.getLogger(__name__)


class JobRepository:
    """Handles GenerationJob lifecycle updates"""

    def __init__(self, session: Session):
        self.session = session

    def create(self) -> GenerationJob:
        now = datetime.utcnow()
        job = GenerationJob(
            id=str(uuid.uuid4()),
            status=JOB_PENDING,
            progress=0,
            current_stage="queued",
            created_at=now,
            updated_at=now
        )

        self.session.add(job)
        self.session.commit()
        self.session.refresh(job)

        logger.info(f"Created generation job {job.id}")
        return job

    def get(self, job_id: str) -> Optional[GenerationJob]:
        return self.session.get(GenerationJob, job_id)

    def update_progress(self, job_id: str, stage: str, progress: int) -> None:
        """
        Mirror a pipeline stage onto the job row

        Best-effort: a progress write failing must not abort the job
        """
        try:
            job = self.session.get(GenerationJob, job_id)
            if job is None:
                logger.warning(f"Job {job_id} vanished while running")
                return
            job.status = JOB_PROCESSING
            job.current_stage = stage
            job.progress = max(job.progress, min(progress, 100))
            job.updated_at = datetime.utcnow()
            self.session.add(job)
            self.session.commit()

        except Exception as e:
            self.session.rollback()
            logger.warning(f"Failed to update progress of job {job_id}: {e}")

    def complete(self, job_id: str, result: Dict[str, Any]) -> None:
        self._finish(job_id, JOB_COMPLETED, result=result)

    def fail(self, job_id: str, error_message: str, result: Optional[Dict[str, Any]] = None) -> None:
        self._finish(job_id, JOB_FAILED, result=result, error_message=error_message)

    def _finish(
        self,
        job_id: str,
        status: str,
        result: Optional[Dict[str, Any]] = None,
        error_message: Optional[str] = None
    ) -> None:
        job = self.session.get(GenerationJob, job_id)
        if job is None:
            logger.warning(f"Cannot finish missing job {job_id}")
            return

        now = datetime.utcnow()
        job.status = status
        job.progress = 100
        job.current_stage = status
        job.result = result
        job.error_message = error_message
        job.updated_at = now
        job.completed_at = now

        self.session.add(job)
        self.session.commit()

        logger.info(f"Job {job_id} {status}")
