"""
Background chart generation

The HTTP layer creates a pending job and hands run_generation_job to a
worker (FastAPI BackgroundTasks). The worker is the only writer of the
job row; clients poll it.
"""
import logging
from typing import Callable, Optional

from sqlmodel import Session

from vizflow.core.errors import PipelineError
from vizflow.dtos import GenerationRequest, StageEvent
from vizflow.models import GenerationJob
from vizflow.repositories import ChartRepository, JobRepository, WidgetRepository
from vizflow.pipeline.stages import OrchestratorConfig, ToolOrchestrator
from vizflow.services.pipeline_service import PipelineService

logger = logging.getLogger(__name__)


class JobService:
    """Creates and reads generation jobs"""

    def __init__(self, job_repo: JobRepository):
        self.job_repo = job_repo

    def start_generation_job(self) -> GenerationJob:
        return self.job_repo.create()

    def get_job(self, job_id: str) -> Optional[GenerationJob]:
        return self.job_repo.get(job_id)


def run_generation_job(
    job_id: str,
    request: GenerationRequest,
    session_factory: Callable[[], Session],
    orchestrator: Optional[ToolOrchestrator] = None,
    config: Optional[OrchestratorConfig] = None
) -> None:
    """
    Run synthesize() for a job in its own session

    Every StageEvent is mirrored to the job row. The job ends completed
    with the report JSON, or failed with the error message.
    """
    with session_factory() as session:
        jobs = JobRepository(session)
        service = PipelineService(
            ChartRepository(session),
            WidgetRepository(session),
            orchestrator=orchestrator,
            config=config,
        )

        def mirror(event: StageEvent) -> None:
            jobs.update_progress(job_id, event.stage.value, event.progress)

        logger.info(f"Job {job_id} started")
        try:
            report = service.synthesize(request, event_callback=mirror)
        except PipelineError as e:
            logger.error(f"Job {job_id} failed: {e}")
            jobs.fail(job_id, str(e))
            return
        except Exception as e:
            # Worker has no caller to propagate to; the job row is the only outlet
            logger.exception(f"Job {job_id} crashed")
            session.rollback()
            jobs.fail(job_id, f"Unexpected error: {e}")
            return

        payload = report.model_dump(mode="json", by_alias=True)
        if report.success:
            jobs.complete(job_id, payload)
        else:
            jobs.fail(job_id, report.error or "Chart generation failed", result=payload)
