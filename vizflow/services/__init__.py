"""
Service layer - business logic
"""
from vizflow.services.pipeline_service import PipelineService
from vizflow.services.job_service import JobService, run_generation_job

__all__ = [
    "PipelineService",
    "JobService",
    "run_generation_job",
]
