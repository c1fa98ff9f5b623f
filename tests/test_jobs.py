"""Tests for background generation jobs."""

import pytest

from vizflow.core.database import SessionLocal
from vizflow.dtos import GenerationRequest
from vizflow.models import JOB_COMPLETED, JOB_FAILED
from vizflow.repositories import JobRepository
from vizflow.pipeline.stages import ToolOrchestrator
from vizflow.services import JobService, run_generation_job

from fakes import FailingCompletion, ScriptedCompletion, assistant, line_chart_arguments, revenue_rows, tool_call


@pytest.fixture
def request_12_rows():
    return GenerationRequest(
        sql_query="SELECT month, revenue FROM sales",
        sql_results=revenue_rows(12),
        user_prompt="show revenue over time",
        csv_id="csv-1",
    )


def finished_job(session, job_id):
    session.expire_all()
    return JobRepository(session).get(job_id)


class TestGenerationJobs:
    def test_completed_job_holds_the_report(self, session, request_12_rows, monkeypatch):
        job = JobService(JobRepository(session)).start_generation_job()
        stages = []
        original = JobRepository.update_progress

        def spy(self, job_id, stage, progress):
            stages.append(stage)
            return original(self, job_id, stage, progress)

        monkeypatch.setattr(JobRepository, "update_progress", spy)
        completion = ScriptedCompletion(
            assistant(tool_call("generateLineChart", line_chart_arguments(revenue_rows(10)))),
        )

        run_generation_job(job.id, request_12_rows, SessionLocal, ToolOrchestrator(completion_fn=completion))

        done = finished_job(session, job.id)
        assert done.status == JOB_COMPLETED
        assert done.progress == 100
        assert done.completed_at is not None
        assert done.result["chart_type"] == "line"
        assert done.result["total_rows"] == 12
        assert stages[0] == "received"
        assert "persisting" in stages

    def test_transport_failure_fails_the_job(self, session, request_12_rows):
        job = JobService(JobRepository(session)).start_generation_job()

        run_generation_job(job.id, request_12_rows, SessionLocal, ToolOrchestrator(completion_fn=FailingCompletion()))

        done = finished_job(session, job.id)
        assert done.status == JOB_FAILED
        assert "quota exceeded" in done.error_message
        assert done.result is None

    def test_extraction_failure_keeps_diagnostics(self, session, request_12_rows):
        job = JobService(JobRepository(session)).start_generation_job()

        run_generation_job(
            job.id,
            request_12_rows,
            SessionLocal,
            ToolOrchestrator(completion_fn=ScriptedCompletion(final_text="No idea.")),
        )

        done = finished_job(session, job.id)
        assert done.status == JOB_FAILED
        assert done.error_message == "Failed to generate chart configuration"
        assert done.result["failure"] == "extraction"
        assert done.result["ai_response"] == "No idea."
