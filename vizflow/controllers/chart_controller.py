"""
Chart Generation Controller
Endpoints for synthesizing charts from SQL results using LLM tool calling
"""
import logging
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from sqlmodel import Session

from vizflow.core.database import get_db, get_session_factory
from vizflow.core.errors import PipelineError, to_http_exception
from vizflow.dtos import GenerationRequest, PipelineReport
from vizflow.models import Chart
from vizflow.repositories import ChartRepository, JobRepository
from vizflow.schemas import (
    GenerateChartRequest,
    GenerateChartResponse,
    GenerateJobResponse,
    ChartRecordResponse,
    ChartListResponse,
)
from vizflow.pipeline.stages import ToolOrchestrator
from vizflow.services import JobService, PipelineService, run_generation_job
from vizflow.services.pipeline_service import validate_generation_request
from vizflow.dependencies.pipeline import get_orchestrator, get_pipeline_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/charts", tags=["Charts"])


@router.post("/generate", response_model=GenerateChartResponse)
def generate_chart(
    req: GenerateChartRequest,
    service: PipelineService = Depends(get_pipeline_service)
):
    """
    Generate a chart from SQL results

    The model sees the first rows only; the saved chart covers all rows.

    Example request:
    {
        "sqlQuery": "SELECT month, revenue FROM sales",
        "sqlResults": [{"month": "Jan", "revenue": 1000}, ...],
        "userPrompt": "show revenue over time",
        "csvId": "..."
    }

    Persistence failures do not fail the request: the chart config is
    still returned with saved=false and saveError set.
    """
    try:
        report = service.synthesize(_generation_request(req))
    except PipelineError as e:
        raise to_http_exception(e)

    if not report.success:
        raise HTTPException(status_code=500, detail={
            "success": False,
            "error": report.error,
            "debug": {
                "toolCallCount": report.tool_call_count,
                "toolNames": report.tool_names,
                "aiResponse": report.ai_response,
            },
        })

    return _generate_response(report)


@router.post("/generate/async", response_model=GenerateJobResponse, status_code=202)
def generate_chart_async(
    req: GenerateChartRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    orchestrator: ToolOrchestrator = Depends(get_orchestrator),
    session_factory=Depends(get_session_factory)
):
    """
    Queue chart generation and return a job id to poll at /api/jobs/{job_id}

    Input is validated before the job is created.
    """
    request = _generation_request(req)
    try:
        validate_generation_request(request)
    except PipelineError as e:
        raise to_http_exception(e)

    job = JobService(JobRepository(db)).start_generation_job()
    background_tasks.add_task(run_generation_job, job.id, request, session_factory, orchestrator)

    logger.info(f"Queued generation job {job.id}")
    return GenerateJobResponse(success=True, jobId=job.id, status=job.status)


@router.get("/list", response_model=ChartListResponse)
def list_charts(limit: int = 10, db: Session = Depends(get_db)):
    """Most recent charts first"""
    charts = ChartRepository(db).list_recent(limit=limit)
    return ChartListResponse(
        success=True,
        charts=[_chart_record(c) for c in charts],
        count=len(charts),
    )


@router.get("/{chart_id}", response_model=ChartRecordResponse)
def get_chart(chart_id: str, db: Session = Depends(get_db)):
    chart = ChartRepository(db).get(chart_id)
    if not chart:
        raise HTTPException(status_code=404, detail=f"Chart with ID {chart_id} not found")
    return _chart_record(chart)


def _generation_request(req: GenerateChartRequest) -> GenerationRequest:
    # Missing fields become empty values so the service reports them as input errors (400)
    return GenerationRequest(
        sql_query=req.sqlQuery or "",
        sql_results=req.sqlResults or [],
        user_prompt=req.userPrompt,
        csv_id=req.csvId or "",
        dashboard_id=req.dashboardId,
        title=req.title,
    )


def _generate_response(report: PipelineReport) -> GenerateChartResponse:
    return GenerateChartResponse(
        success=report.success,
        chartId=report.chart_id,
        chartConfig=report.chart_config,
        chartType=report.chart_type,
        dataPreview=report.data_preview,
        totalRows=report.total_rows,
        saved=report.saved,
        saveError=report.save_error,
        aiResponse=report.ai_response,
        widgetId=report.widget.id if report.widget else None,
    )


def _chart_record(chart: Chart) -> ChartRecordResponse:
    return ChartRecordResponse(
        id=chart.id,
        csvId=chart.csv_id,
        chartType=chart.chart_type,
        chartOptions=chart.chart_options,
        spec=chart.spec,
        sqlQuery=chart.sql_query,
        userPrompt=chart.user_prompt,
        dashboardId=chart.dashboard_id,
        createdAt=chart.created_at,
        updatedAt=chart.updated_at,
    )
