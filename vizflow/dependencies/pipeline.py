from fastapi import Depends
from sqlmodel import Session

from vizflow.core.database import get_db
from vizflow.repositories import ChartRepository, WidgetRepository
from vizflow.pipeline.stages import ToolOrchestrator
from vizflow.services import PipelineService


def get_orchestrator() -> ToolOrchestrator:
    """
    Orchestrator bound to the Azure OpenAI transport

    Overridden in tests with a scripted completion function.
    """
    return ToolOrchestrator()


def get_pipeline_service(
    db: Session = Depends(get_db),
    orchestrator: ToolOrchestrator = Depends(get_orchestrator)
) -> PipelineService:
    return PipelineService(
        ChartRepository(db),
        WidgetRepository(db),
        orchestrator=orchestrator,
    )
