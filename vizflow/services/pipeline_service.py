"""
Service for chart synthesis and widget updates
Encapsulates the generate and update pipelines behind one facade
"""
import uuid
import logging
from typing import Optional, Callable

from vizflow.core.config import settings
from vizflow.core.errors import ChartExtractionError, InputError, LLMTransportError
from vizflow.dtos import (
    FailureKind,
    GenerationRequest,
    PipelineReport,
    PipelineStage,
    SaveResult,
    StageEvent,
    UpdateRequest,
)
from vizflow.repositories.chart_repository import ChartRepository
from vizflow.repositories.widget_repository import WidgetRepository
from vizflow.pipeline.llm.prompts import CHART_SYSTEM_PROMPT, build_generation_prompt
from vizflow.pipeline.tools import ToolContext
from vizflow.pipeline.stages import (
    OrchestratorConfig,
    ResultExtractor,
    ToolOrchestrator,
    UpdateDiffEngine,
)

logger = logging.getLogger(__name__)

EventCallback = Optional[Callable[[StageEvent], None]]


def validate_generation_request(request: GenerationRequest) -> None:
    """
    Raises:
        InputError: missing SQL, empty result set or missing csv id
    """
    if not request.sql_query or not request.sql_query.strip():
        raise InputError("sqlQuery is required", field="sqlQuery")
    if not request.sql_results:
        raise InputError("sqlResults must be a non-empty array", field="sqlResults")
    if not request.csv_id or not request.csv_id.strip():
        raise InputError("csvId is required", field="csvId")


class PipelineService:
    """
    Orchestrates both pipelines

    Generate: received → orchestrating → extracted → persisting → saved|save_failed → reported
    Update:   received → diffing → applied → persisting → saved|save_failed → reported

    Every path ends in a PipelineReport or a named PipelineError.
    """

    def __init__(
        self,
        chart_repo: ChartRepository,
        widget_repo: WidgetRepository,
        orchestrator: Optional[ToolOrchestrator] = None,
        extractor: Optional[ResultExtractor] = None,
        diff_engine: Optional[UpdateDiffEngine] = None,
        config: Optional[OrchestratorConfig] = None,
        sample_rows: Optional[int] = None
    ):
        self.chart_repo = chart_repo
        self.widget_repo = widget_repo
        self.orchestrator = orchestrator or ToolOrchestrator()
        self.extractor = extractor or ResultExtractor(self.orchestrator.catalog)
        self.diff_engine = diff_engine or UpdateDiffEngine()
        self.config = config
        self.sample_rows = sample_rows if sample_rows is not None else settings.CHART_SAMPLE_ROWS

    # ============================================
    # GENERATE
    # ============================================

    def synthesize(
        self,
        request: GenerationRequest,
        event_callback: EventCallback = None
    ) -> PipelineReport:
        """
        Generate, extract and persist a chart from query results

        Returns:
            PipelineReport; success reflects generation, saved reflects persistence

        Raises:
            InputError: before any model call or write
            DashboardNotFoundError: dashboard_id given but missing
            LLMTransportError: model runtime failed (not retried)
        """
        validate_generation_request(request)
        if request.dashboard_id:
            self.widget_repo.get_dashboard(request.dashboard_id)

        chart_id = str(uuid.uuid4())
        total_rows = len(request.sql_results)
        sample = request.sql_results[:self.sample_rows]
        self._emit(event_callback, PipelineStage.RECEIVED, 0, f"Generating chart {chart_id} from {total_rows} rows")

        context = ToolContext(
            chart_id=chart_id,
            csv_id=request.csv_id,
            sql_query=request.sql_query,
            user_prompt=request.user_prompt,
            save_chart=lambda spec, metadata: self.chart_repo.save(spec, metadata, chart_id=chart_id),
        )

        self._emit(event_callback, PipelineStage.ORCHESTRATING, 10, "Asking the model for a chart")
        try:
            transcript = self.orchestrator.run(
                CHART_SYSTEM_PROMPT,
                build_generation_prompt(request.sql_query, sample, total_rows, request.user_prompt),
                context,
                self.config,
            )
        except LLMTransportError as e:
            logger.error(f"LLM transport failed for chart {chart_id}: {e}")
            self._emit(event_callback, PipelineStage.REPORTED, 100, f"Transport error: {e}")
            raise

        try:
            extracted = self.extractor.extract(transcript, rows=request.sql_results)
        except ChartExtractionError as e:
            logger.warning(f"No chart fragment for {chart_id}: {e.tool_call_count} tool call(s) {e.tool_names}")
            report = PipelineReport(
                success=False,
                failure=FailureKind.EXTRACTION,
                error=str(e),
                tool_call_count=e.tool_call_count,
                tool_names=e.tool_names,
                ai_response=e.ai_response,
                data_preview=sample,
                total_rows=total_rows,
            )
            self._emit(event_callback, PipelineStage.REPORTED, 100, str(e))
            return report

        spec = extracted.spec
        if request.title:
            spec.styling.title = request.title
        self._emit(event_callback, PipelineStage.EXTRACTED, 60, f"Extracted {spec.chart_type.value} chart")

        self._emit(event_callback, PipelineStage.PERSISTING, 75, "Saving chart")
        saved = self.chart_repo.save(spec, {
            "csv_id": request.csv_id,
            "sql_query": request.sql_query,
            "user_prompt": request.user_prompt,
            "dashboard_id": request.dashboard_id,
        }, chart_id=chart_id)

        widget = None
        if request.dashboard_id and saved.ok:
            widget_saved = self.widget_repo.save(request.dashboard_id, spec, {
                "title": request.title,
                "chart_id": chart_id,
                "source_query": request.sql_query,
                "user_prompt": request.user_prompt,
            })
            widget = widget_saved.widget
            if not widget_saved.ok:
                saved = SaveResult(id=chart_id, ok=False, error=widget_saved.error)

        self._emit_save_outcome(event_callback, saved)

        report = PipelineReport(
            success=True,
            saved=saved.ok,
            save_error=saved.error,
            spec=spec,
            widget=widget,
            chart_id=chart_id,
            chart_type=spec.chart_type.value,
            chart_config=spec.to_chart_options(),
            message="Chart generated successfully",
            tool_call_count=len(transcript.invocations),
            tool_names=transcript.tool_names,
            ai_response=transcript.final_text,
            data_preview=sample,
            total_rows=total_rows,
        )
        self._emit(event_callback, PipelineStage.REPORTED, 100, report.message)
        return report

    # ============================================
    # UPDATE
    # ============================================

    def update(
        self,
        request: UpdateRequest,
        event_callback: EventCallback = None
    ) -> PipelineReport:
        """
        Apply an edit instruction to a stored widget and save it in place

        Returns:
            PipelineReport; noop=True (and nothing saved) when no operation applied

        Raises:
            InputError: empty instruction (required even with overrides), or unusable newChartOptions
            DashboardNotFoundError, WidgetNotFoundError: with sibling widget ids
        """
        if not request.update_prompt or not request.update_prompt.strip():
            raise InputError("updatePrompt is required", field="updatePrompt")

        self._emit(event_callback, PipelineStage.RECEIVED, 0, f"Updating widget {request.widget_id}")
        widget = self.widget_repo.fetch(request.dashboard_id, request.widget_id)

        self._emit(event_callback, PipelineStage.DIFFING, 20, f'Interpreting "{request.update_prompt}"')
        diff = self.diff_engine.apply(
            widget.spec,
            request.update_prompt,
            new_chart_options=request.new_chart_options,
            new_title=request.new_title,
            new_chart_type=request.new_chart_type,
        )
        self._emit(event_callback, PipelineStage.APPLIED, 60, f"{len(diff.applied)} change(s), {len(diff.warnings)} warning(s)")

        if diff.noop:
            report = PipelineReport(
                success=True,
                noop=True,
                spec=widget.spec,
                widget=widget,
                chart_type=widget.type,
                chart_config=widget.spec.to_chart_options(),
                warnings=diff.warnings,
                message="No recognized changes; widget left unchanged",
            )
            self._emit(event_callback, PipelineStage.REPORTED, 100, report.message)
            return report

        self._emit(event_callback, PipelineStage.PERSISTING, 75, "Saving widget")
        saved = self.widget_repo.save(request.dashboard_id, diff.spec, {
            "title": diff.title,
            "update_prompt": request.update_prompt,
        }, widget_id=widget.id)
        self._emit_save_outcome(event_callback, saved)

        updated = saved.widget or widget.model_copy(update={
            "type": diff.spec.chart_type.value,
            "title": diff.title or widget.title,
            "spec": diff.spec,
        })
        report = PipelineReport(
            success=True,
            saved=saved.ok,
            save_error=saved.error,
            spec=diff.spec,
            widget=updated,
            chart_id=widget.chart_id,
            chart_type=diff.spec.chart_type.value,
            chart_config=diff.spec.to_chart_options(),
            applied=diff.applied,
            warnings=diff.warnings,
            message=f"Widget updated successfully: {len(diff.applied)} change(s) applied",
        )
        self._emit(event_callback, PipelineStage.REPORTED, 100, report.message)
        return report

    # ============================================
    # HELPERS
    # ============================================

    def _emit_save_outcome(self, event_callback: EventCallback, saved: SaveResult) -> None:
        if saved.ok:
            self._emit(event_callback, PipelineStage.SAVED, 90, f"Saved {saved.id}")
        else:
            logger.warning(f"Persistence failed after successful generation: {saved.error}")
            self._emit(event_callback, PipelineStage.SAVE_FAILED, 90, saved.error)

    @staticmethod
    def _emit(event_callback: EventCallback, stage: PipelineStage, progress: int, message: Optional[str] = None) -> None:
        logger.info(f"[{stage.value}] {message or ''}")
        if event_callback:
            event_callback(StageEvent(stage=stage, progress=progress, message=message))
