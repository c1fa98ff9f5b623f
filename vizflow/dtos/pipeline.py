"""
Pipeline DTOs
Internal objects passed between orchestrator, extractor, diff engine and facade
"""
from enum import Enum
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field

from vizflow.dtos.chart_spec import ChartSpec, ChartType, Widget


class GenerationRequest(BaseModel):
    """Ephemeral input of the generate path"""
    sql_query: str
    sql_results: List[Dict[str, Any]]
    user_prompt: Optional[str] = None
    csv_id: str
    dashboard_id: Optional[str] = None  # Also add a widget to this dashboard
    title: Optional[str] = None


class UpdateRequest(BaseModel):
    """Ephemeral input of the update path"""
    dashboard_id: str
    widget_id: str
    update_prompt: str
    new_chart_options: Optional[Dict[str, Any]] = None
    new_title: Optional[str] = None
    new_chart_type: Optional[ChartType] = None


class PipelineStage(str, Enum):
    RECEIVED = "received"
    ORCHESTRATING = "orchestrating"
    DIFFING = "diffing"
    EXTRACTED = "extracted"
    APPLIED = "applied"
    PERSISTING = "persisting"
    SAVED = "saved"
    SAVE_FAILED = "save_failed"
    REPORTED = "reported"


class StageEvent(BaseModel):
    """Emitted at every pipeline state transition"""
    stage: PipelineStage
    progress: int  # 0-100
    message: Optional[str] = None


class FailureKind(str, Enum):
    EXTRACTION = "extraction"


class ToolInvocation(BaseModel):
    """One tool call made by the model and what it produced"""
    tool_name: str
    call_id: Optional[str] = None
    arguments: Dict[str, Any] = Field(default_factory=dict)
    output: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    turn: int = 0


class Transcript(BaseModel):
    """Full record of one orchestration run"""
    invocations: List[ToolInvocation] = Field(default_factory=list)
    final_text: str = ""
    turns: int = 0

    @property
    def tool_names(self) -> List[str]:
        return [inv.tool_name for inv in self.invocations]


class AppliedChange(BaseModel):
    """One structural operation applied by the diff engine"""
    operation: str  # chart_type | styling | title | legend | axis | filter | chart_options
    description: str
    fragment: Optional[str] = None  # Instruction text it came from; None for overrides


class DiffResult(BaseModel):
    spec: ChartSpec
    applied: List[AppliedChange] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    title: Optional[str] = None  # New widget title when a title op was applied

    @property
    def noop(self) -> bool:
        return not self.applied


class SaveResult(BaseModel):
    """Outcome of a PersistenceGateway write"""
    id: Optional[str] = None
    ok: bool
    error: Optional[str] = None
    widget: Optional[Widget] = None


class PipelineReport(BaseModel):
    """Single structured result of synthesize() and update()"""
    success: bool
    saved: bool = False
    noop: bool = False
    failure: Optional[FailureKind] = None
    error: Optional[str] = None
    message: Optional[str] = None

    spec: Optional[ChartSpec] = None
    widget: Optional[Widget] = None
    chart_id: Optional[str] = None
    chart_type: Optional[str] = None
    chart_config: Optional[Dict[str, Any]] = None

    applied: List[AppliedChange] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)

    # Diagnostics
    tool_call_count: int = 0
    tool_names: List[str] = Field(default_factory=list)
    ai_response: Optional[str] = None
    data_preview: List[Dict[str, Any]] = Field(default_factory=list)
    total_rows: int = 0
    save_error: Optional[str] = None
