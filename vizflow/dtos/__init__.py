"""
DTOs (Data Transfer Objects)
Internal objects for passing data between layers
"""
from vizflow.dtos.chart_spec import (
    ChartType,
    CATEGORY_CHART_TYPES,
    parse_chart_type,
    Series,
    Axes,
    Styling,
    ChartSpec,
    Widget,
)
from vizflow.dtos.pipeline import (
    GenerationRequest,
    UpdateRequest,
    PipelineStage,
    StageEvent,
    FailureKind,
    ToolInvocation,
    Transcript,
    AppliedChange,
    DiffResult,
    SaveResult,
    PipelineReport,
)

__all__ = [
    "ChartType",
    "CATEGORY_CHART_TYPES",
    "parse_chart_type",
    "Series",
    "Axes",
    "Styling",
    "ChartSpec",
    "Widget",
    "GenerationRequest",
    "UpdateRequest",
    "PipelineStage",
    "StageEvent",
    "FailureKind",
    "ToolInvocation",
    "Transcript",
    "AppliedChange",
    "DiffResult",
    "SaveResult",
    "PipelineReport",
]
