"""
Pipeline stages (ordered execution flow)

Generate path:
1. orchestrator → Bounded tool-calling conversation
2. extractor → Pick the authoritative chart fragment

Update path:
1. diff_engine → Instruction to structural ChartSpec operations
"""
from vizflow.pipeline.stages.orchestrator import (
    ToolOrchestrator,
    OrchestratorConfig,
    azure_completion,
)
from vizflow.pipeline.stages.extractor import (
    ResultExtractor,
    ExtractedChart,
    rebind_rows,
)
from vizflow.pipeline.stages.diff_engine import (
    UpdateDiffEngine,
    Operation,
    MATCHERS,
    COLOR_PALETTE,
    split_instruction,
)

__all__ = [
    # Generate
    "ToolOrchestrator",
    "OrchestratorConfig",
    "azure_completion",
    "ResultExtractor",
    "ExtractedChart",
    "rebind_rows",
    # Update
    "UpdateDiffEngine",
    "Operation",
    "MATCHERS",
    "COLOR_PALETTE",
    "split_instruction",
]
