"""
Tool catalog for chart synthesis
"""
from vizflow.pipeline.tools.catalog import ToolCatalog, ToolContext, ToolDefinition
from vizflow.pipeline.tools.chart_tools import CHART_TOOLS
from vizflow.pipeline.tools.persistence_tool import SAVE_PREPARED_CHART_TOOL


def build_default_catalog() -> ToolCatalog:
    """Every registered tool; runs expose a subset of it"""
    return ToolCatalog([*CHART_TOOLS, SAVE_PREPARED_CHART_TOOL])


TOOL_CATALOG = build_default_catalog()

__all__ = [
    "ToolCatalog",
    "ToolContext",
    "ToolDefinition",
    "CHART_TOOLS",
    "SAVE_PREPARED_CHART_TOOL",
    "TOOL_CATALOG",
    "build_default_catalog",
]
