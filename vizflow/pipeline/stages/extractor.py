"""
Selects the authoritative chart fragment from an orchestration transcript
"""
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel

from vizflow.core.errors import ChartExtractionError
from vizflow.dtos import (
    CATEGORY_CHART_TYPES,
    ChartSpec,
    ChartType,
    Series,
    ToolInvocation,
    Transcript,
    parse_chart_type,
)
from vizflow.pipeline.tools import TOOL_CATALOG, ToolCatalog

logger = logging.getLogger(__name__)


class ExtractedChart(BaseModel):
    spec: ChartSpec
    chart_type: ChartType
    tool_name: str
    chart_options: Dict[str, Any]  # Raw fragment the spec was canonicalised from


class ResultExtractor:
    """
    Last invocation carrying a usable chart wins

    Models sometimes revise their own chart choice mid-conversation,
    so later calls override earlier ones. The family comes from the
    tool's registration in the catalog.
    """

    def __init__(self, catalog: ToolCatalog = TOOL_CATALOG):
        self.catalog = catalog

    def extract(
        self,
        transcript: Transcript,
        rows: Optional[Sequence[Dict[str, Any]]] = None
    ) -> ExtractedChart:
        """
        Args:
            transcript: Output of ToolOrchestrator.run
            rows: Full query result; when given, series that line up with
                the model's sample are rebuilt from every row

        Raises:
            ChartExtractionError: no invocation yielded a usable fragment
        """
        for invocation in reversed(transcript.invocations):
            fragment, family = self._fragment_of(invocation)
            if not fragment:
                continue
            try:
                spec = ChartSpec.from_chart_options(fragment, family)
            except ValueError as e:
                logger.warning(f"Ignoring unusable fragment from {invocation.tool_name}: {e}")
                continue

            if rows:
                spec = rebind_rows(spec, rows)

            logger.info(f"Extracted {spec.chart_type.value} chart from {invocation.tool_name}")
            return ExtractedChart(
                spec=spec,
                chart_type=spec.chart_type,
                tool_name=invocation.tool_name,
                chart_options=fragment,
            )

        raise ChartExtractionError(
            "Failed to generate chart configuration",
            tool_call_count=len(transcript.invocations),
            tool_names=transcript.tool_names,
            ai_response=transcript.final_text,
        )

    def _fragment_of(self, invocation: ToolInvocation) -> Tuple[Optional[Dict[str, Any]], Optional[ChartType]]:
        """
        Chart tools yield their output under their registered family.
        A chart the model saved itself yields the options it passed in,
        but only once the save succeeded.
        """
        tool = self.catalog.get(invocation.tool_name)
        if tool is None or not invocation.output:
            return None, None
        if tool.family is not None:
            return invocation.output, tool.family
        if tool.saves_chart and invocation.output.get("success"):
            options = invocation.arguments.get("chartOptions")
            if isinstance(options, dict):
                return options, parse_chart_type(invocation.arguments.get("chartType"))
        return None, None


# ============================================
# FULL-DATASET REBINDING
# ============================================

def rebind_rows(spec: ChartSpec, rows: Sequence[Dict[str, Any]]) -> ChartSpec:
    """
    Rebuild categories and series from the full result set

    The model only sees a sample. When the fragment's categories match a
    column of the sample rows and every series matches a numeric column
    (value by value, in row order), the same columns are read from all
    rows. Anything that does not line up is returned unchanged.
    """
    if spec.chart_type not in CATEGORY_CHART_TYPES and spec.chart_type != ChartType.PIE:
        return spec
    categories = spec.axes.categories
    if not categories or len(categories) >= len(rows):
        return spec
    if any(len(s.data) != len(categories) for s in spec.series):
        return spec

    prefix = rows[:len(categories)]
    columns = list(rows[0].keys())

    category_column = _matching_column(columns, prefix, categories, _same_label)
    if category_column is None:
        return spec

    value_columns: List[str] = []
    for series in spec.series:
        column = _matching_column(
            [c for c in columns if c != category_column],
            prefix,
            series.data,
            _same_number,
        )
        if column is None:
            return spec
        value_columns.append(column)

    rebound = spec.model_copy(deep=True)
    rebound.axes.categories = [str(row.get(category_column)) for row in rows]
    rebound.series = [
        Series(name=series.name, color=series.color, data=[_to_number(row.get(column)) for row in rows])
        for series, column in zip(spec.series, value_columns)
    ]

    logger.info(f"Rebound chart to all {len(rows)} rows (model saw {len(categories)})")
    return rebound


def _matching_column(columns, rows, expected, same) -> Optional[str]:
    for column in columns:
        if all(same(row.get(column), value) for row, value in zip(rows, expected)):
            return column
    return None


def _same_label(cell: Any, label: Any) -> bool:
    return cell is not None and str(cell) == str(label)


def _same_number(cell: Any, value: Any) -> bool:
    a, b = _to_number(cell), _to_number(value)
    if a is None or b is None:
        return a is None and b is None and cell is None
    return abs(a - b) <= 1e-9 * max(1.0, abs(a), abs(b))


def _to_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    try:
        return float(value)
    except (TypeError, ValueError):
        return None
