"""
savePreparedChart - lets the model persist the chart it just built
"""
import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from vizflow.dtos import ChartSpec, parse_chart_type
from vizflow.pipeline.tools.catalog import ToolContext, ToolDefinition

logger = logging.getLogger(__name__)


class SavePreparedChartInput(BaseModel):
    csvId: str = Field(..., description="UUID of the CSV file this chart is based on")
    sqlQuery: str = Field(..., description="The SQL query that generated the data")
    chartOptions: Dict[str, Any] = Field(..., description="Complete Highcharts configuration object")
    chartType: str = Field(..., description="Type of chart (line, bar, pie, scatter, etc.)")
    userPrompt: Optional[str] = Field(None, description="Original user question/prompt")


def save_prepared_chart(params: SavePreparedChartInput, context: ToolContext) -> Dict[str, Any]:
    """
    Canonicalise and upsert the chart under the request's chart id

    Writes go to context.chart_id, so calling this tool several times in
    one run (or the facade saving again afterwards) replaces one row
    instead of creating duplicates. Request-scoped values (csv id, SQL)
    come from the context, not from the model's arguments.
    """
    if context.save_chart is None:
        return {"success": False, "error": "Chart persistence is not available for this run"}

    try:
        spec = ChartSpec.from_chart_options(params.chartOptions, parse_chart_type(params.chartType))
    except ValueError as e:
        logger.warning(f"savePreparedChart rejected invalid options: {e}")
        return {"success": False, "error": f"Invalid chart options: {e}"}

    result = context.save_chart(spec, {
        "csv_id": context.csv_id,
        "sql_query": context.sql_query,
        "user_prompt": params.userPrompt or context.user_prompt,
    })
    if not result.ok:
        return {"success": False, "error": result.error}

    return {
        "success": True,
        "chartId": result.id,
        "message": f"Chart configuration saved successfully. Type: {spec.chart_type.value}",
    }


SAVE_PREPARED_CHART_TOOL = ToolDefinition(
    name="savePreparedChart",
    description="Save the prepared chart configuration to the charts table",
    input_model=SavePreparedChartInput,
    executor=save_prepared_chart,
    saves_chart=True,
)
