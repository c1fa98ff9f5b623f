"""
Chart generation tools, one per chart family

Input schemas mirror the subset of Highcharts options the model is
allowed to fill in. Unknown keys pass through untouched.
"""
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from vizflow.dtos import ChartType
from vizflow.pipeline.tools.catalog import ToolContext, ToolDefinition, ToolExecutor


class _Passthrough(BaseModel):
    model_config = ConfigDict(extra="allow")


# ===================================
# COMMON OPTION BLOCKS
# ===================================

class TitleOptions(_Passthrough):
    text: Optional[str] = None
    align: Optional[Literal["left", "center", "right"]] = None


class AxisTitle(_Passthrough):
    text: Optional[str] = None


class AxisOptions(_Passthrough):
    categories: Optional[List[str]] = Field(None, description="Category labels for the axis")
    title: Optional[AxisTitle] = None
    type: Optional[Literal["linear", "logarithmic", "datetime", "category"]] = None
    min: Optional[float] = None
    max: Optional[float] = None


class LegendOptions(_Passthrough):
    enabled: Optional[bool] = None
    align: Optional[Literal["left", "center", "right"]] = None
    verticalAlign: Optional[Literal["top", "middle", "bottom"]] = None
    layout: Optional[Literal["horizontal", "vertical", "proximate"]] = None


class TooltipOptions(_Passthrough):
    enabled: Optional[bool] = None
    shared: Optional[bool] = None


class ChartFrame(_Passthrough):
    type: Optional[str] = None
    width: Optional[float] = None
    height: Optional[float] = None
    backgroundColor: Optional[str] = None


class _ChartOptionsBase(_Passthrough):
    chart: Optional[ChartFrame] = None
    title: Optional[TitleOptions] = None
    subtitle: Optional[TitleOptions] = None
    tooltip: Optional[TooltipOptions] = None
    legend: Optional[LegendOptions] = None
    colors: Optional[List[str]] = Field(None, description="Global color palette for series")
    plotOptions: Optional[Dict[str, Any]] = None


# ===================================
# PER-FAMILY SCHEMAS
# ===================================

class BasicSeries(_Passthrough):
    name: Optional[str] = Field(None, description="Series name shown in legend")
    data: List[Optional[float]] = Field(..., min_length=1, description="Simple numeric values for the data points")
    color: Optional[str] = Field(None, description="Hex color code or named color")


class BasicChartOptions(_ChartOptionsBase):
    """Line, column, bar and area charts"""
    xAxis: Optional[Union[AxisOptions, List[AxisOptions]]] = None
    yAxis: Optional[Union[AxisOptions, List[AxisOptions]]] = None
    series: List[BasicSeries] = Field(..., min_length=1, description="Array of data series to display")


class ScatterSeries(_Passthrough):
    name: Optional[str] = None
    data: List[List[float]] = Field(..., min_length=1, description="Array of [x, y] coordinate pairs")
    color: Optional[str] = None

    @field_validator("data")
    @classmethod
    def _pairs_only(cls, value: List[List[float]]) -> List[List[float]]:
        for point in value:
            if len(point) != 2:
                raise ValueError("scatter points must be [x, y] pairs")
        return value


class ScatterChartOptions(_ChartOptionsBase):
    xAxis: Optional[Union[AxisOptions, List[AxisOptions]]] = None
    yAxis: Optional[Union[AxisOptions, List[AxisOptions]]] = None
    series: List[ScatterSeries] = Field(..., min_length=1, description="Array of data series with coordinate pairs")


class PieSlice(_Passthrough):
    name: str = Field(..., description="Name of the pie slice")
    y: float = Field(..., description="Value/size of the slice")
    color: Optional[str] = None
    sliced: Optional[bool] = Field(None, description="Whether the slice should be separated from the pie")


class PieSeries(_Passthrough):
    name: Optional[str] = None
    data: List[PieSlice] = Field(..., min_length=1, description="Array of pie slices with names and values")
    innerSize: Optional[str] = Field(None, description='Creates a donut chart if set (e.g., "50%")')


class PieChartOptions(_ChartOptionsBase):
    series: List[PieSeries] = Field(..., min_length=1, description="Pie chart series (typically only one series)")


class BasicChartInput(BaseModel):
    chartOptions: BasicChartOptions


class ScatterChartInput(BaseModel):
    chartOptions: ScatterChartOptions


class PieChartInput(BaseModel):
    chartOptions: PieChartOptions


# ===================================
# EXECUTORS
# ===================================

def _chart_executor(family: ChartType) -> ToolExecutor:
    """Executor that returns the validated options with common defaults"""

    def execute(params: BaseModel, context: ToolContext) -> Dict[str, Any]:
        options = params.chartOptions.model_dump(exclude_none=True)
        chart = dict(options.get("chart") or {})
        chart["type"] = family.value
        options["chart"] = chart
        return {"credits": {"enabled": False}, **options}

    return execute


LINE_CHART_TOOL = ToolDefinition(
    name="generateLineChart",
    description=(
        "Generate a line or spline chart. Best for showing trends over time or "
        "continuous data. Uses simple numeric arrays for data."
    ),
    input_model=BasicChartInput,
    executor=_chart_executor(ChartType.LINE),
    family=ChartType.LINE,
)

AREA_CHART_TOOL = ToolDefinition(
    name="generateAreaChart",
    description=(
        "Generate an area chart. Best for showing volume, cumulative values, or "
        "emphasizing magnitude of change over time."
    ),
    input_model=BasicChartInput,
    executor=_chart_executor(ChartType.AREA),
    family=ChartType.AREA,
)

COLUMN_CHART_TOOL = ToolDefinition(
    name="generateColumnChart",
    description=(
        "Generate a column (vertical bar) chart. Best for comparing values across "
        "categories, especially with many data points."
    ),
    input_model=BasicChartInput,
    executor=_chart_executor(ChartType.COLUMN),
    family=ChartType.COLUMN,
)

BAR_CHART_TOOL = ToolDefinition(
    name="generateBarChart",
    description=(
        "Generate a bar (horizontal) chart. Best for comparing values across "
        "categories, especially when category names are long."
    ),
    input_model=BasicChartInput,
    executor=_chart_executor(ChartType.BAR),
    family=ChartType.BAR,
)

SCATTER_CHART_TOOL = ToolDefinition(
    name="generateScatterChart",
    description=(
        "Generate a scatter plot. Best for showing distribution, correlation, or "
        "relationship between two variables. Uses [x, y] coordinate pairs."
    ),
    input_model=ScatterChartInput,
    executor=_chart_executor(ChartType.SCATTER),
    family=ChartType.SCATTER,
)

PIE_CHART_TOOL = ToolDefinition(
    name="generatePieChart",
    description=(
        "Generate a pie or donut chart. Best for showing proportions and "
        "percentages of a whole. Use innerSize to create a donut chart."
    ),
    input_model=PieChartInput,
    executor=_chart_executor(ChartType.PIE),
    family=ChartType.PIE,
)

CHART_TOOLS = [
    LINE_CHART_TOOL,
    AREA_CHART_TOOL,
    COLUMN_CHART_TOOL,
    BAR_CHART_TOOL,
    SCATTER_CHART_TOOL,
    PIE_CHART_TOOL,
]
