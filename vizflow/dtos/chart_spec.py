"""
Canonical chart representation

ChartSpec is renderer-agnostic. Model output (Highcharts-style options)
is canonicalised on the way in by from_chart_options and rendered back
out by to_chart_options.
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ChartType(str, Enum):
    LINE = "line"
    COLUMN = "column"
    BAR = "bar"
    PIE = "pie"
    SCATTER = "scatter"
    AREA = "area"
    MAP = "map"


# Renderer sub-types that collapse onto a canonical family
_TYPE_ALIASES = {
    "spline": ChartType.LINE,
    "areaspline": ChartType.AREA,
}

CATEGORY_CHART_TYPES = {ChartType.LINE, ChartType.COLUMN, ChartType.BAR, ChartType.AREA}


def parse_chart_type(value: Any) -> Optional[ChartType]:
    """Resolve a chart type name (or renderer alias), None if unknown"""
    if isinstance(value, ChartType):
        return value
    if not isinstance(value, str):
        return None
    name = value.strip().lower()
    if name in _TYPE_ALIASES:
        return _TYPE_ALIASES[name]
    try:
        return ChartType(name)
    except ValueError:
        return None


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Series(CamelModel):
    name: Optional[str] = None
    data: List[Any] = Field(default_factory=list)
    color: Optional[str] = None


class Axes(CamelModel):
    categories: Optional[List[str]] = None
    x_title: Optional[str] = None
    y_title: Optional[str] = None
    y_type: Optional[str] = None  # linear | logarithmic | datetime
    label_rotation: Optional[int] = None


class Styling(CamelModel):
    """Style keys; None means inherit the renderer default"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    colors: Optional[List[str]] = None
    legend: Optional[bool] = None
    title: Optional[str] = None
    subtitle: Optional[str] = None


class ChartSpec(CamelModel):
    chart_type: ChartType
    series: List[Series]
    axes: Axes = Field(default_factory=Axes)
    styling: Styling = Field(default_factory=Styling)

    @field_validator("series")
    @classmethod
    def _require_series(cls, value: List[Series]) -> List[Series]:
        if not value:
            raise ValueError("chart must have at least one data series")
        if not any(s.data for s in value):
            raise ValueError("chart must have at least one data point")
        return value

    @property
    def point_count(self) -> int:
        return len(self.series[0].data)

    @property
    def has_categories(self) -> bool:
        return bool(self.axes.categories)

    @classmethod
    def from_chart_options(
        cls,
        options: Dict[str, Any],
        chart_type: Optional[ChartType] = None
    ) -> "ChartSpec":
        """
        Canonicalise a Highcharts-style options fragment

        Blocks of the wrong shape (a string where an object or list is
        expected) are treated as absent.

        Raises:
            ValueError: unknown chart type, no series or no data points
                (pydantic ValidationError is a ValueError subclass)
        """
        if not isinstance(options, dict):
            raise ValueError("chart options must be an object")

        raw_series = [s for s in _list_of(options.get("series")) if isinstance(s, dict)]

        resolved = chart_type or parse_chart_type(_block(options.get("chart")).get("type"))
        if resolved is None and raw_series:
            resolved = parse_chart_type(raw_series[0].get("type"))
        if resolved is None:
            raise ValueError("could not determine chart type from options")

        x_axis = _first_axis(options.get("xAxis"))
        y_axis = _first_axis(options.get("yAxis"))
        categories = _list_of(x_axis.get("categories"))
        categories = [str(c) for c in categories] if categories else None

        series: List[Series] = []
        for raw in raw_series:
            data = _list_of(raw.get("data"))
            if resolved == ChartType.SCATTER:
                data = [_as_pair(point) for point in data]
            elif resolved != ChartType.MAP:
                names, data = _split_points(data)
                if names and not categories:
                    categories = names
            name = raw.get("name")
            series.append(Series(
                name=str(name) if name is not None else None,
                data=data,
                color=raw.get("color"),
            ))

        styling_kwargs: Dict[str, Any] = {
            "title": _text_of(options.get("title")),
            "subtitle": _text_of(options.get("subtitle")),
            "colors": _list_of(options.get("colors")) or None,
        }
        legend = options.get("legend")
        if isinstance(legend, dict) and legend.get("enabled") is not None:
            styling_kwargs["legend"] = bool(legend["enabled"])

        axes = Axes(
            categories=categories,
            x_title=_text_of(x_axis.get("title")),
            y_title=_text_of(y_axis.get("title")),
            y_type=y_axis.get("type"),
            label_rotation=_block(x_axis.get("labels")).get("rotation"),
        )

        return cls(
            chart_type=resolved,
            series=series,
            axes=axes,
            styling=Styling(**styling_kwargs),
        )

    def to_chart_options(self) -> Dict[str, Any]:
        """Render to Highcharts-style options"""
        options: Dict[str, Any] = {
            "chart": {"type": self.chart_type.value},
            "credits": {"enabled": False},
        }
        if self.styling.title is not None:
            options["title"] = {"text": self.styling.title}
        if self.styling.subtitle is not None:
            options["subtitle"] = {"text": self.styling.subtitle}
        if self.styling.colors:
            options["colors"] = list(self.styling.colors)
        if self.styling.legend is not None:
            options["legend"] = {"enabled": self.styling.legend}

        if self.chart_type == ChartType.PIE:
            options["series"] = [self._pie_series(s) for s in self.series]
            return options

        x_axis: Dict[str, Any] = {}
        if self.axes.categories:
            x_axis["categories"] = list(self.axes.categories)
        if self.axes.x_title is not None:
            x_axis["title"] = {"text": self.axes.x_title}
        if self.axes.label_rotation is not None:
            x_axis["labels"] = {"rotation": self.axes.label_rotation}
        y_axis: Dict[str, Any] = {}
        if self.axes.y_title is not None:
            y_axis["title"] = {"text": self.axes.y_title}
        if self.axes.y_type is not None:
            y_axis["type"] = self.axes.y_type
        if x_axis:
            options["xAxis"] = x_axis
        if y_axis:
            options["yAxis"] = y_axis

        options["series"] = [_drop_none({"name": s.name, "data": list(s.data), "color": s.color}) for s in self.series]
        return options

    def _pie_series(self, series: Series) -> Dict[str, Any]:
        categories = self.axes.categories or []
        data = []
        for i, value in enumerate(series.data):
            if i < len(categories) and not isinstance(value, dict):
                data.append({"name": categories[i], "y": value})
            else:
                data.append(value)
        return _drop_none({"name": series.name, "data": data, "color": series.color})


class Widget(CamelModel):
    """Dashboard-scoped, persisted instance of a ChartSpec"""
    id: str
    chart_id: Optional[str] = None
    type: str
    title: str
    spec: ChartSpec
    source_query: Optional[str] = None
    user_prompt: Optional[str] = None
    update_prompt: Optional[str] = None
    created_at: datetime
    last_updated: datetime

    def to_record(self) -> Dict[str, Any]:
        """JSON-ready dict for the dashboards.widgets array"""
        record = self.model_dump(mode="json", by_alias=True)
        record["highchartsConfig"] = self.spec.to_chart_options()
        return record

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Widget":
        """Load a stored widget, including ones saved with only highchartsConfig"""
        data = dict(record)
        if "spec" not in data and data.get("highchartsConfig"):
            data["spec"] = ChartSpec.from_chart_options(
                data["highchartsConfig"],
                parse_chart_type(data.get("type")),
            )
        metadata = data.get("metadata") or {}
        data.setdefault("sourceQuery", metadata.get("sqlQuery"))
        data.setdefault("userPrompt", metadata.get("userPrompt"))
        data.setdefault("createdAt", metadata.get("createdAt"))
        data.setdefault("lastUpdated", metadata.get("lastUpdated") or data.get("createdAt"))
        data.setdefault("title", "Untitled Chart")
        if not data.get("type"):
            spec = data.get("spec")
            if isinstance(spec, ChartSpec):
                data["type"] = spec.chart_type.value
            elif isinstance(spec, dict):
                data["type"] = spec.get("chartType") or spec.get("chart_type")
        return cls.model_validate(data)


# ============================================
# HELPERS
# ============================================

def _block(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _list_of(value: Any) -> List[Any]:
    return list(value) if isinstance(value, (list, tuple)) else []


def _first_axis(axis: Any) -> Dict[str, Any]:
    if isinstance(axis, list):
        axis = axis[0] if axis else None
    return _block(axis)


def _text_of(value: Any) -> Optional[str]:
    if isinstance(value, dict):
        return value.get("text")
    if isinstance(value, str):
        return value
    return None


def _as_pair(point: Any) -> Any:
    if isinstance(point, dict) and "x" in point and "y" in point:
        return [point["x"], point["y"]]
    return point


def _split_points(data: List[Any]) -> Tuple[Optional[List[str]], List[Any]]:
    """Split {name, y} or [name, y] points into category names and values"""
    if not data:
        return None, data
    if all(isinstance(p, dict) and "y" in p for p in data):
        names = [str(p["name"]) for p in data if "name" in p]
        return (names if len(names) == len(data) else None), [p["y"] for p in data]
    if all(isinstance(p, (list, tuple)) and len(p) == 2 and isinstance(p[0], str) for p in data):
        return [p[0] for p in data], [p[1] for p in data]
    return None, data


def _drop_none(values: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in values.items() if v is not None}
