"""
Free-text edit instructions -> structural ChartSpec operations

The instruction is split into fragments. Every matcher looks at every
fragment independently and returns an Operation or None, so a new edit
family is one more matcher in MATCHERS and cannot interfere with the
existing ones. Fragments no matcher recognises are reported as warnings.

Operations assign values (legend = False), they never toggle, so applying
the same update twice gives the same spec.
"""
import logging
import re
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from vizflow.core.errors import InputError
from vizflow.dtos import (
    AppliedChange,
    ChartSpec,
    ChartType,
    DiffResult,
    parse_chart_type,
)

logger = logging.getLogger(__name__)

# Application order; a type change must not be clobbered by later passes
OPERATION_ORDER = ["chart_type", "styling", "title", "legend", "axis", "filter"]

COLOR_PALETTE = {
    "blue": "#2563eb",
    "red": "#dc2626",
    "green": "#16a34a",
    "yellow": "#eab308",
    "purple": "#9333ea",
    "orange": "#ea580c",
    "pink": "#ec4899",
    "teal": "#0d9488",
    "black": "#111827",
    "gray": "#6b7280",
    "grey": "#6b7280",
}

TYPE_KEYWORDS = {
    "pie": ChartType.PIE,
    "line": ChartType.LINE,
    "bar": ChartType.BAR,
    "column": ChartType.COLUMN,
    "scatter": ChartType.SCATTER,
    "area": ChartType.AREA,
}

FILLER_FRAGMENTS = {"please", "thanks", "thank you", "ok", "okay"}

_TYPE_WORDS = "|".join(TYPE_KEYWORDS)
_QUOTED = re.compile(r'"([^"]+)"|“([^”]+)”|(?<!\w)\'([^\']+)\'(?!\w)')
_SEPARATOR = re.compile(r"\s*(?:,|;|\.(?=\s|$)|\band\b|\bthen\b|\balso\b)\s*", re.IGNORECASE)
_PLACEHOLDER = "\x00"


class Operation(BaseModel):
    family: str
    params: Dict[str, Any] = Field(default_factory=dict)
    fragment: Optional[str] = None  # None for explicit overrides


class Fragment(BaseModel):
    text: str  # As written
    plain: str  # Lowercased, quoted segments replaced by a placeholder
    quoted: List[str] = Field(default_factory=list)


class SkippedOperation(Exception):
    """Recognised but not applicable to this chart"""


Matcher = Callable[[Fragment], Optional[Operation]]


# ============================================
# FRAGMENTING
# ============================================

def split_instruction(instruction: str) -> List[Fragment]:
    """Quote-aware split on commas, semicolons, sentence ends, and/then/also"""
    fragments: List[Fragment] = []
    quoted: List[str] = []

    def protect(match: re.Match) -> str:
        quoted.append(next(g for g in match.groups() if g is not None))
        return f"{_PLACEHOLDER}{len(quoted) - 1}{_PLACEHOLDER}"

    protected = _QUOTED.sub(protect, instruction.strip())

    for piece in _SEPARATOR.split(protected):
        piece = piece.strip(" .!?")
        if not piece:
            continue
        indexes = [int(i) for i in re.findall(f"{_PLACEHOLDER}(\\d+){_PLACEHOLDER}", piece)]
        text = re.sub(f"{_PLACEHOLDER}(\\d+){_PLACEHOLDER}", lambda m: f'"{quoted[int(m.group(1))]}"', piece)
        plain = re.sub(f"{_PLACEHOLDER}\\d+{_PLACEHOLDER}", f" {_PLACEHOLDER} ", piece).lower()
        if plain.strip() in FILLER_FRAGMENTS:
            continue
        fragments.append(Fragment(text=text, plain=" ".join(plain.split()), quoted=[quoted[i] for i in indexes]))

    return fragments


def _unquoted_tail(fragment: Fragment, pattern: str) -> Optional[str]:
    """Text after `pattern` in the original casing, for instructions without quotes"""
    match = re.search(pattern + r"\s+(.+)$", fragment.text, re.IGNORECASE)
    if not match:
        return None
    value = match.group(1).strip().strip("\"'“”").rstrip(".!?")
    return value or None


# ============================================
# MATCHERS (fragment -> operation or None)
# ============================================

_LABEL_TRIGGER = re.compile(
    r"\b(?:title|heading|name it|call it|rename|label)\b|\b[xy][- ]?axis\b|\b(?:horizontal|vertical) axis\b"
)


def match_chart_type(fragment: Fragment) -> Optional[Operation]:
    plain = fragment.plain
    # Words after a title or axis trigger are label text, not a chart type
    trigger = _LABEL_TRIGGER.search(plain)
    if trigger:
        plain = plain[:trigger.start()]
    patterns = [
        rf"\b({_TYPE_WORDS})s?\s+(?:chart|graph|plot|diagram)s?\b",
        rf"\b(?:to|into|as)\s+(?:an?\s+)?({_TYPE_WORDS})s?\b",
        rf"\b(?:make|turn)\s+(?:it|this|the chart)\s+(?:into\s+)?(?:an?\s+)?({_TYPE_WORDS})s?\b",
        rf"\bchart type\b.*?\b({_TYPE_WORDS})\b",
    ]
    for pattern in patterns:
        match = re.search(pattern, plain)
        if match:
            return Operation(
                family="chart_type",
                params={"chart_type": TYPE_KEYWORDS[match.group(1)]},
                fragment=fragment.text,
            )
    return None


def match_styling(fragment: Fragment) -> Optional[Operation]:
    found: List[Tuple[int, str]] = []
    for name, hex_code in COLOR_PALETTE.items():
        for match in re.finditer(rf"\b{name}\b", fragment.plain):
            found.append((match.start(), hex_code))
    for match in re.finditer(r"#[0-9a-f]{6}\b", fragment.plain):
        found.append((match.start(), match.group(0)))

    colors: List[str] = []
    for _, code in sorted(found):
        if code not in colors:
            colors.append(code)
    if not colors:
        return None
    return Operation(family="styling", params={"colors": colors}, fragment=fragment.text)


def match_title(fragment: Fragment) -> Optional[Operation]:
    plain = fragment.plain
    if not re.search(r"\b(title|heading|name it|call it|rename)\b", plain):
        return None
    if re.search(r"\baxis\b", plain):
        return None

    if fragment.quoted:
        title = fragment.quoted[0]
    else:
        title = _unquoted_tail(fragment, r"\b(?:title|heading)\s+(?:to|as)")
    if not title:
        return None
    return Operation(family="title", params={"title": title}, fragment=fragment.text)


def match_legend(fragment: Fragment) -> Optional[Operation]:
    plain = fragment.plain
    if not re.search(r"\blegend\b", plain):
        return None
    if re.search(r"\b(hide|remove|disable|drop|without|no)\b|\bturn off\b|\bget rid of\b|\bdon'?t\b|\bdo not\b", plain):
        visible = False
    elif re.search(r"\b(show|add|display|enable|include)\b|\bturn on\b|\bbring back\b", plain):
        visible = True
    else:
        return None
    return Operation(family="legend", params={"legend": visible}, fragment=fragment.text)


def match_axis(fragment: Fragment) -> Optional[Operation]:
    plain = fragment.plain
    params: Dict[str, Any] = {}

    axis_match = re.search(r"\b([xy])[- ]?axis\b|\b(horizontal|vertical) axis\b", plain)
    if axis_match:
        axis = axis_match.group(1) or ("x" if axis_match.group(2) == "horizontal" else "y")
        label = fragment.quoted[0] if fragment.quoted else _unquoted_tail(fragment, r"\b(?:to|as)")
        if label:
            params["axis"] = axis
            params["title"] = label

    if re.search(r"\blog(?:arithmic)?\s+scale\b|\blogarithmic\b", plain):
        params["y_type"] = "logarithmic"
    elif re.search(r"\blinear\s+scale\b", plain):
        params["y_type"] = "linear"

    if re.search(r"\brotate\b", plain) and re.search(r"\blabels?\b", plain):
        params["label_rotation"] = -45

    if not params:
        return None
    return Operation(family="axis", params=params, fragment=fragment.text)


def match_filter(fragment: Fragment) -> Optional[Operation]:
    """Only top-N / first-N / last-N and simple thresholds"""
    plain = fragment.plain

    top = re.search(r"\btop\s+(\d+)\b", plain)
    if top:
        return Operation(family="filter", params={"mode": "top", "n": int(top.group(1))}, fragment=fragment.text)

    first = re.search(r"\b(?:first|only(?:\s+show)?(?:\s+the)?(?:\s+first)?)\s+(\d+)\b", plain)
    if first:
        return Operation(family="filter", params={"mode": "first", "n": int(first.group(1))}, fragment=fragment.text)

    last = re.search(r"\blast\s+(\d+)\b", plain)
    if last:
        return Operation(family="filter", params={"mode": "last", "n": int(last.group(1))}, fragment=fragment.text)

    threshold = re.search(
        r"\b(above|over|greater than|more than|at least|below|under|less than|at most)\s+\$?(-?\d[\d,]*(?:\.\d+)?)",
        plain,
    )
    if threshold:
        direction = "above" if threshold.group(1) in {"above", "over", "greater than", "more than", "at least"} else "below"
        inclusive = threshold.group(1) in {"at least", "at most"}
        return Operation(
            family="filter",
            params={
                "mode": direction,
                "value": float(threshold.group(2).replace(",", "")),
                "inclusive": inclusive,
            },
            fragment=fragment.text,
        )
    return None


MATCHERS: List[Matcher] = [
    match_chart_type,
    match_styling,
    match_title,
    match_legend,
    match_axis,
    match_filter,
]


# ============================================
# APPLIERS (mutate a spec copy, return a description)
# ============================================

def _compatibility_issue(spec: ChartSpec, target: ChartType) -> Optional[str]:
    points = spec.point_count
    if target == ChartType.PIE:
        if len(spec.series) > 1:
            return "pie charts require single series data"
        if not spec.has_categories:
            return "pie charts require categorical data"
        if points > 20:
            return "too many data points for a pie chart"
    if target in (ChartType.LINE, ChartType.AREA, ChartType.SCATTER) and points < 2:
        return f"{target.value} charts require at least 2 data points"
    if target in (ChartType.BAR, ChartType.COLUMN) and not spec.has_categories:
        return f"{target.value} charts require categorical data"
    return None


def apply_chart_type(spec: ChartSpec, params: Dict[str, Any]) -> str:
    target: ChartType = params["chart_type"]
    previous = spec.chart_type
    if not params.get("force"):
        issue = _compatibility_issue(spec, target)
        if issue:
            raise SkippedOperation(issue)
    spec.chart_type = target
    return f"Chart type changed from {previous.value} to {target.value}"


def apply_styling(spec: ChartSpec, params: Dict[str, Any]) -> str:
    colors: List[str] = params["colors"]
    spec.styling.colors = list(colors)
    for i, series in enumerate(spec.series):
        series.color = colors[i % len(colors)]
    return f"Colors set to {', '.join(colors)}"


def apply_title(spec: ChartSpec, params: Dict[str, Any]) -> str:
    spec.styling.title = params["title"]
    return f'Title set to "{params["title"]}"'


def apply_legend(spec: ChartSpec, params: Dict[str, Any]) -> str:
    spec.styling.legend = params["legend"]
    return "Legend shown" if params["legend"] else "Legend hidden"


def apply_axis(spec: ChartSpec, params: Dict[str, Any]) -> str:
    changes = []
    if "title" in params:
        if params["axis"] == "x":
            spec.axes.x_title = params["title"]
        else:
            spec.axes.y_title = params["title"]
        changes.append(f'{params["axis"]}-axis title set to "{params["title"]}"')
    if "y_type" in params:
        spec.axes.y_type = params["y_type"]
        changes.append(f"y-axis scale set to {params['y_type']}")
    if "label_rotation" in params:
        spec.axes.label_rotation = params["label_rotation"]
        changes.append(f"x-axis labels rotated {params['label_rotation']} degrees")
    return "; ".join(changes)


def apply_filter(spec: ChartSpec, params: Dict[str, Any]) -> str:
    if spec.chart_type in (ChartType.SCATTER, ChartType.MAP):
        raise SkippedOperation(f"filtering is not supported for {spec.chart_type.value} charts")

    values = spec.series[0].data
    numeric = [v if isinstance(v, (int, float)) and not isinstance(v, bool) else None for v in values]
    total = len(values)
    mode = params["mode"]

    if mode in ("top", "first", "last"):
        n = params["n"]
        if n <= 0:
            raise SkippedOperation("the number of points to keep must be positive")
        if mode == "first":
            keep = list(range(min(n, total)))
        elif mode == "last":
            keep = list(range(max(total - n, 0), total))
        else:
            if any(v is None for v in numeric):
                raise SkippedOperation("top-N needs numeric values")
            ranked = sorted(range(total), key=lambda i: numeric[i], reverse=True)
            keep = sorted(ranked[:n])
        description = f"Kept {mode} {n} of {total} points"
    else:
        threshold = params["value"]
        inclusive = params.get("inclusive", False)

        def passes(v: Optional[float]) -> bool:
            if v is None:
                return False
            if mode == "above":
                return v >= threshold if inclusive else v > threshold
            return v <= threshold if inclusive else v < threshold

        keep = [i for i, v in enumerate(numeric) if passes(v)]
        if not keep:
            raise SkippedOperation(f"no points are {mode} {threshold:g}")
        description = f"Kept {len(keep)} of {total} points {mode} {threshold:g}"

    if spec.axes.categories and len(spec.axes.categories) == total:
        spec.axes.categories = [spec.axes.categories[i] for i in keep]
    for series in spec.series:
        if len(series.data) == total:
            series.data = [series.data[i] for i in keep]
    return description


APPLIERS: Dict[str, Callable[[ChartSpec, Dict[str, Any]], str]] = {
    "chart_type": apply_chart_type,
    "styling": apply_styling,
    "title": apply_title,
    "legend": apply_legend,
    "axis": apply_axis,
    "filter": apply_filter,
}


# ============================================
# ENGINE
# ============================================

class UpdateDiffEngine:
    """
    Applies an edit instruction (plus explicit overrides) to a ChartSpec

    Example:
        engine = UpdateDiffEngine()
        result = engine.apply(spec, "make this a pie chart and hide the legend")
        result.spec.chart_type   # ChartType.PIE
        result.applied           # 2 entries
    """

    def __init__(self, matchers: Optional[List[Matcher]] = None):
        self.matchers = matchers if matchers is not None else MATCHERS

    def interpret(self, instruction: str) -> Tuple[List[Operation], List[str]]:
        """Recognised operations and warnings for unrecognised fragments"""
        operations: List[Operation] = []
        warnings: List[str] = []

        for fragment in split_instruction(instruction):
            found = [op for op in (matcher(fragment) for matcher in self.matchers) if op is not None]
            if found:
                operations.extend(found)
            else:
                warnings.append(f"Unsupported instruction ignored: '{fragment.text}'")

        return operations, warnings

    def apply(
        self,
        spec: ChartSpec,
        instruction: str,
        new_chart_options: Optional[Dict[str, Any]] = None,
        new_title: Optional[str] = None,
        new_chart_type: Optional[ChartType] = None,
    ) -> DiffResult:
        """
        Raises:
            InputError: new_chart_options is not a usable chart configuration
        """
        result_spec = spec.model_copy(deep=True)
        applied: List[AppliedChange] = []
        warnings: List[str] = []

        if new_chart_options is not None:
            chart_type = (
                new_chart_type
                or parse_chart_type((new_chart_options.get("chart") or {}).get("type"))
                or spec.chart_type
            )
            try:
                result_spec = ChartSpec.from_chart_options(new_chart_options, chart_type)
            except ValueError as e:
                raise InputError(f"newChartOptions is not a valid chart configuration: {e}", field="newChartOptions")
            applied.append(AppliedChange(
                operation="chart_options",
                description=f"Chart options replaced ({chart_type.value})",
            ))
            operations: List[Operation] = []
            new_chart_type = None
        else:
            operations, warnings = self.interpret(instruction)

        if new_chart_type is not None:
            operations = [op for op in operations if op.family != "chart_type"]
            operations.append(Operation(family="chart_type", params={"chart_type": new_chart_type, "force": True}))
        if new_title is not None:
            operations = [op for op in operations if op.family != "title"]
            operations.append(Operation(family="title", params={"title": new_title}))

        operations.sort(key=lambda op: OPERATION_ORDER.index(op.family))

        title: Optional[str] = None
        for op in operations:
            try:
                description = APPLIERS[op.family](result_spec, op.params)
            except SkippedOperation as e:
                warnings.append(f"Ignored '{op.fragment or op.family}': {e}")
                continue
            applied.append(AppliedChange(operation=op.family, description=description, fragment=op.fragment))
            if op.family == "title":
                title = op.params["title"]

        logger.info(f"Diff applied {len(applied)} operation(s), {len(warnings)} warning(s)")
        for warning in warnings:
            logger.info(f"  warning: {warning}")

        return DiffResult(spec=result_spec, applied=applied, warnings=warnings, title=title)
