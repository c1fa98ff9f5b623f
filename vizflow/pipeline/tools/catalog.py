"""
Tool registry exposed to the LLM tool-calling runtime

Each tool declares its input schema (a pydantic model, exported as JSON
schema for the model), a deterministic executor, and, for chart tools,
the chart family it produces. The family is attached here at
registration so nothing downstream has to infer it from the tool name.
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Type

from pydantic import BaseModel

from vizflow.dtos import ChartSpec, ChartType, SaveResult

logger = logging.getLogger(__name__)

ChartSaver = Callable[[ChartSpec, Dict[str, Any]], SaveResult]


@dataclass
class ToolContext:
    """Per-request values tool executors may rely on"""
    chart_id: str
    csv_id: str
    sql_query: str
    user_prompt: Optional[str] = None
    save_chart: Optional[ChartSaver] = None


ToolExecutor = Callable[[BaseModel, ToolContext], Dict[str, Any]]


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    description: str
    input_model: Type[BaseModel]
    executor: ToolExecutor
    family: Optional[ChartType] = None
    saves_chart: bool = False  # arguments carry chartOptions and chartType

    def schema(self) -> Dict[str, Any]:
        """OpenAI-style function declaration"""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.input_model.model_json_schema(),
            },
        }

    def execute(self, arguments: Dict[str, Any], context: ToolContext) -> Dict[str, Any]:
        """
        Validate arguments against the input schema and run the executor

        Raises:
            pydantic.ValidationError: arguments do not match the schema
        """
        params = self.input_model.model_validate(arguments)
        return self.executor(params, context)


class ToolCatalog:
    """Ordered, name-keyed set of tools"""

    def __init__(self, tools: Iterable[ToolDefinition] = ()):
        self._tools: Dict[str, ToolDefinition] = {}
        for tool in tools:
            self.register(tool)

    def register(self, tool: ToolDefinition) -> None:
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' is already registered")
        self._tools[tool.name] = tool

    def get(self, name: str) -> Optional[ToolDefinition]:
        return self._tools.get(name)

    def family_of(self, name: str) -> Optional[ChartType]:
        tool = self._tools.get(name)
        return tool.family if tool else None

    def subset(self, names: Iterable[str]) -> "ToolCatalog":
        """
        Restricted catalog for a single run

        Raises:
            KeyError: a requested name is not registered
        """
        selected = []
        for name in names:
            if name not in self._tools:
                raise KeyError(f"Unknown tool '{name}'")
            selected.append(self._tools[name])
        return ToolCatalog(selected)

    def schemas(self) -> List[Dict[str, Any]]:
        return [tool.schema() for tool in self._tools.values()]

    @property
    def names(self) -> List[str]:
        return list(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[ToolDefinition]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)
