"""
Bounded tool-calling conversation with the LLM
"""
import json
import logging
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError

from vizflow.core.config import settings
from vizflow.dtos import ToolInvocation, Transcript
from vizflow.pipeline.llm.client import call_llm_with_tools
from vizflow.pipeline.llm.parsers import parse_tool_arguments
from vizflow.pipeline.tools import TOOL_CATALOG, ToolCatalog, ToolContext

logger = logging.getLogger(__name__)

# (messages, tool schemas, config) -> assistant message
CompletionFn = Callable[[List[Dict[str, Any]], List[Dict[str, Any]], "OrchestratorConfig"], Dict[str, Any]]


class OrchestratorConfig(BaseModel):
    """
    Per-call knobs for one orchestration run

    tool_names restricts the catalog exposed to the model; selection
    accuracy drops as the option set grows, so runs expose only what
    they need.
    """
    step_budget: int = Field(default_factory=lambda: settings.CHART_STEP_BUDGET, ge=0)
    tool_names: List[str] = Field(default_factory=lambda: list(settings.CHART_GENERATION_TOOLS))
    model: Optional[str] = None  # Azure deployment; None uses AZURE_OPENAI_DEPLOYMENT
    temperature: float = Field(default_factory=lambda: settings.LLM_TEMPERATURE, ge=0.0, le=2.0)
    max_tokens: int = Field(default_factory=lambda: settings.LLM_MAX_TOKENS, gt=0)


def azure_completion(
    messages: List[Dict[str, Any]],
    tools: List[Dict[str, Any]],
    config: OrchestratorConfig
) -> Dict[str, Any]:
    return call_llm_with_tools(
        messages,
        tools,
        model=config.model,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
    )


class ToolOrchestrator:
    """
    Drives the model through at most step_budget turns

    Each turn: send the conversation plus tool schemas, run every tool
    call the model makes (synchronously, unsandboxed), feed results back.
    A turn with no tool calls ends the run. Transport errors propagate
    as LLMTransportError without retry.

    Example:
        orchestrator = ToolOrchestrator()
        transcript = orchestrator.run(system_prompt, user_prompt, context, config)
    """

    def __init__(
        self,
        catalog: ToolCatalog = TOOL_CATALOG,
        completion_fn: CompletionFn = azure_completion
    ):
        self.catalog = catalog
        self.completion_fn = completion_fn

    def run(
        self,
        system_prompt: str,
        user_prompt: str,
        context: ToolContext,
        config: Optional[OrchestratorConfig] = None
    ) -> Transcript:
        config = config or OrchestratorConfig()
        catalog = self.catalog.subset(config.tool_names)
        tool_schemas = catalog.schemas()

        messages: List[Dict[str, Any]] = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]
        transcript = Transcript()

        logger.info(f"Orchestrating with budget={config.step_budget}, tools={catalog.names}")

        for turn in range(1, config.step_budget + 1):
            logger.info(f"[turn {turn}/{config.step_budget}] calling model")
            message = self.completion_fn(messages, tool_schemas, config)
            transcript.turns = turn

            tool_calls = message.get("tool_calls") or []
            content = message.get("content") or ""
            if content:
                transcript.final_text = content

            assistant_message: Dict[str, Any] = {"role": "assistant", "content": message.get("content")}
            if tool_calls:
                assistant_message["tool_calls"] = tool_calls
            messages.append(assistant_message)

            if not tool_calls:
                logger.info(f"Model finished after {turn} turn(s) without further tool calls")
                break

            for call in tool_calls:
                invocation = self._invoke(call, catalog, context, turn)
                transcript.invocations.append(invocation)
                messages.append({
                    "role": "tool",
                    "tool_call_id": invocation.call_id,
                    "content": json.dumps(
                        invocation.output if invocation.error is None else {"error": invocation.error},
                        default=str,
                    ),
                })
        else:
            if config.step_budget:
                logger.info(f"Step budget of {config.step_budget} exhausted")

        logger.info(
            f"Orchestration done: turns={transcript.turns}, "
            f"tool calls={len(transcript.invocations)} {transcript.tool_names}"
        )
        return transcript

    def _invoke(
        self,
        call: Dict[str, Any],
        catalog: ToolCatalog,
        context: ToolContext,
        turn: int
    ) -> ToolInvocation:
        """Execute one tool call; failures are recorded, never raised"""
        function = call.get("function") or {}
        name = function.get("name") or "<missing>"
        invocation = ToolInvocation(tool_name=name, call_id=call.get("id"), turn=turn)

        tool = catalog.get(name)
        if tool is None:
            invocation.error = f"Unknown tool '{name}'"
            logger.warning(invocation.error)
            return invocation

        try:
            invocation.arguments = parse_tool_arguments(function.get("arguments"))
        except ValueError as e:
            invocation.error = f"Invalid arguments for {name}: {e}"
            logger.warning(invocation.error)
            return invocation

        try:
            invocation.output = tool.execute(invocation.arguments, context)
        except ValidationError as e:
            invocation.error = f"Arguments for {name} failed validation: {e.error_count()} error(s): {e.errors()[0]['msg']}"
            logger.warning(invocation.error)
            return invocation
        except Exception as e:
            invocation.error = f"Tool {name} failed: {e}"
            logger.exception(invocation.error)
            return invocation

        logger.info(f"Tool {name} executed")
        return invocation
