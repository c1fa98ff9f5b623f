"""
LLM utilities (client, prompts, parsers)
"""
from vizflow.pipeline.llm.client import call_llm_with_tools
from vizflow.pipeline.llm.prompts import CHART_SYSTEM_PROMPT, build_generation_prompt
from vizflow.pipeline.llm.parsers import parse_tool_arguments, strip_code_fences

__all__ = [
    "call_llm_with_tools",
    "CHART_SYSTEM_PROMPT",
    "build_generation_prompt",
    "parse_tool_arguments",
    "strip_code_fences",
]
