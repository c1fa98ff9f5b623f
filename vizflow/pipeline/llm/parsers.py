"""
LLM response parsers
"""
import json
import logging
from typing import Any, Dict

logger = logging.getLogger(__name__)


def strip_code_fences(response: str) -> str:
    """Remove a surrounding ```json ... ``` block if present"""
    content = response.strip()

    if content.startswith("```"):
        lines = content.split("```")
        if len(lines) >= 2:
            content = lines[1]
            if content.startswith("json"):
                content = content[4:]

    return content.strip()


def parse_tool_arguments(raw: Any) -> Dict[str, Any]:
    """
    Parse the arguments of a tool call

    Azure returns arguments as a JSON string; some deployments wrap it
    in code fences.

    Raises:
        ValueError: arguments are not a JSON object
    """
    if isinstance(raw, dict):
        return raw
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return {}
    if not isinstance(raw, str):
        raise ValueError(f"tool arguments must be a JSON object, got {type(raw).__name__}")

    data = json.loads(strip_code_fences(raw))
    if not isinstance(data, dict):
        raise ValueError("tool arguments must be a JSON object")
    return data
