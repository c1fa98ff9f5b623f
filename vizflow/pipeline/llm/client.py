"""
LLM client for Azure OpenAI chat completions with function tools
"""
import httpx
import time
import logging
from typing import Any, Dict, List, Optional

from vizflow.core.config import settings
from vizflow.core.errors import LLMTransportError

logger = logging.getLogger(__name__)


def _endpoint_url(deployment: Optional[str] = None) -> str:
    if settings.DISABLE_AZURE_LLM:
        raise LLMTransportError("LLM calls are disabled (DISABLE_AZURE_LLM)")
    if not settings.llm_configured():
        raise LLMTransportError(
            "Azure OpenAI credentials missing. Set AZURE_OPENAI_ENDPOINT, "
            "AZURE_OPENAI_API_KEY and AZURE_OPENAI_DEPLOYMENT."
        )
    return (
        f"{settings.AZURE_OPENAI_ENDPOINT}/openai/deployments/"
        f"{deployment or settings.AZURE_OPENAI_DEPLOYMENT}/chat/completions?"
        f"api-version={settings.AZURE_OPENAI_API_VERSION}"
    )


def call_llm_with_tools(
    messages: List[Dict[str, Any]],
    tools: List[Dict[str, Any]],
    model: Optional[str] = None,
    temperature: float = 0.2,
    max_tokens: int = 4000,
) -> Dict[str, Any]:
    """
    One model turn with tool calling enabled

    No retry here: the caller decides whether a failed turn is
    worth another request.

    Returns:
        The assistant message dict ({"role", "content", "tool_calls"?})

    Raises:
        LLMTransportError: network, timeout, HTTP status or malformed body
    """
    url = _endpoint_url(model)

    headers = {
        "Content-Type": "application/json",
        "api-key": settings.AZURE_OPENAI_API_KEY
    }

    payload: Dict[str, Any] = {
        "messages": messages,
        "temperature": temperature,
        "max_tokens": max_tokens,
    }
    if tools:
        payload["tools"] = tools
        payload["tool_choice"] = "auto"

    start = time.time()
    try:
        with httpx.Client(timeout=httpx.Timeout(settings.LLM_TIMEOUT_SECONDS, connect=10.0)) as client:
            response = client.post(url, headers=headers, json=payload)
            response.raise_for_status()
            data = response.json()
    except httpx.HTTPStatusError as e:
        status = e.response.status_code
        logger.error(f"LLM returned HTTP {status}: {e.response.text[:300]}")
        raise LLMTransportError(f"LLM request failed with HTTP {status}: {e}", status_code=status) from e
    except httpx.TimeoutException as e:
        logger.error(f"LLM request timed out: {e}")
        raise LLMTransportError(f"LLM request timed out: {e}") from e
    except httpx.HTTPError as e:
        logger.error(f"LLM transport error: {e}")
        raise LLMTransportError(f"LLM request failed: {e}") from e
    except ValueError as e:
        raise LLMTransportError(f"LLM returned a non-JSON body: {e}") from e

    latency = (time.time() - start) * 1000
    logger.info(f"LLM responded in {latency:.0f}ms")

    try:
        return data["choices"][0]["message"]
    except (KeyError, IndexError, TypeError) as e:
        raise LLMTransportError(f"Unexpected response from Azure OpenAI: {str(data)[:300]}") from e
