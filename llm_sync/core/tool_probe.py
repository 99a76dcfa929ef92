"""
Probe installed Ollama models for tool-calling support.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional
import requests
from llm_sync.errors import PreconditionError

logger = logging.getLogger("llm_sync.core.tool_probe")

PROBE_QUESTION = "What is the weather in Paris?"

WEATHER_TOOL = {
    "type": "function",
    "function": {
        "name": "get_current_weather",
        "description": "Get the current weather for a location",
        "parameters": {
            "type": "object",
            "properties": {
                "location": {"type": "string", "description": "The city"}
            },
            "required": ["location"],
        },
    },
}


class ProbeStatus(Enum):
    SUPPORTED = "supported"
    UNSUPPORTED = "unsupported"
    ERROR = "error"


STATUS_MARKS = {
    ProbeStatus.SUPPORTED: "✓",
    ProbeStatus.UNSUPPORTED: "✗",
    ProbeStatus.ERROR: "error",
}


@dataclass
class ProbeResult:
    """Result of probing one model."""
    model: str
    status: ProbeStatus
    detail: Optional[str] = None


def build_probe_request(model_name):
    return {
        "model": model_name,
        "messages": [{"role": "user", "content": PROBE_QUESTION}],
        "tools": [WEATHER_TOOL],
        "stream": False,
    }


def classify_response(data):
    """
    Decide whether a chat response contains a tool call.

    Args:
        data: Decoded JSON body of /api/chat

    Returns:
        ProbeStatus: SUPPORTED when message.tool_calls is a non-empty value
    """
    if not isinstance(data, dict):
        return ProbeStatus.ERROR
    message = data.get("message")
    if not isinstance(message, dict):
        return ProbeStatus.UNSUPPORTED
    if message.get("tool_calls"):
        return ProbeStatus.SUPPORTED
    return ProbeStatus.UNSUPPORTED


def filter_models(models, pattern=None):
    """
    Keep models whose name contains ``pattern``, ignoring case.

    A pattern of None selects every model.
    """
    if not pattern:
        return list(models)
    needle = pattern.lower()
    return [m for m in models if needle in m.lower()]


def _error_message(response):
    if response is None:
        return None
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("error")
    return None


def probe_model(client, model_name):
    """
    Send the probe request to one model.

    Network failures and malformed replies come back as ERROR so they are
    not mistaken for a model that simply lacks tool support.
    """
    try:
        data = client.chat(build_probe_request(model_name))
    except requests.HTTPError as e:
        error = _error_message(e.response)
        if error and "does not support tools" in error:
            return ProbeResult(model_name, ProbeStatus.UNSUPPORTED, error)
        logger.debug(f"Probe request for {model_name} failed: {e}")
        return ProbeResult(model_name, ProbeStatus.ERROR, error or str(e))
    except requests.RequestException as e:
        logger.debug(f"Probe request for {model_name} failed: {e}")
        return ProbeResult(model_name, ProbeStatus.ERROR, str(e))
    except ValueError as e:
        logger.debug(f"Probe response for {model_name} was not JSON: {e}")
        return ProbeResult(model_name, ProbeStatus.ERROR, "invalid JSON response")

    status = classify_response(data)
    detail = data.get("error") if isinstance(data, dict) else None
    return ProbeResult(model_name, status, detail)


def check_server(client):
    """
    Make sure the Ollama API answers before probing.

    Raises:
        PreconditionError: If the server is not running
    """
    try:
        client.fetch_version()
    except ConnectionError:
        raise PreconditionError("Ollama server is not running. Start it with: ollama serve")


def probe_models(client, pattern=None, out=print):
    """
    Probe installed models and print a results table.

    Args:
        client (OllamaClient): API client
        pattern (str, optional): Case-insensitive substring filter
        out (callable): Line printer

    Returns:
        list: ProbeResult for each probed model
    """
    check_server(client)
    models = client.fetch_installed_models()
    if not models:
        logger.warning("No models installed")
        return []

    selected = filter_models(models, pattern)
    if not selected:
        logger.warning(f"No models match pattern: {pattern}")
        return []

    if pattern:
        logger.info(f"Testing models matching: {pattern}")
    else:
        logger.info("Testing all models")
    logger.info(f"Testing {len(selected)} model(s) for tool support...")

    out(f"{'Model':<40} Tools")
    out(f"{'─' * 40} {'─' * 5}")
    results: List[ProbeResult] = []
    for model_name in selected:
        result = probe_model(client, model_name)
        results.append(result)
        out(f"{model_name:<40} {STATUS_MARKS[result.status]}")

    counts = summarize(results)
    out("")
    out("Summary:")
    out(f"  Tool support:    {counts[ProbeStatus.SUPPORTED]}")
    out(f"  No tool support: {counts[ProbeStatus.UNSUPPORTED]}")
    if counts[ProbeStatus.ERROR]:
        out(f"  Probe errors:    {counts[ProbeStatus.ERROR]}")
    return results


def summarize(results):
    counts = {status: 0 for status in ProbeStatus}
    for result in results:
        counts[result.status] += 1
    return counts
