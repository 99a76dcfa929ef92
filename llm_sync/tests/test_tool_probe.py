"""
Test the tool-calling probe.
"""
import unittest
from unittest.mock import MagicMock
import requests
from llm_sync.core.tool_probe import (
    ProbeStatus, build_probe_request, classify_response, filter_models,
    probe_model, probe_models, summarize, ProbeResult
)
from llm_sync.errors import PreconditionError

TOOL_CALL = {
    "message": {
        "role": "assistant",
        "content": "",
        "tool_calls": [{"function": {"name": "get_current_weather", "arguments": {"location": "Paris"}}}],
    }
}
PLAIN_ANSWER = {"message": {"role": "assistant", "content": "It is sunny."}}


class FakeClient:
    """Stands in for OllamaClient with canned chat responses."""

    def __init__(self, models, responses, running=True):
        self.models = models
        self.responses = responses
        self.running = running
        self.requests = []

    def fetch_version(self):
        if not self.running:
            raise ConnectionError("refused")
        return "0.5.0"

    def fetch_installed_models(self):
        return list(self.models)

    def chat(self, payload):
        self.requests.append(payload)
        response = self.responses[payload["model"]]
        if isinstance(response, Exception):
            raise response
        return response


class TestClassify(unittest.TestCase):

    def test_tool_calls_present(self):
        self.assertEqual(classify_response(TOOL_CALL), ProbeStatus.SUPPORTED)

    def test_no_tool_calls(self):
        self.assertEqual(classify_response(PLAIN_ANSWER), ProbeStatus.UNSUPPORTED)

    def test_empty_or_null_tool_calls(self):
        self.assertEqual(classify_response({"message": {"tool_calls": []}}), ProbeStatus.UNSUPPORTED)
        self.assertEqual(classify_response({"message": {"tool_calls": None}}), ProbeStatus.UNSUPPORTED)

    def test_missing_message(self):
        self.assertEqual(classify_response({}), ProbeStatus.UNSUPPORTED)

    def test_not_an_object(self):
        self.assertEqual(classify_response(["unexpected"]), ProbeStatus.ERROR)


class TestProbe(unittest.TestCase):
    """
    Test probing individual models and the full run.
    """

    def test_request_shape(self):
        payload = build_probe_request("qwen3:8b")
        self.assertEqual(payload["model"], "qwen3:8b")
        self.assertFalse(payload["stream"])
        self.assertEqual(payload["messages"][0]["role"], "user")
        self.assertEqual(payload["tools"][0]["function"]["name"], "get_current_weather")

    def test_network_failure_is_an_error_not_unsupported(self):
        client = FakeClient(["a"], {"a": requests.ConnectionError("reset")})
        result = probe_model(client, "a")
        self.assertEqual(result.status, ProbeStatus.ERROR)

    def test_invalid_json_is_an_error(self):
        client = FakeClient(["a"], {"a": ValueError("Expecting value")})
        self.assertEqual(probe_model(client, "a").status, ProbeStatus.ERROR)

    def test_does_not_support_tools_response(self):
        response = MagicMock()
        response.json.return_value = {"error": "registry.ollama.ai/library/gemma:2b does not support tools"}
        error = requests.HTTPError("400 Client Error", response=response)
        client = FakeClient(["gemma:2b"], {"gemma:2b": error})

        result = probe_model(client, "gemma:2b")

        self.assertEqual(result.status, ProbeStatus.UNSUPPORTED)
        self.assertIn("does not support tools", result.detail)

    def test_other_http_error(self):
        response = MagicMock()
        response.json.return_value = {"error": "model runner has unexpectedly stopped"}
        client = FakeClient(["a"], {"a": requests.HTTPError("500", response=response)})
        self.assertEqual(probe_model(client, "a").status, ProbeStatus.ERROR)

    def test_filter_is_case_insensitive(self):
        models = ["Qwen3:8b", "llama3.2:3b", "qwen2.5-coder:32b"]
        self.assertEqual(filter_models(models, "QWEN"), ["Qwen3:8b", "qwen2.5-coder:32b"])
        self.assertEqual(filter_models(models, ":32b"), ["qwen2.5-coder:32b"])
        self.assertEqual(filter_models(models, None), models)

    def test_probe_models_reports_each_model(self):
        client = FakeClient(
            ["qwen3:8b", "gemma:2b", "broken:1b"],
            {
                "qwen3:8b": TOOL_CALL,
                "gemma:2b": PLAIN_ANSWER,
                "broken:1b": requests.Timeout("timed out"),
            },
        )
        lines = []
        results = probe_models(client, out=lines.append)

        statuses = {r.model: r.status for r in results}
        self.assertEqual(statuses, {
            "qwen3:8b": ProbeStatus.SUPPORTED,
            "gemma:2b": ProbeStatus.UNSUPPORTED,
            "broken:1b": ProbeStatus.ERROR,
        })
        self.assertTrue(lines[0].startswith("Model"))
        self.assertIn("  Tool support:    1", lines)
        self.assertIn("  No tool support: 1", lines)
        self.assertIn("  Probe errors:    1", lines)

    def test_probe_models_with_pattern(self):
        client = FakeClient(["qwen3:8b", "gemma:2b"], {"qwen3:8b": TOOL_CALL})
        results = probe_models(client, "qwen", out=lambda line: None)
        self.assertEqual([r.model for r in results], ["qwen3:8b"])
        self.assertEqual(len(client.requests), 1)

    def test_no_match(self):
        client = FakeClient(["gemma:2b"], {})
        self.assertEqual(probe_models(client, "qwen", out=lambda line: None), [])

    def test_server_not_running(self):
        client = FakeClient(["a"], {}, running=False)
        with self.assertRaises(PreconditionError):
            probe_models(client, out=lambda line: None)

    def test_summarize(self):
        counts = summarize([
            ProbeResult("a", ProbeStatus.SUPPORTED),
            ProbeResult("b", ProbeStatus.SUPPORTED),
            ProbeResult("c", ProbeStatus.ERROR),
        ])
        self.assertEqual(counts[ProbeStatus.SUPPORTED], 2)
        self.assertEqual(counts[ProbeStatus.UNSUPPORTED], 0)
        self.assertEqual(counts[ProbeStatus.ERROR], 1)


if __name__ == "__main__":
    unittest.main()
