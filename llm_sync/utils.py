"""
Utility functions for the LLM Sync CLI.
"""
import logging
import requests
from llm_sync.config import DEFAULT_API_BASE, API_TIMEOUT, PULL_TIMEOUT

logger = logging.getLogger("llm_sync.utils")


class OllamaClient:
    """
    Thin wrapper around the Ollama HTTP API.
    """

    def __init__(self, api_base=DEFAULT_API_BASE, timeout=API_TIMEOUT, pull_timeout=PULL_TIMEOUT):
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.pull_timeout = pull_timeout

    def fetch_version(self):
        """
        Fetch the Ollama version from the API.

        Returns:
            str: The Ollama version string

        Raises:
            ConnectionError: If the API is unreachable
        """
        try:
            logger.debug("Fetching Ollama version")
            resp = requests.get(f"{self.api_base}/api/version", timeout=self.timeout)
            resp.raise_for_status()
            return resp.json().get("version", "unknown")
        except requests.RequestException as e:
            logger.debug(f"Error fetching Ollama version from {self.api_base}: {e}")
            raise ConnectionError(f"Could not connect to Ollama API at {self.api_base}. Is Ollama running?")

    def fetch_installed_models(self):
        """
        Fetch installed model names from the Ollama API.

        Returns:
            list: Model names, in the order the API reports them

        Raises:
            ConnectionError: If the API is unreachable
        """
        try:
            resp = requests.get(f"{self.api_base}/api/tags", timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except requests.RequestException as e:
            logger.error(f"Error fetching models from {self.api_base}: {e}")
            raise ConnectionError(f"Could not connect to Ollama API at {self.api_base}. Is Ollama running?")
        return [m["name"] for m in data.get("models", []) if m.get("name")]

    def pull_model(self, model_name):
        """
        Pull a model and wait for the download to finish.

        Returns:
            bool: True if Ollama reported success
        """
        try:
            resp = requests.post(
                f"{self.api_base}/api/pull",
                json={"model": model_name, "stream": False},
                timeout=self.pull_timeout,
            )
            resp.raise_for_status()
            status = resp.json().get("status")
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Error pulling {model_name}: {e}")
            return False
        if status != "success":
            logger.warning(f"Pull of {model_name} ended with status: {status}")
            return False
        return True

    def delete_model(self, model_name):
        """
        Delete a model.

        Returns:
            bool: True if the model was deleted
        """
        try:
            resp = requests.delete(
                f"{self.api_base}/api/delete",
                json={"model": model_name},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            return True
        except requests.RequestException as e:
            logger.error(f"Error deleting {model_name}: {e}")
            return False

    def chat(self, payload):
        """
        Send a non-streaming chat request.

        Args:
            payload (dict): The request body for /api/chat

        Returns:
            dict: The decoded JSON response

        Raises:
            requests.RequestException: If the request fails
            ValueError: If the body is not JSON
        """
        resp = requests.post(f"{self.api_base}/api/chat", json=payload, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()


def prompt_yes_no(question, assume_yes=False):
    """
    Ask a y/N question on the terminal.

    Returns:
        bool: True only for an explicit yes (or when assume_yes is set)
    """
    if assume_yes:
        print(f"{question} y (--yes)")
        return True
    try:
        reply = input(f"{question} [y/N] ")
    except EOFError:
        return False
    return reply.strip().lower() in ("y", "yes")


def wait_for_enter(message):
    """
    Block until the operator presses Enter.

    Returns:
        bool: False when stdin is closed, so callers can give up
    """
    try:
        input(message)
    except EOFError:
        return False
    return True
