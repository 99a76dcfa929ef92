"""
Model manager backends used by the catalog syncer.

Every backend offers the same four calls: ``ensure_available()``, ``list()``,
``pull(name)`` and ``remove(name)``.
"""
import logging
import shutil
import subprocess
from llm_sync.errors import PreconditionError
from llm_sync.utils import OllamaClient

logger = logging.getLogger("llm_sync.core.managers")

BACKEND_API = "api"
BACKEND_CLI = "cli"
BACKENDS = (BACKEND_API, BACKEND_CLI)


class ApiModelManager:
    """Manage models through the Ollama HTTP API."""

    def __init__(self, client: OllamaClient):
        self.client = client

    def ensure_available(self):
        try:
            version = self.client.fetch_version()
        except ConnectionError as e:
            raise PreconditionError(str(e))
        logger.info(f"Connected to Ollama {version} at {self.client.api_base}")

    def list(self):
        return self.client.fetch_installed_models()

    def pull(self, model_name):
        return self.client.pull_model(model_name)

    def remove(self, model_name):
        return self.client.delete_model(model_name)


class CliModelManager:
    """Manage models by running the ``ollama`` executable."""

    def __init__(self, executable="ollama"):
        self.executable = executable

    def ensure_available(self):
        if shutil.which(self.executable) is None:
            raise PreconditionError("Ollama is not installed or not in PATH")

    def list(self):
        result = subprocess.run(
            [self.executable, "list"], capture_output=True, text=True, check=False
        )
        if result.returncode != 0:
            raise ConnectionError(result.stderr.strip() or "ollama list failed")
        return parse_list_output(result.stdout)

    def pull(self, model_name):
        # Progress goes straight to the terminal
        result = subprocess.run([self.executable, "pull", model_name], check=False)
        return result.returncode == 0

    def remove(self, model_name):
        result = subprocess.run([self.executable, "rm", model_name], check=False)
        return result.returncode == 0


def parse_list_output(output):
    """
    Extract model names from ``ollama list`` output.

    The first line is a header; the name is the first column of each row.
    """
    names = []
    for line in output.splitlines()[1:]:
        parts = line.split()
        if parts:
            names.append(parts[0])
    return names


def create_manager(backend, api_base):
    """
    Build the model manager for a backend name.

    Args:
        backend (str): "api" or "cli"
        api_base (str): Ollama API base URL, used by the api backend

    Returns:
        A model manager
    """
    if backend == BACKEND_API:
        return ApiModelManager(OllamaClient(api_base))
    if backend == BACKEND_CLI:
        return CliModelManager()
    raise ValueError(f"Unknown model manager backend: {backend}")
