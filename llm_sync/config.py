"""
Configuration management for the LLM Sync CLI.
"""
import os
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

CURRENT_DIR = os.getcwd()
HOME_DIR = Path(os.environ.get("LLM_SYNC_HOME", str(Path.home())))

# Default filenames
CATALOG_FILENAME = "ollama.csv"
HOST_CONFIG_FILENAME = "ollama_host.conf"

DEFAULT_CATALOG_FILE = os.environ.get(
    "LLM_SYNC_CATALOG",
    os.path.join(CURRENT_DIR, CATALOG_FILENAME)
)

DEFAULT_HOST_CONFIG_FILE = os.environ.get(
    "OLLAMA_HOST_CONFIG",
    os.path.join(CURRENT_DIR, HOST_CONFIG_FILENAME)
)

# API configuration
DEFAULT_API_BASE = os.environ.get("OLLAMA_API_BASE", "http://localhost:11434")
API_TIMEOUT = int(os.environ.get("OLLAMA_API_TIMEOUT", "1200"))
PULL_TIMEOUT = int(os.environ.get("OLLAMA_PULL_TIMEOUT", "10800"))

# Host capacity
DISK_ROUNDING_GB = 128
DEFAULT_FOOTPRINT_DIVISOR = 20

# Skills
DEFAULT_SKILLS_REPO_DIR = os.environ.get(
    "LLM_SYNC_SKILLS_REPO",
    os.path.join(CURRENT_DIR, "skills")
)
SKILLS_PLUGIN_NAME = "opencode-skills"
SKILLS_REQUIRED_TOOLS = ("npm",)

UNKNOWN_SIZE_ALLOW = "allow"
UNKNOWN_SIZE_REJECT = "reject"


@dataclass
class RetryPolicy:
    """
    How a failed model pull is retried.

    ``max_attempts=None`` retries forever. The delay before attempt ``n + 1``
    is ``delay * backoff ** (n - 1)``, capped at ``max_delay``.
    """
    max_attempts: Optional[int] = None
    delay: float = 5.0
    backoff: float = 1.0
    max_delay: float = 300.0

    def delay_for(self, attempt):
        return min(self.delay * (self.backoff ** (attempt - 1)), self.max_delay)

    def allows(self, attempt):
        return self.max_attempts is None or attempt < self.max_attempts


@dataclass
class SyncSettings:
    """Settings for one catalog sync run."""
    catalog_file: str = DEFAULT_CATALOG_FILE
    cleanup: bool = False
    dry_run: bool = False
    assume_yes: bool = False
    unknown_size_policy: str = UNKNOWN_SIZE_ALLOW
    footprint_divisor: int = DEFAULT_FOOTPRINT_DIVISOR
    disk_path: str = "/"
    retry: RetryPolicy = field(default_factory=RetryPolicy)


@dataclass
class SkillPaths:
    """Locations the skills reconciler works on."""
    repo_dir: Path
    canonical_dir: Path
    consumers: List[Tuple[str, Path]]
    opencode_config_file: Path
    plugin_name: str = SKILLS_PLUGIN_NAME
    required_tools: Tuple[str, ...] = SKILLS_REQUIRED_TOOLS

    @classmethod
    def from_home(cls, home=None, repo_dir=None, canonical_dir=None):
        """
        Build the standard layout under a home directory.

        Args:
            home (str or Path, optional): Home directory (default: LLM_SYNC_HOME or ~)
            repo_dir (str or Path, optional): Repository skills directory
            canonical_dir (str or Path, optional): Canonical skills store

        Returns:
            SkillPaths: The resolved paths
        """
        # Consumers become symlinks, so every location must be absolute
        home = _absolute(home) if home else _absolute(HOME_DIR)
        if canonical_dir is None:
            canonical_dir = os.environ.get("LLM_SYNC_CANONICAL_SKILLS", str(home / ".skills"))
        return cls(
            repo_dir=_absolute(repo_dir or DEFAULT_SKILLS_REPO_DIR),
            canonical_dir=_absolute(canonical_dir),
            consumers=[
                ("OpenCode", home / ".config" / "opencode" / "skills"),
                ("Claude Code", home / ".claude" / "skills"),
            ],
            opencode_config_file=home / ".config" / "opencode" / "config.json",
        )


def _absolute(path):
    return Path(path).expanduser().absolute()


def load_api_base_from_config(config_path):
    """Load the Ollama API base URL from a config file (JSON or simple text)."""
    if not os.path.isfile(config_path):
        return None
    with open(config_path, 'r', encoding='utf-8') as f:
        # Try JSON first
        try:
            data = json.load(f)
            if isinstance(data, dict):
                return data.get('api_base')
            return None
        except json.JSONDecodeError:
            f.seek(0)
            # Fallback: treat as plain text (single line with URL)
            line = f.readline().strip()
            if line:
                return line
    return None
