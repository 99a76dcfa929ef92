"""
Exceptions shared by the LLM Sync commands.
"""


class PreconditionError(Exception):
    """
    Raised when a run cannot start: a required tool is missing, the catalog
    file does not exist, or the Ollama API cannot be reached.

    The CLI reports these and exits with status 1.
    """
