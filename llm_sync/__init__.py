"""
LLM Sync - Operator tools for a local LLM workstation.

This package keeps a developer machine's local models and assistant skills
in line with what is tracked in a repository: it downloads catalog models
that fit the host, probes installed models for tool calling, and reconciles
skill directories shared between assistant tools.

Commands:
    model sync     - Download eligible catalog models (optionally prune orphans)
    model tools    - Probe installed models for tool-calling support
    skills sync    - Reconcile the canonical skills store and its symlinks
"""

__version__ = "1.0.0"
__author__ = "Mark Ward"
__license__ = "MIT"
__url__ = "https://github.com/MarkWard0110/llm-sync"
