"""
Core functionality modules for the llm-sync package.
These modules hold the sync, probe and reconcile logic behind the CLI
commands, with their collaborators passed in so they can run unattended.
"""

from llm_sync.core.catalog import load_catalog, parse_size, evaluate_catalog, find_orphans
from llm_sync.core.capacity import CapacityProbe, HostCapacity
from llm_sync.core.syncer import ModelSyncer, SyncReport
from llm_sync.core.tool_probe import probe_models, ProbeStatus
from llm_sync.core.skills import SkillStoreReconciler, SkillSyncReport
