"""
Sync an Ollama instance with the model catalog.
"""
import logging
import time
from dataclasses import dataclass, field
from typing import List
from llm_sync.config import SyncSettings
from llm_sync.core.catalog import (
    load_catalog, evaluate_catalog, find_orphans,
    estimate_footprint_gb, normalize_model_name
)

logger = logging.getLogger("llm_sync.core.syncer")


@dataclass
class SyncReport:
    """What a sync run did, model by model."""
    eligible: List[str] = field(default_factory=list)
    ineligible: List[str] = field(default_factory=list)
    downloaded: List[str] = field(default_factory=list)
    already_local: List[str] = field(default_factory=list)
    planned: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    orphans: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)
    removal_failed: List[str] = field(default_factory=list)

    @property
    def success(self):
        return not self.failed


def _never_confirm(question):
    return False


def _never_wait(model_name, available_gb, needed_gb):
    return False


class ModelSyncer:
    """
    Downloads eligible catalog models and optionally removes orphans.

    Collaborators:
        manager: model manager with ensure_available/list/pull/remove
        capacity_probe: object with query() and available_disk_gb()
        confirm: callable(question) -> bool, asked before removing orphans
        wait_for_space: callable(model, available_gb, needed_gb) -> bool,
            called when the disk is too full; True re-checks, False gives up
        sleep: callable(seconds) used between pull attempts
    """

    def __init__(self, settings: SyncSettings, manager, capacity_probe,
                 confirm=_never_confirm, wait_for_space=_never_wait, sleep=time.sleep):
        self.settings = settings
        self.manager = manager
        self.capacity_probe = capacity_probe
        self.confirm = confirm
        self.wait_for_space = wait_for_space
        self.sleep = sleep

    def run(self):
        """
        Run a full sync.

        Returns:
            SyncReport: The outcome

        Raises:
            PreconditionError: If the catalog or the model manager is missing
        """
        report = SyncReport()
        entries = load_catalog(self.settings.catalog_file)
        self.manager.ensure_available()

        capacity = self.capacity_probe.query()
        logger.info("System Information:")
        logger.info(f"  RAM: {capacity.ram_gb}GB")
        logger.info(f"  Total Disk: {capacity.disk_total_gb}GB")
        logger.info(f"  Available Disk: {capacity.disk_available_gb}GB")

        logger.info(f"Analyzing {len(entries)} models from {self.settings.catalog_file}...")
        eligible, ineligible = evaluate_catalog(entries, capacity, self.settings.unknown_size_policy)
        report.eligible = [r.entry.model_name for r in eligible]
        report.ineligible = [r.entry.model_name for r in ineligible]

        if not eligible:
            logger.warning("No models meet system requirements")
            return report

        logger.info(f"Found {len(eligible)} eligible model(s) for this system")
        self.download_models(eligible, report)

        if self.settings.cleanup:
            self.remove_orphans(entries, report)

        return report

    def download_models(self, eligible, report):
        """Pull every eligible model that is not installed yet."""
        installed = {normalize_model_name(m) for m in self.manager.list()}

        for result in eligible:
            model_name = result.entry.model_name
            if normalize_model_name(model_name) in installed:
                logger.info(f"Already downloaded: {model_name}")
                report.already_local.append(model_name)
                continue
            if self.settings.dry_run:
                logger.info(f"Would download: {model_name}")
                report.planned.append(model_name)
                continue
            if self.pull_with_retry(model_name, result.required_disk_gb):
                installed.add(normalize_model_name(model_name))
                report.downloaded.append(model_name)
            else:
                report.failed.append(model_name)

        logger.info("Download phase complete!")
        logger.info(f"  Downloaded: {len(report.downloaded)} model(s)")
        logger.info(f"  Already local: {len(report.already_local)} model(s)")
        if report.planned:
            logger.info(f"  Would download: {len(report.planned)} model(s)")
        if report.failed:
            logger.warning(f"  Failed: {len(report.failed)} model(s): {', '.join(report.failed)}")

    def pull_with_retry(self, model_name, required_disk_gb):
        """
        Pull a model, waiting for disk space and retrying failures.

        Args:
            model_name (str): Model to pull
            required_disk_gb (int): Disk requirement from the catalog

        Returns:
            bool: True once the pull succeeds, False if the run gave up
        """
        policy = self.settings.retry
        needed_gb = estimate_footprint_gb(required_disk_gb, self.settings.footprint_divisor)
        logger.info(f"Downloading model: {model_name}")

        attempt = 1
        while True:
            available_gb = self.capacity_probe.available_disk_gb()
            if available_gb < needed_gb:
                logger.error(
                    f"Insufficient disk space for {model_name} "
                    f"({available_gb}GB available, ~{needed_gb}GB needed)"
                )
                if self.wait_for_space(model_name, available_gb, needed_gb):
                    continue
                logger.error(f"Giving up on {model_name}: not enough disk space")
                return False

            if self.manager.pull(model_name):
                logger.info(f"Successfully downloaded: {model_name}")
                return True

            if not policy.allows(attempt):
                logger.error(f"Failed to download {model_name} after {attempt} attempt(s)")
                return False
            delay = policy.delay_for(attempt)
            logger.warning(f"Failed to download {model_name}, retrying in {delay:g} seconds...")
            self.sleep(delay)
            attempt += 1

    def remove_orphans(self, entries, report):
        """Remove installed models that the catalog does not list, after confirmation."""
        logger.info("Checking for models not in catalog...")
        orphans = find_orphans(self.manager.list(), entries)
        report.orphans = orphans

        if not orphans:
            logger.info("No unlisted models to remove")
            return

        logger.warning(f"Found {len(orphans)} model(s) not in catalog:")
        for model_name in orphans:
            logger.warning(f"  - {model_name}")

        if self.settings.dry_run:
            logger.info("Dry run: not removing anything")
            return

        if not self.confirm("Remove these models?"):
            logger.info("Skipped model removal")
            return

        for model_name in orphans:
            logger.info(f"Removing model: {model_name}")
            if self.manager.remove(model_name):
                logger.info(f"Removed: {model_name}")
                report.removed.append(model_name)
            else:
                logger.error(f"Failed to remove: {model_name}")
                report.removal_failed.append(model_name)
