"""
Keep assistant skill directories in one canonical store.

The repository skills directory is mirrored into the canonical store, and
every consumer location (OpenCode, Claude Code) becomes a symlink to it.
Skills that only exist in the canonical store can be copied back into the
repository so they get committed.
"""
import json
import logging
import os
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import List
from llm_sync.config import SkillPaths
from llm_sync.errors import PreconditionError

logger = logging.getLogger("llm_sync.core.skills")


@dataclass
class SkillSyncReport:
    """What a skills sync changed."""
    plugin_installed: bool = False
    config_changed: bool = False
    linked: List[str] = field(default_factory=list)
    preserved: List[str] = field(default_factory=list)
    local_only: List[str] = field(default_factory=list)
    absorbed: List[str] = field(default_factory=list)


class NpmPackageManager:
    """Global npm packages."""

    def __init__(self, executable="npm"):
        self.executable = executable

    def is_installed(self, package):
        result = subprocess.run(
            [self.executable, "list", "-g", "--depth=0"],
            capture_output=True, text=True, check=False,
        )
        return package in result.stdout

    def install(self, package):
        subprocess.run([self.executable, "install", "-g", package], check=True)


def _never_confirm(question):
    return False


def list_skills(directory):
    """
    Names of the skill sub-directories of ``directory``, hidden ones excluded.
    """
    directory = Path(directory)
    if not directory.is_dir():
        return []
    return sorted(
        p.name for p in directory.iterdir()
        if p.is_dir() and not p.name.startswith(".")
    )


def mirror_tree(src, dst):
    """
    Copy ``src`` into ``dst`` without deleting anything from ``dst``.

    Files from ``src`` overwrite their counterparts; files only in ``dst``
    stay where they are. Symlinks, including links to directories, are
    copied as links.

    Returns:
        int: Number of files and links copied
    """
    src = Path(src)
    dst = Path(dst)
    copied = 0
    for root, dirs, files in os.walk(src):
        rel = Path(root).relative_to(src)
        target_root = dst / rel
        if not target_root.is_dir() and (target_root.is_symlink() or target_root.exists()):
            _remove_path(target_root)
        target_root.mkdir(parents=True, exist_ok=True)
        for name in dirs:
            source = Path(root) / name
            if not source.is_symlink():
                continue
            target = target_root / name
            if target.is_dir() and not target.is_symlink():
                logger.warning(f"Not replacing directory {target} with a link to {os.readlink(source)}")
                continue
            if target.is_symlink() or target.exists():
                _remove_path(target)
            os.symlink(os.readlink(source), target)
            copied += 1
        for name in files:
            source = Path(root) / name
            target = target_root / name
            if target.is_symlink() or (target.exists() and not target.is_file()):
                _remove_path(target)
            shutil.copy2(source, target, follow_symlinks=False)
            copied += 1
    return copied


def _remove_path(path):
    if path.is_symlink() or path.is_file():
        path.unlink()
    else:
        shutil.rmtree(path)


def ensure_plugin_listed(config_file, plugin_name):
    """
    Make sure a JSON config lists ``plugin_name`` in its "plugin" array.

    A missing file is created. The write goes through a temporary file so
    a crash never leaves a half-written config behind.

    Args:
        config_file (Path): OpenCode config.json
        plugin_name (str): Plugin to enable

    Returns:
        bool: True if the file was created or changed

    Raises:
        PreconditionError: If the existing file is not a JSON object
    """
    config_file = Path(config_file)
    config_file.parent.mkdir(parents=True, exist_ok=True)

    if not config_file.exists():
        logger.info(f"Creating new OpenCode config at {config_file}")
        _write_json(config_file, {"plugin": [plugin_name]})
        return True

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise PreconditionError(f"Invalid JSON in {config_file}: {e}")
    if not isinstance(data, dict):
        raise PreconditionError(f"Expected a JSON object in {config_file}")

    plugins = data.get("plugin") or []
    if isinstance(plugins, str):
        plugins = [plugins]
    if plugin_name in plugins:
        return False

    merged = []
    for name in list(plugins) + [plugin_name]:
        if name not in merged:
            merged.append(name)
    data["plugin"] = merged
    logger.info(f"Adding {plugin_name} to existing config...")
    _write_json(config_file, data)
    return True


def _write_json(path, data):
    tmp_path = path.with_name(path.name + ".tmp")
    with open(tmp_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
        f.write("\n")
    os.replace(tmp_path, path)


class SkillStoreReconciler:
    """
    Runs the skills sync steps in order.

    Collaborators:
        paths: SkillPaths with repository, canonical and consumer locations
        package_manager: object with is_installed(name) and install(name)
        confirm: callable(question) -> bool, asked before copying local-only
            skills into the repository
        which: callable(tool) -> path or None, used for the dependency check
    """

    def __init__(self, paths: SkillPaths, package_manager=None,
                 confirm=_never_confirm, which=shutil.which):
        self.paths = paths
        self.package_manager = package_manager or NpmPackageManager()
        self.confirm = confirm
        self.which = which

    def run(self):
        """
        Run every step of the sync.

        Returns:
            SkillSyncReport: The outcome
        """
        report = SkillSyncReport()
        self.check_dependencies()
        self.paths.repo_dir.mkdir(parents=True, exist_ok=True)

        logger.info("=== OpenCode Plugin Setup ===")
        report.plugin_installed = self.ensure_plugin()
        report.config_changed = self.configure_plugin()

        logger.info("=== Syncing Skills ===")
        self.sync_to_canonical()

        logger.info("=== Creating Symlinks ===")
        for label, target in self.paths.consumers:
            report.preserved.extend(self.link_consumer(target, label))
            report.linked.append(label)

        logger.info("=== Local-Only Skills Check ===")
        report.local_only = self.find_local_only()
        if report.local_only:
            report.absorbed = self.absorb_local_only(report.local_only)
        else:
            logger.info("All skills are tracked in the repository")

        logger.info("Skills sync complete!")
        logger.info(f"  Canonical: {self.paths.canonical_dir}")
        for label, target in self.paths.consumers:
            logger.info(f"  {label}: {target} → {self.paths.canonical_dir}")
        return report

    def check_dependencies(self):
        """
        Raises:
            PreconditionError: If a required tool is not on PATH
        """
        for tool in self.paths.required_tools:
            if self.which(tool) is None:
                raise PreconditionError(f"{tool} is not installed")

    def ensure_plugin(self):
        """Install the skills plugin globally if it is missing. Returns True if installed now."""
        plugin = self.paths.plugin_name
        logger.info(f"Checking for {plugin} plugin...")
        if self.package_manager.is_installed(plugin):
            logger.info(f"{plugin} is already installed")
            return False
        logger.info(f"{plugin} not found, installing...")
        self.package_manager.install(plugin)
        logger.info(f"{plugin} installed")
        return True

    def configure_plugin(self):
        logger.info("Checking OpenCode configuration...")
        changed = ensure_plugin_listed(self.paths.opencode_config_file, self.paths.plugin_name)
        if not changed:
            logger.info(f"{self.paths.plugin_name} already enabled in config")
        return changed

    def sync_to_canonical(self):
        """Mirror the repository skills into the canonical store (non-deleting)."""
        canonical = self.paths.canonical_dir
        logger.info(f"Syncing skills to canonical store ({canonical})...")
        canonical.mkdir(parents=True, exist_ok=True)
        copied = mirror_tree(self.paths.repo_dir, canonical)
        logger.info(f"Skills synced to canonical store ({copied} file(s))")

    def link_consumer(self, target, label):
        """
        Point a consumer location at the canonical store.

        A real directory is replaced by the symlink after any skills it holds
        that the canonical store lacks have been copied across.

        Returns:
            list: Names of skills preserved from a replaced directory
        """
        # A relative link would resolve against the consumer's parent
        canonical = self.paths.canonical_dir.absolute()
        target = Path(target)
        preserved = []
        logger.info(f"Linking {label} to canonical store...")
        target.parent.mkdir(parents=True, exist_ok=True)

        if target.is_symlink():
            current = os.readlink(target)
            if Path(current) == canonical:
                logger.info(f"{label} already linked")
                return preserved
            logger.warning(f"{label} points elsewhere ({current}), updating...")
            target.unlink()
        elif target.is_dir():
            logger.warning(f"{label} is a directory, checking for local-only skills first...")
            for skill in list_skills(target):
                if not (canonical / skill).is_dir():
                    logger.info(f"Preserving local skill: {skill}")
                    shutil.copytree(target / skill, canonical / skill, symlinks=True)
                    preserved.append(skill)
            shutil.rmtree(target)
        elif target.exists():
            raise PreconditionError(f"{label} path {target} is a file, not a skills directory")

        os.symlink(canonical, target)
        logger.info(f"{label} linked → {canonical}")
        return preserved

    def find_local_only(self):
        """Skills in the canonical store that the repository does not track."""
        logger.info("Checking for local-only skills...")
        repo_skills = set(list_skills(self.paths.repo_dir))
        return [s for s in list_skills(self.paths.canonical_dir) if s not in repo_skills]

    def absorb_local_only(self, local_only):
        """
        Offer to copy local-only skills into the repository.

        Returns:
            list: Skills copied into the repository
        """
        logger.warning(f"Found {len(local_only)} local-only skill(s):")
        for skill in local_only:
            logger.warning(f"  - {skill}")

        if not self.confirm("Add these to the repository?"):
            logger.info("Skipped adding local skills to repository")
            return []

        absorbed = []
        for skill in local_only:
            destination = self.paths.repo_dir / skill
            if destination.exists():
                logger.debug(f"{skill} already present in repository")
                continue
            logger.info(f"Copying {skill} to repository...")
            shutil.copytree(self.paths.canonical_dir / skill, destination, symlinks=True)
            absorbed.append(skill)

        logger.info(f"Skills copied to {self.paths.repo_dir}")
        logger.info("Remember to commit and push this repository to sync across machines")
        return absorbed
