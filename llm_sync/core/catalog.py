"""
Model catalog loading and eligibility checks.
"""
import csv
import logging
import os
import re
from dataclasses import dataclass, field
from typing import List
from llm_sync.config import UNKNOWN_SIZE_ALLOW, UNKNOWN_SIZE_REJECT
from llm_sync.errors import PreconditionError

logger = logging.getLogger("llm_sync.core.catalog")

SIZE_PATTERN = re.compile(r"^(\d+)(gb|tb)$")
HEADER_CATEGORY = "category"


@dataclass
class CatalogEntry:
    """One row of the model catalog."""
    category: str
    model_name: str
    min_memory: str
    min_disk: str
    description: str = ""


@dataclass
class Eligibility:
    """Outcome of checking a catalog entry against the host."""
    entry: CatalogEntry
    required_ram_gb: int
    required_disk_gb: int
    eligible: bool
    shortfalls: List[str] = field(default_factory=list)
    unknown_fields: List[str] = field(default_factory=list)

    @property
    def reason(self):
        return ", ".join(self.shortfalls)


def parse_size_or_none(size_str):
    """
    Parse a size such as "8gb" or "1tb" into gigabytes.

    Args:
        size_str (str): Size string, case-insensitive

    Returns:
        int or None: Size in GB, or None when the format is not recognised
    """
    if size_str is None:
        return None
    match = SIZE_PATTERN.match(size_str.strip().lower())
    if not match:
        return None
    value = int(match.group(1))
    if match.group(2) == "tb":
        return value * 1024
    return value


def parse_size(size_str):
    """
    Parse a size string into gigabytes.

    Unrecognised strings count as 0, i.e. no requirement.
    """
    value = parse_size_or_none(size_str)
    return 0 if value is None else value


def normalize_model_name(name):
    """Ollama treats "llama3" and "llama3:latest" as the same model."""
    name = name.strip()
    if ":" not in name.rsplit("/", 1)[-1]:
        return f"{name}:latest"
    return name


def _is_skipped_row(row):
    if not row or not any(cell.strip() for cell in row):
        return True
    first = row[0].strip()
    if not first or first.startswith("#"):
        return True
    return first == HEADER_CATEGORY


def load_catalog(catalog_file):
    """
    Load catalog entries from a CSV file.

    Comment lines, blank lines and the header row are skipped. When a model
    appears more than once only the first row is kept.

    Args:
        catalog_file (str): Path to the catalog CSV

    Returns:
        list: CatalogEntry objects in file order

    Raises:
        PreconditionError: If the file does not exist
    """
    if not os.path.isfile(catalog_file):
        raise PreconditionError(f"Catalog file not found: {catalog_file}")

    entries = []
    seen = set()
    with open(catalog_file, "r", newline="", encoding="utf-8") as f:
        for line_no, row in enumerate(csv.reader(f), start=1):
            if _is_skipped_row(row):
                continue
            if len(row) < 4:
                logger.warning(f"Skipping malformed catalog line {line_no}: {','.join(row)}")
                continue
            model_name = row[1].strip()
            if not model_name:
                logger.warning(f"Skipping catalog line {line_no} without a model name")
                continue
            if model_name in seen:
                logger.debug(f"Ignoring duplicate catalog entry for {model_name} on line {line_no}")
                continue
            seen.add(model_name)
            entries.append(CatalogEntry(
                category=row[0].strip(),
                model_name=model_name,
                min_memory=row[2].strip(),
                min_disk=row[3].strip(),
                # Unquoted descriptions may contain commas
                description=",".join(row[4:]).strip(),
            ))

    logger.debug(f"Loaded {len(entries)} catalog entries from {catalog_file}")
    return entries


def check_entry(entry, capacity, unknown_size_policy=UNKNOWN_SIZE_ALLOW):
    """
    Check one catalog entry against the host capacity.

    RAM is compared against installed memory and disk against the rounded
    total disk size, not the free space.

    Args:
        entry (CatalogEntry): The catalog entry
        capacity (HostCapacity): The host capacity
        unknown_size_policy (str): "allow" treats an unparseable size as no
            requirement, "reject" makes the entry ineligible

    Returns:
        Eligibility: The result, with shortfalls filled in when ineligible
    """
    shortfalls = []
    unknown_fields = []

    axes = (
        ("RAM", entry.min_memory, capacity.ram_gb),
        ("Disk", entry.min_disk, capacity.disk_total_gb),
    )
    required = []
    for label, size_str, available in axes:
        value = parse_size_or_none(size_str)
        if value is None:
            unknown_fields.append(label)
            required.append(0)
            if unknown_size_policy == UNKNOWN_SIZE_REJECT:
                shortfalls.append(f"{label}: unknown requirement '{size_str}'")
            else:
                logger.warning(
                    f"Unrecognised {label} requirement '{size_str}' for {entry.model_name}; "
                    "treating it as no requirement"
                )
            continue
        required.append(value)
        if available < value:
            shortfalls.append(f"{label}: {available}/{value}GB")

    return Eligibility(
        entry=entry,
        required_ram_gb=required[0],
        required_disk_gb=required[1],
        eligible=not shortfalls,
        shortfalls=shortfalls,
        unknown_fields=unknown_fields,
    )


def evaluate_catalog(entries, capacity, unknown_size_policy=UNKNOWN_SIZE_ALLOW):
    """
    Check every catalog entry against the host.

    Returns:
        tuple: (eligible, ineligible) lists of Eligibility, in catalog order
    """
    eligible = []
    ineligible = []
    for entry in entries:
        result = check_entry(entry, capacity, unknown_size_policy)
        if result.eligible:
            eligible.append(result)
        else:
            logger.warning(f"Skipping {entry.model_name} ({result.reason})")
            ineligible.append(result)
    return eligible, ineligible


def find_orphans(installed_models, entries):
    """
    Find installed models that are not listed in the catalog.

    Args:
        installed_models (iterable): Installed model names
        entries (list): All catalog entries, eligible or not

    Returns:
        list: Orphaned model names, in installed order
    """
    listed = {normalize_model_name(e.model_name) for e in entries}
    return [m for m in installed_models if normalize_model_name(m) not in listed]


def estimate_footprint_gb(required_disk_gb, divisor):
    """Rough download size of a model, derived from its disk requirement."""
    if divisor <= 0:
        return 0
    return required_disk_gb // divisor


def unknown_policy_from_flag(strict):
    return UNKNOWN_SIZE_REJECT if strict else UNKNOWN_SIZE_ALLOW
