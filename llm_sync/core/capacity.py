"""
Host capacity queries: installed RAM and disk size.
"""
import logging
import shutil
from dataclasses import dataclass
import psutil
from llm_sync.config import DISK_ROUNDING_GB

logger = logging.getLogger("llm_sync.core.capacity")

GIB = 1024 ** 3
GB = 1000 ** 3


@dataclass(frozen=True)
class HostCapacity:
    """RAM and disk figures for the current host, in whole GB."""
    ram_gb: int
    disk_total_gb: int
    disk_available_gb: int


def round_up(value, granularity=DISK_ROUNDING_GB):
    """
    Round a size up to the next multiple of ``granularity``.

    Drives are sold in 128GB steps, so a disk reporting 494GB is a 512GB disk.
    """
    if value <= 0:
        return 0
    return ((value + granularity - 1) // granularity) * granularity


class CapacityProbe:
    """
    Reads capacity figures from the running system.

    Tests substitute an object with the same two methods.
    """

    def __init__(self, disk_path="/"):
        self.disk_path = disk_path

    def query(self):
        """
        Take a snapshot of RAM and disk capacity.

        Returns:
            HostCapacity: The snapshot
        """
        ram_gb = psutil.virtual_memory().total // GIB
        usage = shutil.disk_usage(self.disk_path)
        # Marketing size is quoted in decimal gigabytes
        disk_total_gb = round_up(round(usage.total / GB))
        capacity = HostCapacity(
            ram_gb=ram_gb,
            disk_total_gb=disk_total_gb,
            disk_available_gb=usage.free // GIB,
        )
        logger.debug(f"Host capacity: {capacity}")
        return capacity

    def available_disk_gb(self):
        """Free space on the model disk, queried fresh each call."""
        return shutil.disk_usage(self.disk_path).free // GIB
