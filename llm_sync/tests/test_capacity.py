"""
Test host capacity queries.
"""
import unittest
from unittest.mock import patch, MagicMock
from llm_sync.core.capacity import CapacityProbe, round_up, GIB


class TestCapacity(unittest.TestCase):

    def test_round_up(self):
        self.assertEqual(round_up(494), 512)
        self.assertEqual(round_up(512), 512)
        self.assertEqual(round_up(513), 640)
        self.assertEqual(round_up(1), 128)
        self.assertEqual(round_up(0), 0)

    @patch("llm_sync.core.capacity.shutil.disk_usage")
    @patch("llm_sync.core.capacity.psutil.virtual_memory")
    def test_query(self, mock_memory, mock_disk_usage):
        """A 500GB drive reports as 512GB total."""
        mock_memory.return_value = MagicMock(total=16 * GIB)
        mock_disk_usage.return_value = MagicMock(total=500_277_792_768, free=100 * GIB)

        capacity = CapacityProbe("/").query()

        self.assertEqual(capacity.ram_gb, 16)
        self.assertEqual(capacity.disk_total_gb, 512)
        self.assertEqual(capacity.disk_available_gb, 100)
        mock_disk_usage.assert_called_with("/")

    @patch("llm_sync.core.capacity.shutil.disk_usage")
    def test_available_disk(self, mock_disk_usage):
        mock_disk_usage.return_value = MagicMock(total=1000 * GIB, free=42 * GIB + 10)
        self.assertEqual(CapacityProbe("/data").available_disk_gb(), 42)


if __name__ == "__main__":
    unittest.main()
