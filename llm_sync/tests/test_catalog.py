"""
Test catalog parsing and eligibility.
"""
import os
import shutil
import tempfile
import unittest
from llm_sync.config import UNKNOWN_SIZE_REJECT
from llm_sync.core.capacity import HostCapacity
from llm_sync.core.catalog import (
    CatalogEntry, parse_size, parse_size_or_none, load_catalog, check_entry,
    evaluate_catalog, find_orphans, estimate_footprint_gb, normalize_model_name
)
from llm_sync.errors import PreconditionError

CATALOG = """category,model_name,min_memory,min_disk,description
# General purpose
general,llama3.2:3b,8gb,128gb,Small general model

coding,qwen2.5-coder:32b,32gb,256gb,Large coder, needs a big machine
general,llama3.2:3b,64gb,1tb,Duplicate row that must be ignored
broken,row-without-sizes
"""


class TestParseSize(unittest.TestCase):
    """
    Test size string parsing.
    """

    def test_gigabytes(self):
        self.assertEqual(parse_size("8gb"), 8)
        self.assertEqual(parse_size("512GB"), 512)

    def test_terabytes(self):
        self.assertEqual(parse_size("1tb"), 1024)
        self.assertEqual(parse_size("2TB"), 2048)

    def test_unrecognised(self):
        self.assertEqual(parse_size("bogus"), 0)
        self.assertEqual(parse_size("8 gb"), 0)
        self.assertEqual(parse_size("1.5tb"), 0)
        self.assertEqual(parse_size(""), 0)
        self.assertIsNone(parse_size_or_none("bogus"))
        self.assertIsNone(parse_size_or_none(None))


class TestLoadCatalog(unittest.TestCase):
    """
    Test loading the catalog CSV.
    """

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.catalog_file = os.path.join(self.temp_dir, "ollama.csv")
        with open(self.catalog_file, "w") as f:
            f.write(CATALOG)

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_skips_comments_blank_lines_and_header(self):
        entries = load_catalog(self.catalog_file)
        names = [e.model_name for e in entries]
        self.assertEqual(names, ["llama3.2:3b", "qwen2.5-coder:32b"])

    def test_first_duplicate_wins(self):
        entries = load_catalog(self.catalog_file)
        llama = entries[0]
        self.assertEqual(llama.min_memory, "8gb")
        self.assertEqual(llama.min_disk, "128gb")

    def test_description_keeps_commas(self):
        entries = load_catalog(self.catalog_file)
        self.assertEqual(entries[1].description, "Large coder, needs a big machine")

    def test_missing_file(self):
        with self.assertRaises(PreconditionError):
            load_catalog(os.path.join(self.temp_dir, "missing.csv"))


class TestEligibility(unittest.TestCase):
    """
    Test checking catalog entries against the host.
    """

    def setUp(self):
        self.capacity = HostCapacity(ram_gb=16, disk_total_gb=512, disk_available_gb=300)
        self.small = CatalogEntry("general", "small:8b", "8gb", "128gb")
        self.large = CatalogEntry("general", "large:70b", "32gb", "256gb")

    def test_only_small_model_fits(self):
        eligible, ineligible = evaluate_catalog([self.small, self.large], self.capacity)
        self.assertEqual([r.entry.model_name for r in eligible], ["small:8b"])
        self.assertEqual([r.entry.model_name for r in ineligible], ["large:70b"])

    def test_shortfall_reason(self):
        result = check_entry(self.large, self.capacity)
        self.assertFalse(result.eligible)
        self.assertEqual(result.reason, "RAM: 16/32GB")

    def test_both_shortfalls(self):
        entry = CatalogEntry("huge", "huge:405b", "256gb", "1tb")
        result = check_entry(entry, self.capacity)
        self.assertEqual(result.shortfalls, ["RAM: 16/256GB", "Disk: 512/1024GB"])

    def test_thresholds_are_inclusive(self):
        entry = CatalogEntry("edge", "edge:1b", "16gb", "512gb")
        self.assertTrue(check_entry(entry, self.capacity).eligible)

    def test_unknown_size_allowed_by_default(self):
        entry = CatalogEntry("odd", "odd:1b", "lots", "128gb")
        result = check_entry(entry, self.capacity)
        self.assertTrue(result.eligible)
        self.assertEqual(result.unknown_fields, ["RAM"])
        self.assertEqual(result.required_ram_gb, 0)

    def test_unknown_size_rejected_when_strict(self):
        entry = CatalogEntry("odd", "odd:1b", "lots", "128gb")
        result = check_entry(entry, self.capacity, UNKNOWN_SIZE_REJECT)
        self.assertFalse(result.eligible)
        self.assertEqual(result.reason, "RAM: unknown requirement 'lots'")


class TestOrphans(unittest.TestCase):
    """
    Test detection of installed models missing from the catalog.
    """

    def test_orphan_set(self):
        entries = [
            CatalogEntry("c", "a:1b", "1gb", "1gb"),
            CatalogEntry("c", "c:1b", "1gb", "1gb"),
        ]
        self.assertEqual(find_orphans(["a:1b", "b:1b", "c:1b"], entries), ["b:1b"])

    def test_latest_tag_matches_untagged_name(self):
        entries = [CatalogEntry("c", "llama3", "1gb", "1gb")]
        self.assertEqual(find_orphans(["llama3:latest"], entries), [])

    def test_normalize_model_name(self):
        self.assertEqual(normalize_model_name("llama3"), "llama3:latest")
        self.assertEqual(normalize_model_name("llama3:8b"), "llama3:8b")
        self.assertEqual(normalize_model_name("hf.co/org/model"), "hf.co/org/model:latest")


class TestFootprint(unittest.TestCase):

    def test_estimate(self):
        self.assertEqual(estimate_footprint_gb(256, 20), 12)
        self.assertEqual(estimate_footprint_gb(0, 20), 0)
        self.assertEqual(estimate_footprint_gb(256, 0), 0)


if __name__ == "__main__":
    unittest.main()
