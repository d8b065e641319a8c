import os
import tempfile
import unittest
from unittest.mock import patch

from idbscan.common.config import (
    DEFAULT_INTERNETDB_URL,
    DEFAULT_MAX_ADDRESSES,
    ScanConfig,
    get_settings,
    load_env_file,
)


class TestSettings(unittest.TestCase):
    """Test reading settings from the environment."""

    @patch.dict(os.environ, {}, clear=True)
    def test_defaults(self):
        settings = get_settings()
        self.assertEqual(settings.internetdb_url, DEFAULT_INTERNETDB_URL)
        self.assertEqual(settings.threads, 1)
        self.assertIsNone(settings.timeout)
        self.assertEqual(settings.max_addresses, DEFAULT_MAX_ADDRESSES)

    @patch.dict(
        os.environ,
        {
            "INTERNETDB_URL": "http://localhost:8000/",
            "IDBSCAN_THREADS": "16",
            "IDBSCAN_TIMEOUT": "2.5",
            "IDBSCAN_MAX_ADDRESSES": "0",
        },
        clear=True,
    )
    def test_values_from_environment(self):
        settings = get_settings()
        self.assertEqual(settings.internetdb_url, "http://localhost:8000")
        self.assertEqual(settings.threads, 16)
        self.assertEqual(settings.timeout, 2.5)
        self.assertIsNone(settings.max_addresses)

    @patch.dict(
        os.environ,
        {"IDBSCAN_THREADS": "many", "IDBSCAN_TIMEOUT": "soon"},
        clear=True,
    )
    def test_bad_values_fall_back_to_defaults(self):
        with self.assertLogs("idbscan.common.config", level="WARNING") as logs:
            settings = get_settings()
        self.assertEqual(settings.threads, 1)
        self.assertIsNone(settings.timeout)
        self.assertEqual(len(logs.records), 2)

    @patch.dict(os.environ, {}, clear=True)
    def test_load_env_file(self):
        with tempfile.NamedTemporaryFile("w", suffix=".env", delete=False) as env_file:
            env_file.write("IDBSCAN_THREADS=8\n")
            path = env_file.name

        try:
            self.assertTrue(load_env_file(path))
            self.assertEqual(get_settings().threads, 8)
        finally:
            os.unlink(path)

    def test_scan_config_is_immutable(self):
        config = ScanConfig(target_range="10.0.0.0/30")
        self.assertEqual(config.ports, ())
        self.assertEqual(config.concurrency, 1)
        with self.assertRaises(AttributeError):
            config.concurrency = 5


if __name__ == "__main__":
    unittest.main()
