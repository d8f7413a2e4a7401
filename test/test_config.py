import os
import unittest
from unittest import mock

from app.cristalix.config import CristalixConfig


class TestCristalixConfig(unittest.TestCase):

    def test_missing_credentials(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(RuntimeError):
                CristalixConfig.from_env()

    def test_defaults(self):
        env = {"CRISTALIX_PROJECT_KEY": "key", "CRISTALIX_TOKEN": "secret"}
        with mock.patch.dict(os.environ, env, clear=True):
            config = CristalixConfig.from_env()
        self.assertEqual(config.base_url, "https://api.cristalix.gg")
        self.assertEqual(config.batch_size, 50)
        self.assertEqual(config.cache_ttl, 3600)
        self.assertIsNone(config.cache_max_entries)
        self.assertEqual(config.max_concurrent_pages, 3)
        self.assertEqual(config.request_timeout, 15)
        self.assertTrue(config.use_browser)

    def test_overrides(self):
        env = {
            "CRISTALIX_PROJECT_KEY": "key",
            "CRISTALIX_TOKEN": "secret",
            "CRISTALIX_BASE_URL": "http://localhost:8080/",
            "CRISTALIX_BATCH_SIZE": "20",
            "CRISTALIX_CACHE_MAX_ENTRIES": "1000",
            "CRISTALIX_MAX_CONCURRENT_PAGES": "1",
            "CRISTALIX_USE_BROWSER": "false",
            "PUPPETEER_EXECUTABLE_PATH": "/usr/bin/chromium",
        }
        with mock.patch.dict(os.environ, env, clear=True):
            config = CristalixConfig.from_env()
        self.assertEqual(config.base_url, "http://localhost:8080")
        self.assertEqual(config.batch_size, 20)
        self.assertEqual(config.cache_max_entries, 1000)
        self.assertEqual(config.max_concurrent_pages, 1)
        self.assertFalse(config.use_browser)
        self.assertEqual(config.browser_executable_path, "/usr/bin/chromium")

    def test_invalid_integer(self):
        env = {"CRISTALIX_PROJECT_KEY": "key", "CRISTALIX_TOKEN": "secret", "CRISTALIX_BATCH_SIZE": "many"}
        with mock.patch.dict(os.environ, env, clear=True):
            with self.assertRaises(RuntimeError):
                CristalixConfig.from_env()


if __name__ == '__main__':
    unittest.main()
