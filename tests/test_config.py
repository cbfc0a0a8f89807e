import unittest
from unittest.mock import patch

from feedproxy.config import Config


class TestConfigValidation(unittest.TestCase):
    def test_defaults_are_valid(self):
        with patch.multiple(Config, CACHE_BACKEND='memory', CACHE_TTL=300, PORT=8787,
                            FETCH_TIMEOUT=None, LOG_LEVEL='INFO'):
            Config.validate()

    def test_unknown_backend(self):
        with patch.object(Config, 'CACHE_BACKEND', 'redis'):
            with self.assertRaises(ValueError) as ctx:
                Config.validate()
        self.assertIn("FEEDPROXY_CACHE_BACKEND", str(ctx.exception))

    def test_reports_every_problem(self):
        with patch.multiple(Config, CACHE_TTL=0, FETCH_TIMEOUT=-1.0):
            with self.assertRaises(ValueError) as ctx:
                Config.validate()
        self.assertIn("FEEDPROXY_CACHE_TTL", str(ctx.exception))
        self.assertIn("FEEDPROXY_FETCH_TIMEOUT", str(ctx.exception))
