"""Tests for client.config -- validation and configuration persistence."""

import dataclasses
import os
import tempfile
import unittest
from unittest import mock

from client.config import (
    DEFAULTS,
    SpeedTestConfig,
    load_config,
    save_config,
)
from client.constants import (
    DEFAULT_DEADLINE_SECONDS,
    DEFAULT_DOWNLOAD_MEGABYTES,
    DEFAULT_PING_COUNT,
    DEFAULT_SERVER,
)
from client.errors import ConfigError


class TestConfigDefaults(unittest.TestCase):
    def test_defaults_have_required_keys(self):
        for key in ("server", "ping_count", "download_megabytes",
                    "upload_megabytes", "deadline_seconds"):
            self.assertIn(key, DEFAULTS)

    def test_empty_options_use_defaults(self):
        cfg = SpeedTestConfig.from_options({})
        self.assertEqual(cfg, SpeedTestConfig())
        self.assertEqual(cfg.server, DEFAULT_SERVER)
        self.assertEqual(cfg.ping_count, DEFAULT_PING_COUNT)

    def test_none_values_use_defaults(self):
        cfg = SpeedTestConfig.from_options({"ping_count": None, "server": None})
        self.assertEqual(cfg.ping_count, DEFAULT_PING_COUNT)
        self.assertEqual(cfg.server, DEFAULT_SERVER)

    def test_zero_treated_as_default(self):
        cfg = SpeedTestConfig.from_options({"downloadMegabytes": 0})
        self.assertEqual(cfg.download_megabytes, DEFAULT_DOWNLOAD_MEGABYTES)

    def test_config_is_immutable(self):
        cfg = SpeedTestConfig()
        with self.assertRaises(dataclasses.FrozenInstanceError):
            cfg.ping_count = 5


class TestFromOptions(unittest.TestCase):
    def test_camel_case_aliases(self):
        cfg = SpeedTestConfig.from_options({
            "server": "http://test.local",
            "pingCount": 4,
            "uploadMegabytes": 1,
            "deadlineSeconds": 5,
        })
        self.assertEqual(cfg.server, "http://test.local")
        self.assertEqual(cfg.ping_count, 4)
        self.assertEqual(cfg.upload_megabytes, 1)
        self.assertEqual(cfg.deadline_seconds, 5)

    def test_unit_aliases(self):
        cfg = SpeedTestConfig.from_options({"downloadUnits": 3, "upload_units": 2})
        self.assertEqual(cfg.download_megabytes, 3)
        self.assertEqual(cfg.upload_megabytes, 2)

    def test_numeric_strings_coerced(self):
        cfg = SpeedTestConfig.from_options({"ping_count": "12", "deadline_seconds": " 7 "})
        self.assertEqual(cfg.ping_count, 12)
        self.assertEqual(cfg.deadline_seconds, 7)

    def test_integral_float_accepted(self):
        cfg = SpeedTestConfig.from_options({"ping_count": 10.0})
        self.assertEqual(cfg.ping_count, 10)

    def test_trailing_slash_stripped(self):
        cfg = SpeedTestConfig.from_options({"server": "https://speed.example.com/"})
        self.assertEqual(cfg.server, "https://speed.example.com")

    def test_unknown_keys_ignored(self):
        cfg = SpeedTestConfig.from_options({"colour": "blue"})
        self.assertEqual(cfg, SpeedTestConfig())

    def test_negative_rejected(self):
        with self.assertRaises(ConfigError):
            SpeedTestConfig.from_options({"ping_count": -1})

    def test_fraction_rejected(self):
        with self.assertRaises(ConfigError):
            SpeedTestConfig.from_options({"upload_megabytes": 1.5})

    def test_non_numeric_rejected(self):
        with self.assertRaises(ConfigError):
            SpeedTestConfig.from_options({"deadline_seconds": "soon"})

    def test_bool_rejected(self):
        with self.assertRaises(ConfigError):
            SpeedTestConfig.from_options({"ping_count": True})

    def test_bad_scheme_rejected(self):
        with self.assertRaises(ConfigError):
            SpeedTestConfig.from_options({"server": "ftp://speed.example.com"})

    def test_relative_url_rejected(self):
        with self.assertRaises(ConfigError):
            SpeedTestConfig.from_options({"server": "not a url"})

    def test_non_string_server_rejected(self):
        with self.assertRaises(ConfigError):
            SpeedTestConfig.from_options({"server": 42})

    def test_config_error_is_value_error(self):
        with self.assertRaises(ValueError):
            SpeedTestConfig.from_options({"ping_count": -3})

    def test_to_dict(self):
        d = SpeedTestConfig(ping_count=4).to_dict()
        self.assertEqual(d["ping_count"], 4)
        self.assertEqual(d["deadline_seconds"], DEFAULT_DEADLINE_SECONDS)


class TestLoadSaveConfig(unittest.TestCase):
    def test_load_defaults_when_missing(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "config.json")
            with mock.patch("client.config._config_path", return_value=path):
                cfg = load_config()
                self.assertEqual(cfg["ping_count"], DEFAULT_PING_COUNT)
                self.assertEqual(cfg["server"], DEFAULT_SERVER)

    def test_save_and_load(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "sub", "config.json")
            with mock.patch("client.config._config_path", return_value=path):
                save_config({"ping_count": 20, "server": "http://localhost:8000"})
                cfg = load_config()
                self.assertEqual(cfg["ping_count"], 20)
                self.assertEqual(cfg["server"], "http://localhost:8000")
                # Defaults still present
                self.assertEqual(cfg["deadline_seconds"], DEFAULT_DEADLINE_SECONDS)

    def test_corrupt_file_returns_defaults(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "config.json")
            with open(path, "w") as f:
                f.write("NOT JSON")
            with mock.patch("client.config._config_path", return_value=path):
                with self.assertLogs("client.config", level="WARNING"):
                    cfg = load_config()
                self.assertEqual(cfg["ping_count"], DEFAULT_PING_COUNT)

    def test_non_object_file_returns_defaults(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "config.json")
            with open(path, "w") as f:
                f.write("[1, 2, 3]")
            with mock.patch("client.config._config_path", return_value=path):
                with self.assertLogs("client.config", level="WARNING"):
                    cfg = load_config()
                self.assertEqual(cfg, DEFAULTS)

    def test_camel_case_file_keys_normalised(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "config.json")
            with mock.patch("client.config._config_path", return_value=path):
                save_config({"pingCount": 7, "uploadUnits": 3})
                cfg = load_config()
            self.assertEqual(cfg["ping_count"], 7)
            self.assertEqual(cfg["upload_megabytes"], 3)
            self.assertNotIn("pingCount", cfg)

    def test_loaded_file_validates(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "config.json")
            with mock.patch("client.config._config_path", return_value=path):
                save_config({"ping_count": "-2"})
                with self.assertRaises(ConfigError):
                    SpeedTestConfig.from_options(load_config())


if __name__ == "__main__":
    unittest.main()
