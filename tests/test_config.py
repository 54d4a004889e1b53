import json
import logging
import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from connector_tf._config import DEFAULT_SETTINGS, SENSITIVE_PLACEHOLDER, load_settings  # noqa: E402
from connector_tf._logging import get_logger, redact_config  # noqa: E402


class SettingsTests(unittest.TestCase):
    def test_defaults(self):
        self.assertEqual(DEFAULT_SETTINGS.placeholder, SENSITIVE_PLACEHOLDER)
        self.assertEqual(DEFAULT_SETTINGS.resource_type, "confluent_connector")
        self.assertEqual(DEFAULT_SETTINGS.kafka_cluster_variable, "var.kafka_cluster_id")
        self.assertEqual(DEFAULT_SETTINGS.format_table, "local.schema_formats")
        self.assertIsNone(DEFAULT_SETTINGS.catalog_path)

    def test_load_settings_merges_layers(self):
        with tempfile.NamedTemporaryFile("w", suffix=".json", delete=False) as tmp:
            json.dump({"placeholder": "FROM_FILE", "status_variable": "var.file_status"}, tmp)
            file_path = tmp.name

        try:
            with patch.dict(
                os.environ,
                {"CTFTEST_STATUS_VARIABLE": "var.env_status", "CTFTEST_LOG_LEVEL": "DEBUG"},
                clear=False,
            ):
                settings = load_settings(
                    file_path=file_path,
                    env_prefix="CTFTEST",
                    overrides={"format_table": "local.formats", "catalog_path": None},
                )
        finally:
            os.unlink(file_path)

        self.assertEqual(settings.placeholder, "FROM_FILE")
        self.assertEqual(settings.status_variable, "var.env_status")
        self.assertEqual(settings.format_table, "local.formats")
        self.assertEqual(settings.environment_variable, "var.environment_id")

    def test_missing_settings_file_raises(self):
        with self.assertRaises(FileNotFoundError):
            load_settings(file_path="/nonexistent/settings.json", env_prefix=None)

    def test_settings_file_must_be_object(self):
        with tempfile.NamedTemporaryFile("w", suffix=".json", delete=False) as tmp:
            json.dump(["not", "an", "object"], tmp)
            file_path = tmp.name

        try:
            with self.assertRaises(ValueError):
                load_settings(file_path=file_path, env_prefix=None)
        finally:
            os.unlink(file_path)

    def test_empty_placeholder_is_rejected(self):
        with self.assertRaises(ValueError):
            load_settings(env_prefix=None, overrides={"placeholder": ""})


class LoggingTests(unittest.TestCase):
    def test_get_logger_namespaces_under_package(self):
        logger = get_logger("tests")
        self.assertIsInstance(logger, logging.Logger)
        self.assertEqual(logger.name, "connector_tf.tests")

    def test_redact_config_masks_known_and_secret_looking_keys(self):
        values = {
            "database.hostname": "db",
            "database.password": "pw",
            "keyfile": "{...}",
            "kafka.api.key": "key",
            "aws.session.token": None,
        }

        redacted = redact_config(values, sensitive_keys={"keyfile"})

        self.assertEqual(redacted["database.hostname"], "db")
        self.assertEqual(redacted["database.password"], "***")
        self.assertEqual(redacted["keyfile"], "***")
        self.assertEqual(redacted["kafka.api.key"], "***")
        self.assertIsNone(redacted["aws.session.token"])
        self.assertEqual(values["database.password"], "pw")
