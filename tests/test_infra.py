import json
import logging
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from kadmin_panel.infra.config import load_config
from kadmin_panel.infra.logging import JsonFormatter

PANEL_YAML = """
log_level: DEBUG
backend:
  base_url: http://kadmin:8080
  context_path: /kadmin
  timeout_seconds: 4
session:
  refresh_interval_ms: 2000
  default_topic: orders
  default_deserializer_id: string
  queue_size: 25
dashboard:
  port: 9000
  public_origin: http://kadmin:8080/kadmin
"""


class LoadConfigTest(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.path = Path(self.tmp.name) / "panel.yaml"
        self.path.write_text(PANEL_YAML, encoding="utf-8")

    def test_loads_sections(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=False):
            os.environ.pop("KADMIN_BACKEND_URL", None)
            cfg = load_config(self.path)

        self.assertEqual("DEBUG", cfg.log_level)
        self.assertEqual("http://kadmin:8080", cfg.backend.base_url)
        self.assertEqual("/kadmin", cfg.backend.context_path)
        self.assertEqual(4.0, cfg.backend.timeout_seconds)
        self.assertEqual(2000, cfg.session.refresh_interval_ms)
        self.assertTrue(cfg.session.autostart)
        self.assertEqual("orders", cfg.session.form()["topic"])
        self.assertEqual(25, cfg.session.form()["queue_size"])
        self.assertEqual(9000, cfg.dashboard.port)
        self.assertEqual("127.0.0.1", cfg.dashboard.host)

    def test_backend_url_env_override(self) -> None:
        with mock.patch.dict(os.environ, {"KADMIN_BACKEND_URL": "http://other:9090"}):
            cfg = load_config(self.path)
        self.assertEqual("http://other:9090", cfg.backend.base_url)

    def test_missing_file_uses_defaults(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=False):
            os.environ.pop("KADMIN_BACKEND_URL", None)
            with self.assertLogs("kadmin_panel.infra.config", level="WARNING"):
                cfg = load_config(Path(self.tmp.name) / "missing.yaml")

        self.assertEqual("http://localhost:8080", cfg.backend.base_url)
        self.assertEqual(0, cfg.session.refresh_interval_ms)
        self.assertFalse(cfg.session.autostart)


class JsonFormatterTest(unittest.TestCase):
    def test_extra_fields_are_emitted(self) -> None:
        record = logging.LogRecord("kadmin_panel.session", logging.INFO, __file__, 1, "Session %s", ("c1",), None)
        record.event = "session_assigned"
        record.session_id = "c1"

        payload = json.loads(JsonFormatter().format(record))

        self.assertEqual("INFO", payload["level"])
        self.assertEqual("Session c1", payload["message"])
        self.assertEqual("session_assigned", payload["event"])
        self.assertEqual({"session_id": "c1"}, payload["context"])
        self.assertNotIn("args", payload)
        self.assertNotIn("session_id", payload)

    def test_context_cannot_shadow_fixed_fields(self) -> None:
        record = logging.LogRecord("kadmin_panel.session", logging.WARNING, __file__, 1, "stale", (), None)
        record.level = "bogus"

        payload = json.loads(JsonFormatter().format(record))

        self.assertEqual("WARNING", payload["level"])
        self.assertEqual({"level": "bogus"}, payload["context"])

    def test_untagged_record_gets_default_event(self) -> None:
        record = logging.LogRecord("kadmin_panel.app", logging.INFO, __file__, 1, "Panel listening", (), None)

        payload = json.loads(JsonFormatter().format(record))

        self.assertEqual("log", payload["event"])
        self.assertNotIn("context", payload)


if __name__ == "__main__":
    unittest.main()
