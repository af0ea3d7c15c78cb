# tests/unit/runtime/test_unit_event_handlers.py — v1
"""Tests for runtime/handlers.py."""

from __future__ import annotations

import logging

from launchprep.runtime.handlers import EventHandler, LogOnlyEventHandler


class TestEventHandler:
    def test_configure_spec(self):
        spec = LogOnlyEventHandler.configure(level="x")
        assert spec.class_name == "launchprep.runtime.handlers:LogOnlyEventHandler"
        assert spec.configs == {"level": "x"}

    def test_initialize_keeps_configs(self):
        handler = EventHandler()
        handler.initialize({"a": "1"})
        assert handler.configs == {"a": "1"}

    def test_log_only_logs(self, caplog):
        handler = LogOnlyEventHandler()
        with caplog.at_level(logging.INFO, logger="launchprep.runtime.handlers"):
            handler.started("run1", "counter")
            handler.aborted("run1", "counter", RuntimeError("boom"))
        assert "started" in caplog.text
        assert "boom" in caplog.text
