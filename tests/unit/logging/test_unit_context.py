# tests/unit/logging/test_unit_context.py — v2
"""Tests for logging/context.py — run-scoped logging variables."""

from __future__ import annotations

import pytest

from launchprep.logging.context import (
    clear_context,
    get_context,
    run_logging_context,
    set_state_context,
)


class TestLogContext:
    def setup_method(self):
        clear_context()

    def teardown_method(self):
        clear_context()

    def test_initial_state(self):
        ctx = get_context()
        assert ctx.run_id is None
        assert ctx.program is None
        assert ctx.state is None

    def test_run_scope_sets_values(self):
        with run_logging_context("run1", "prog", namespace="ns") as ctx:
            assert ctx.run_id == "run1"
            assert get_context().program == "prog"
            assert get_context().namespace == "ns"

    def test_run_scope_restores_on_exit(self):
        with run_logging_context("run1", "prog"):
            set_state_context("bundling")
        ctx = get_context()
        assert ctx.run_id is None
        assert ctx.state is None

    def test_run_scope_restores_on_error(self):
        with pytest.raises(RuntimeError):
            with run_logging_context("run1", "prog"):
                raise RuntimeError("boom")
        assert get_context().run_id is None

    def test_nested_scope_restores_outer(self):
        with run_logging_context("outer", "prog"):
            with run_logging_context("inner", "prog"):
                assert get_context().run_id == "inner"
            assert get_context().run_id == "outer"

    def test_as_dict_filters_none(self):
        with run_logging_context("run1", "prog"):
            d = get_context().as_dict()
        assert d == {"run_id": "run1", "program": "prog"}

    def test_clear(self):
        set_state_context("staging")
        clear_context()
        assert get_context().state is None
