"""Tests for structured run logging."""

import asyncio
import logging
from collections.abc import Callable
from typing import Any

import pytest
import structlog
from conftest import Outcome, failing_step, later_step, sync_step
from structlog.testing import CapturingLoggerFactory, capture_logs

from stepflow.config import reset_runner_config
from stepflow.logging import (
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    reset_logging,
    run_logger,
    unbind_context,
)
from stepflow.waterfall import run


def _events(logs: list[dict[str, Any]]) -> list[str]:
    return [entry["event"] for entry in logs]


class TestRunEvents:
    """The runner reports its lifecycle as structured events."""

    def test_successful_run(self, drive: Callable[..., Outcome]) -> None:
        with capture_logs() as logs:
            outcome = drive([sync_step(1), sync_step(2)])

        assert outcome.terminator is not None
        assert _events(logs) == [
            "run_started",
            "step_started",
            "step_completed",
            "step_started",
            "step_completed",
            "run_succeeded",
        ]
        assert all(entry["run_id"] == outcome.terminator.run_id for entry in logs)

    def test_failed_run(self, drive: Callable[..., Outcome]) -> None:
        with capture_logs() as logs:
            drive([failing_step(RuntimeError("nope"))])

        failed = [entry for entry in logs if entry["event"] == "run_failed"]
        assert len(failed) == 1
        assert failed[0]["step"] == 0
        assert failed[0]["log_level"] == "info"
        assert "nope" in failed[0]["error"]

    def test_canceled_run_and_late_completion(self) -> None:
        async def scenario() -> None:
            terminator = run([later_step(0.01, "late")], lambda *args: None)
            terminator()
            await asyncio.sleep(0.05)

        with capture_logs() as logs:
            asyncio.run(scenario())

        events = _events(logs)
        assert "run_canceled" in events
        assert "run_succeeded" not in events

    def test_duplicate_completion_logged(self, drive: Callable[..., Outcome]) -> None:
        def twice(done: Callable[..., None]) -> None:
            done(None)
            done(None)

        with capture_logs() as logs:
            drive([twice])

        assert _events(logs).count("late_completion_ignored") == 1

    def test_run_name_bound(self) -> None:
        async def scenario() -> None:
            finished = asyncio.Event()
            run([sync_step()], lambda *args: finished.set(), name="nightly")
            await asyncio.wait_for(finished.wait(), timeout=1.0)

        with capture_logs() as logs:
            asyncio.run(scenario())

        assert all(entry["run_name"] == "nightly" for entry in logs)


class TestConfigureLogging:
    def test_auto_configures_on_first_logger(self) -> None:
        reset_logging()

        get_logger("stepflow.test")

        assert structlog.is_configured()

    def test_json_output(self) -> None:
        factory = CapturingLoggerFactory()
        configure_logging(json_format=True, level=logging.INFO, logger_factory=factory)

        run_logger("run-1").info("run_succeeded", steps=2)

        assert len(factory.logger.calls) == 1
        rendered = factory.logger.calls[0].args[0]
        assert '"run_id": "run-1"' in rendered
        assert '"event": "run_succeeded"' in rendered

    def test_level_filters_debug(self) -> None:
        factory = CapturingLoggerFactory()
        configure_logging(json_format=True, level=logging.INFO, logger_factory=factory)

        run_logger("run-2").debug("step_started", step=0)

        assert factory.logger.calls == []

    def test_level_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STEPFLOW_LOG_LEVEL", "WARNING")
        reset_runner_config()
        factory = CapturingLoggerFactory()
        configure_logging(json_format=True, logger_factory=factory)

        run_logger("run-3").info("run_started")
        run_logger("run-3").warning("slow_step")

        assert len(factory.logger.calls) == 1


class TestContext:
    def test_bind_and_clear(self) -> None:
        clear_context()
        bind_context(request_id="req-1", tenant="acme")
        unbind_context("tenant")

        assert structlog.contextvars.get_contextvars() == {"request_id": "req-1"}

        clear_context()

        assert structlog.contextvars.get_contextvars() == {}
