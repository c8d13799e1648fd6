"""Unit tests for the Azure Functions timer adapter."""

from __future__ import annotations

import importlib.util
import json
import logging
from pathlib import Path
from types import SimpleNamespace

from fakes import FakeSink, FakeSource, factory_for
from mongo2blob import scheduler
from mongo2blob.config.settings import REQUIRED_VARIABLES
from mongo2blob.domain.enums import ExportStatus
from mongo2blob.domain.models import ExportResult
from mongo2blob.pipeline.export import run_export_from_env

APP_ROOT = Path(__file__).resolve().parents[2]


def test_schedule_fires_every_minute() -> None:
    assert scheduler.EXPORT_SCHEDULE == "0 */1 * * * *"


def test_tick_runs_export_with_fresh_timestamp() -> None:
    seen = []

    def runner(timestamp):
        seen.append(timestamp)
        return ExportResult(status=ExportStatus.EMPTY_RESULT, timestamp=timestamp)

    result = scheduler.run_scheduled_export(SimpleNamespace(past_due=False), runner=runner)

    assert result.status == ExportStatus.EMPTY_RESULT
    assert len(seen) == 1
    assert seen[0].endswith("Z")


def test_past_due_timer_is_logged(caplog) -> None:
    def runner(timestamp):
        return ExportResult(status=ExportStatus.EMPTY_RESULT, timestamp=timestamp)

    with caplog.at_level(logging.WARNING):
        scheduler.run_scheduled_export(SimpleNamespace(past_due=True), runner=runner)

    assert "past due" in caplog.text


def test_tick_with_missing_configuration_returns_result() -> None:
    """Missing app settings surface as a result, never as an exception."""
    result = scheduler.run_scheduled_export(None)

    assert result.status == ExportStatus.CONFIGURATION_ERROR
    assert "MongoDBAtlasConnectionString" in result.error_message


def test_tick_end_to_end_with_fakes(export_environment) -> None:
    sink = FakeSink()

    def runner(timestamp):
        return run_export_from_env(
            timestamp,
            source_factory=factory_for(FakeSource(records=[{"a": 1, "b": 2}])),
            sink_factory=factory_for(sink),
        )

    result = scheduler.run_scheduled_export(None, runner=runner)

    assert result.status == ExportStatus.SUCCESS
    assert sink.blobs[result.artifact_name] == b"a,b\n1,2\n"


def test_function_app_registers_timer_function() -> None:
    app = scheduler.create_function_app()

    names = [function.get_function_name() for function in app.get_functions()]

    assert names == [scheduler.FUNCTION_NAME]


def test_function_app_module_exposes_app() -> None:
    """The host indexes function_app.py at the app root."""
    app_file = importlib.util.spec_from_file_location("function_app", APP_ROOT / "function_app.py")
    module = importlib.util.module_from_spec(app_file)
    app_file.loader.exec_module(module)

    names = [function.get_function_name() for function in module.app.get_functions()]

    assert names == [scheduler.FUNCTION_NAME]


def test_requirements_install_the_project() -> None:
    """The Functions build installs requirements.txt, which must pull in the src/ package."""
    lines = (APP_ROOT / "requirements.txt").read_text().splitlines()

    assert "." in [line.strip() for line in lines]


def test_local_settings_example_lists_required_settings() -> None:
    settings = json.loads((APP_ROOT / "local.settings.json.example").read_text())

    assert settings["Values"]["FUNCTIONS_WORKER_RUNTIME"] == "python"
    assert set(REQUIRED_VARIABLES) <= set(settings["Values"])
