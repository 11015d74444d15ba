from __future__ import annotations

import pytest

from buffer_bridge.runtime import telemetry
from buffer_bridge.sync import SessionContext


def test_unknown_preset_is_rejected() -> None:
    with pytest.raises(ValueError):
        telemetry.configure(preset="loud")


def test_config_and_preset_are_exclusive() -> None:
    with pytest.raises(ValueError):
        telemetry.configure(config=object(), preset="quiet")


def test_loggers_are_cached_per_name() -> None:
    first = telemetry.get_logger("buffer_bridge.tests")
    assert telemetry.get_logger("buffer_bridge.tests") is first


def test_events_and_spans_do_not_raise() -> None:
    telemetry.record_event("tests.event", data={"cursor": (1, 2)})
    telemetry.record_event("tests.debug", level="debug")
    with telemetry.span("tests.span", component=True, metadata={"k": [1, 2]}):
        telemetry.record_event("tests.inside_span")


def test_span_reports_and_reraises_errors() -> None:
    with pytest.raises(RuntimeError):
        with telemetry.span("tests.failing"):
            raise RuntimeError("boom")


def test_session_warning_defaults_to_telemetry() -> None:
    SessionContext().warn("heads up", file="main.py")
