from __future__ import annotations

import logging

from logging_config import ContextualFormatter, build_logging_config


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="services.enricher",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Reading enriched",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_appends_known_context_keys() -> None:
    formatter = ContextualFormatter(fmt="%(message)s")

    message = formatter.format(
        _record(intensity=1.5, intensity_unit="speed", alert_count=0, unrelated="x")
    )

    assert message == "Reading enriched | intensity=1.5 intensity_unit=speed alert_count=0"


def test_formatter_skips_missing_and_none_values() -> None:
    formatter = ContextualFormatter(fmt="%(message)s")

    assert formatter.format(_record(intensity=None)) == "Reading enriched"


def test_build_logging_config_uses_requested_level() -> None:
    config = build_logging_config("DEBUG")

    assert config["root"]["level"] == "DEBUG"
    assert config["handlers"]["default"]["level"] == "DEBUG"
    assert config["formatters"]["contextual"]["()"] == "logging_config.ContextualFormatter"
