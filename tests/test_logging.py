"""Tests for logging configuration."""

from __future__ import annotations

import io
import json
import logging

from variantforge.observability import (
    ROOT_LOGGER,
    StructuredFormatter,
    configure_logging,
    get_context,
    log_context,
    setup_logging,
)


def make_record(msg: str = "Writing %s", *args: object, **extra: object) -> logging.LogRecord:
    record = logging.LogRecord("variantforge.writer", logging.INFO, __file__, 1, msg, args or ("x.py",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter:
    """Tests for JSON log records."""

    def test_basic_fields(self) -> None:
        data = json.loads(StructuredFormatter().format(make_record()))

        assert data["level"] == "info"
        assert data["logger"] == "variantforge.writer"
        assert data["message"] == "Writing x.py"
        assert "timestamp" in data
        assert "context" not in data

    def test_extra_fields_in_data(self) -> None:
        data = json.loads(StructuredFormatter().format(make_record(leaves=4)))

        assert data["data"] == {"leaves": 4}

    def test_bound_context(self) -> None:
        with log_context(variant="pg/fr"):
            data = json.loads(StructuredFormatter().format(make_record()))

        assert data["context"] == {"variant": "pg/fr"}

    def test_static_fields(self) -> None:
        data = json.loads(StructuredFormatter(extra_fields={"service": "ci"}).format(make_record()))

        assert data["service"] == "ci"

    def test_exception(self) -> None:
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            import sys

            record = logging.LogRecord("variantforge", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())

        data = json.loads(StructuredFormatter().format(record))

        assert data["exception"]["type"] == "RuntimeError"
        assert data["exception"]["message"] == "boom"


class TestLogContext:
    """Tests for log_context."""

    def test_nested_and_restored(self) -> None:
        with log_context(variant="pg"):
            with log_context(test="basic"):
                assert get_context() == {"variant": "pg", "test": "basic"}
            assert get_context() == {"variant": "pg"}

        assert get_context() == {}


class TestConfigureLogging:
    """Tests for configure_logging / setup_logging."""

    def test_text_format(self) -> None:
        stream = io.StringIO()
        configure_logging(level="INFO", stream=stream)

        logging.getLogger("variantforge.writer").info("Writing %s", "a/x/basic.py")

        line = stream.getvalue()
        assert " - variantforge.writer - INFO - Writing a/x/basic.py" in line

    def test_json_format(self) -> None:
        stream = io.StringIO()
        configure_logging(level=logging.DEBUG, json_format=True, stream=stream)

        logging.getLogger("variantforge.combinatorial").debug("pruned")

        assert json.loads(stream.getvalue())["message"] == "pruned"

    def test_level_filters(self) -> None:
        stream = io.StringIO()
        configure_logging(level="WARNING", stream=stream)

        logging.getLogger("variantforge").info("quiet")

        assert stream.getvalue() == ""

    def test_reconfigure_replaces_handler(self) -> None:
        configure_logging()
        configure_logging()

        assert len(logging.getLogger(ROOT_LOGGER).handlers) == 1

    def test_setup_logging_verbose(self) -> None:
        logger = setup_logging(verbose=True)

        assert logger.level == logging.DEBUG
        assert setup_logging(verbose=False, log_format="json").level == logging.INFO
        assert isinstance(logger.handlers[0].formatter, StructuredFormatter)
