"""Tests for semid.core.logging."""

from __future__ import annotations

import json
import logging

import pytest

from semid.core.logging import (
    REDACTED,
    JSONFormatter,
    OperationLog,
    StandardFormatter,
    configure_logging,
    current_request_id,
    redact,
    request_scope,
)


def _record(msg: str = "hello", level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord("semid.test", level, __file__, 10, msg, None, None)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestRequestScope:
    def test_unset_outside_scope(self):
        assert current_request_id() is None

    def test_binds_and_resets(self):
        with request_scope("abc") as rid:
            assert rid == "abc"
            assert current_request_id() == "abc"
        assert current_request_id() is None

    def test_generates_fresh_ids(self):
        with request_scope() as first:
            pass
        with request_scope() as second:
            pass
        assert len(first) == 36
        assert first != second

    def test_nested_scope_restores_outer(self):
        with request_scope("outer"):
            with request_scope("inner"):
                assert current_request_id() == "inner"
            assert current_request_id() == "outer"


class TestRedact:
    def test_masks_sensitive_keys(self):
        params = {"name": "alice", "salt": "s3cret", "nested": {"privateKey": "x"}}
        assert redact(params) == {
            "name": "alice",
            "salt": REDACTED,
            "nested": {"privateKey": REDACTED},
        }

    def test_walks_lists(self):
        assert redact([{"seed": "00"}, "ok"]) == [{"seed": REDACTED}, "ok"]

    def test_truncates_long_strings(self):
        cut = redact({"name": "a" * 500})["name"]
        assert cut.endswith("...")
        assert len(cut) == 203

    def test_leaves_input_untouched(self):
        params = {"salt": "s3cret"}
        redact(params)
        assert params == {"salt": "s3cret"}


class TestJSONFormatter:
    def test_basic_fields(self):
        data = json.loads(JSONFormatter().format(_record()))
        assert data["level"] == "INFO"
        assert data["logger"] == "semid.test"
        assert data["message"] == "hello"
        assert "at" not in data
        assert "request_id" not in data

    def test_warning_has_location(self):
        data = json.loads(JSONFormatter().format(_record(level=logging.WARNING)))
        assert data["at"].startswith(f"{__file__}:10")

    def test_request_id(self):
        with request_scope("rid-1"):
            data = json.loads(JSONFormatter().format(_record()))
        assert data["request_id"] == "rid-1"

    def test_context(self):
        record = _record()
        record.context = {"method": "registerIdentity"}
        data = json.loads(JSONFormatter().format(record))
        assert data["context"] == {"method": "registerIdentity"}


class TestStandardFormatter:
    def test_format(self):
        out = StandardFormatter().format(_record())
        assert "INFO" in out
        assert out.endswith("semid.test hello")

    def test_request_prefix(self):
        with request_scope("12345678-aaaa"):
            out = StandardFormatter().format(_record())
        assert out.endswith("[12345678] hello")


class TestConfigureLogging:
    def test_json_console(self, clean_env, restore_root_logger):
        configure_logging(level="DEBUG", json_format=True)
        assert restore_root_logger.level == logging.DEBUG
        assert len(restore_root_logger.handlers) == 1
        assert isinstance(restore_root_logger.handlers[0].formatter, JSONFormatter)

    def test_text_from_env(self, clean_env, monkeypatch, restore_root_logger):
        monkeypatch.setenv("SEMID_LOG_FORMAT", "text")
        configure_logging()
        assert isinstance(restore_root_logger.handlers[0].formatter, StandardFormatter)

    def test_unknown_level_falls_back_to_info(self, clean_env, restore_root_logger):
        configure_logging(level="chatty", json_format=True)
        assert restore_root_logger.level == logging.INFO

    def test_log_file(self, clean_env, tmp_path, restore_root_logger):
        log_file = tmp_path / "semid.log"
        configure_logging(json_format=False, log_file=str(log_file))
        assert len(restore_root_logger.handlers) == 2
        assert isinstance(restore_root_logger.handlers[1].formatter, JSONFormatter)
        for handler in restore_root_logger.handlers[1:]:
            handler.close()


class TestOperationLog:
    def test_started_redacts_params(self, caplog):
        logger = logging.getLogger("semid.operations.test")
        with caplog.at_level(logging.DEBUG, logger="semid.operations.test"):
            OperationLog(logger).started("registerIdentity", {"name": "a", "salt": "x"})
        assert caplog.records[0].context == {
            "method": "registerIdentity",
            "params": {"name": "a", "salt": REDACTED},
        }

    def test_finished(self, caplog):
        logger = logging.getLogger("semid.operations.test")
        with caplog.at_level(logging.DEBUG, logger="semid.operations.test"):
            OperationLog(logger).finished("registerIdentity", False, 1.5)
        assert caplog.records[0].getMessage() == "<- registerIdentity failed in 1.5ms"
        assert caplog.records[0].context["ok"] is False
