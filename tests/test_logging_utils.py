"""Tests for structured logging helpers."""

import json
import logging
import sys

from chat_sync_storage.logging_utils import (
    ROOT_LOGGER,
    StorageLoggerAdapter,
    StructuredJsonFormatter,
    configure_structured_logging,
    entity_context,
    get_storage_logger,
)
from chat_sync_storage.protocol import SyncStatus


def make_record(msg: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="chat_sync_storage.sync",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredJsonFormatter:
    """JSON output of the formatter."""

    def test_standard_fields(self):
        line = StructuredJsonFormatter().format(make_record("Sync deferred"))
        data = json.loads(line)

        assert data["level"] == "WARNING"
        assert data["logger"] == "chat_sync_storage.sync"
        assert data["message"] == "Sync deferred"
        assert "timestamp" in data

    def test_extra_fields_included(self):
        record = make_record("Sync deferred", key="messaging:general", sync_status="pending")

        data = json.loads(StructuredJsonFormatter().format(record))

        assert data["key"] == "messaging:general"
        assert data["sync_status"] == "pending"

    def test_unserializable_extra_stringified(self):
        record = make_record("x", entity=object())

        data = json.loads(StructuredJsonFormatter().format(record))

        assert data["entity"].startswith("<object object")

    def test_exception_included(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = make_record("failed")
            record.exc_info = sys.exc_info()

        data = json.loads(StructuredJsonFormatter().format(record))

        assert "RuntimeError: boom" in data["exception"]


class TestLoggerHelpers:
    """Logger factory and adapter."""

    def test_get_storage_logger_namespaced(self):
        assert get_storage_logger("sync").name == "chat_sync_storage.sync"

    def test_configure_replaces_handlers(self):
        name = "chat_sync_storage.test_configure"
        configure_structured_logging("DEBUG", logger_name=name)
        logger = configure_structured_logging("DEBUG", logger_name=name)

        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, StructuredJsonFormatter)
        assert logger.level == logging.DEBUG
        logger.handlers.clear()

    def test_adapter_adds_context(self, caplog):
        logger = get_storage_logger("adapter_test")
        adapter = StorageLoggerAdapter(logger, {"entity_type": "channel"})

        with caplog.at_level(logging.INFO, logger="chat_sync_storage"):
            adapter.info("pass started", extra={"pending": 3})

        record = caplog.records[-1]
        assert record.entity_type == "channel"
        assert record.pending == 3

    def test_configure_defaults_to_package_logger(self):
        logger = configure_structured_logging()

        assert logger.name == ROOT_LOGGER
        assert logger.level == logging.INFO
        logger.handlers.clear()
        logger.setLevel(logging.NOTSET)


class TestEntityContext:
    """Per-entity log fields."""

    def test_channel_context(self, general_channel):
        assert entity_context(general_channel) == {
            "entity_type": "channel",
            "key": "messaging:general",
            "sync_status": "completed",
        }

    def test_message_context_after_status_change(self, make_message):
        message = make_message("m1", sync_status=SyncStatus.FAILED_PERMANENTLY)

        context = entity_context(message)

        assert context["entity_type"] == "message"
        assert context["sync_status"] == "failed_permanently"

    def test_enum_extra_rendered_as_value(self):
        record = make_record("x", sync_status=SyncStatus.COMPLETED)

        data = json.loads(StructuredJsonFormatter().format(record))

        assert data["sync_status"] == "completed"
