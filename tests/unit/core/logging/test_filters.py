"""
Tests for logging filters and the correlation id context.
"""

import asyncio
import logging

import pytest

from http_api_client.core.logging.filters import (
    CorrelationIdFilter,
    ExtraFieldsFilter,
    clear_correlation_id,
    get_correlation_id,
    set_correlation_id,
)


def make_record():
    return logging.LogRecord("test", logging.INFO, "test.py", 1, "msg", (), None)


class TestCorrelationId:

    def test_set_get_clear(self):
        set_correlation_id("req-1")
        assert get_correlation_id() == "req-1"
        clear_correlation_id()
        assert get_correlation_id() is None

    def test_filter_adds_id(self):
        set_correlation_id("req-2")
        record = make_record()
        assert CorrelationIdFilter().filter(record) is True
        assert record.correlation_id == "req-2"

    def test_filter_without_id(self):
        record = make_record()
        CorrelationIdFilter().filter(record)
        assert not hasattr(record, "correlation_id")

    def test_filter_keeps_explicit_id(self):
        set_correlation_id("ambient")
        record = make_record()
        record.correlation_id = "explicit"
        CorrelationIdFilter().filter(record)
        assert record.correlation_id == "explicit"

    @pytest.mark.asyncio
    async def test_tasks_keep_their_own_id(self):
        seen = {}

        async def worker(name):
            set_correlation_id(name)
            await asyncio.sleep(0)
            seen[name] = get_correlation_id()

        await asyncio.gather(worker("a"), worker("b"), worker("c"))
        assert seen == {"a": "a", "b": "b", "c": "c"}


class TestExtraFieldsFilter:

    def test_adds_fields(self):
        record = make_record()
        ExtraFieldsFilter({"service": "billing", "env": "test"}).filter(record)
        assert record.service == "billing"
        assert record.env == "test"

    def test_record_fields_win(self):
        record = make_record()
        record.service = "orders"
        ExtraFieldsFilter({"service": "billing"}).filter(record)
        assert record.service == "orders"
