from __future__ import annotations

import asyncio

import pytest

from helpers import FakeBackend
from spelling_session.services.notices import NoticeBoard
from spelling_session.services.progress import ProgressReporter


def test_report_returns_before_sync_completes():
    backend = FakeBackend()
    reporter = ProgressReporter(backend, NoticeBoard())

    async def scenario():
        reporter.report(11, 5)
        assert backend.progress_calls == []
        assert reporter.pending == 1
        await reporter.drain()

    asyncio.run(scenario())

    assert backend.progress_calls == [(11, 5)]
    assert reporter.pending == 0


def test_sync_failure_becomes_a_notice():
    backend = FakeBackend()
    backend.fail_progress = True
    notices = NoticeBoard()
    reporter = ProgressReporter(backend, notices)

    async def scenario():
        reporter.report(11, 1)
        await reporter.drain()

    asyncio.run(scenario())

    items = notices.drain()
    assert len(items) == 1
    assert items[0].level == "error"
    assert "sync rejected" in items[0].message


def test_unknown_quality_is_rejected():
    reporter = ProgressReporter(FakeBackend(), NoticeBoard())

    async def scenario():
        with pytest.raises(ValueError):
            reporter.report(11, 3)

    asyncio.run(scenario())
