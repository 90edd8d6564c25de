"""Tests for scripts/sync_unread.py."""

import asyncio
import importlib.util
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest

from miniflux_summary.core.entities import BatchReport, EntryOutcome, EntryStatus
from miniflux_summary.core.exceptions import ConfigurationError, FetchEntriesError

SCRIPT = Path(__file__).resolve().parents[2] / "scripts" / "sync_unread.py"
_spec = importlib.util.spec_from_file_location("sync_unread", SCRIPT)
sync_unread = importlib.util.module_from_spec(_spec)
_spec.loader.exec_module(sync_unread)


@pytest.fixture
def fake_pipeline(monkeypatch: pytest.MonkeyPatch, settings) -> Mock:
    pipeline = Mock()
    monkeypatch.setattr(sync_unread, "load_settings", lambda: settings)
    monkeypatch.setattr(sync_unread.EntryPipeline, "from_settings", lambda s: pipeline)
    return pipeline


class TestSync:
    def test_returns_zero_after_sweep(self, fake_pipeline) -> None:
        fake_pipeline.sync_unread = AsyncMock(
            return_value=BatchReport(outcomes=[EntryOutcome(entry_id=1, status=EntryStatus.SUMMARIZED)])
        )
        assert asyncio.run(sync_unread.sync(limit=10)) == 0
        fake_pipeline.sync_unread.assert_awaited_once_with(10)
        fake_pipeline.close.assert_called_once()

    def test_fetch_failure_exits_non_zero(self, fake_pipeline) -> None:
        fake_pipeline.sync_unread = AsyncMock(side_effect=FetchEntriesError(503, "unavailable"))
        assert asyncio.run(sync_unread.sync()) == 1
        fake_pipeline.close.assert_called_once()

    def test_missing_configuration(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def fail():
            raise ConfigurationError("Missing required configuration: MINIFLUX_URL")

        monkeypatch.setattr(sync_unread, "load_settings", fail)
        assert asyncio.run(sync_unread.sync()) == 2


class TestParseArgs:
    def test_limit(self) -> None:
        assert sync_unread.parse_args(["--limit", "25"]).limit == 25
        assert sync_unread.parse_args([]).limit is None

    @pytest.mark.parametrize("value", ["0", "-5", "many"])
    def test_limit_must_be_a_positive_integer(self, value) -> None:
        with pytest.raises(SystemExit):
            sync_unread.parse_args(["--limit", value])
