"""
This module contains the core use case logic: turning a Miniflux webhook into summarized entries.

For one webhook request:
1. Verify the X-Miniflux-Signature of the raw body (AuthError otherwise)
2. Decode the body into a WebhookEvent (DecodeError otherwise)
3. Ignore anything that is not a new_entries event
4. For each entry, independently: eligibility check -> summary -> update in Miniflux

Entries run concurrently, bounded by a semaphore. A failing entry is logged and reported in the BatchReport
and never stops its siblings. Blocking SDK calls are pushed to worker threads with asyncio.to_thread.
"""

import asyncio
from typing import List, Optional

from pydantic import ValidationError

from miniflux_summary.adapters.llm import SummarizerClient
from miniflux_summary.adapters.miniflux import MinifluxAdapter
from miniflux_summary.config import Settings
from miniflux_summary.core.eligibility import check_eligibility
from miniflux_summary.core.entities import BatchReport, Entry, EntryOutcome, EntryStatus, WebhookEvent
from miniflux_summary.core.exceptions import AuthError, DecodeError, SummarizeError, UpdateError
from miniflux_summary.core.signature import verify_signature

from miniflux_summary.utils.logging_setup import get_logger
logger = get_logger(__name__, log_file="core.log")


class EntryPipeline:
    def __init__(self, settings: Settings, summarizer: SummarizerClient, miniflux: MinifluxAdapter):
        self.settings = settings
        self.summarizer = summarizer
        self.miniflux = miniflux

    @classmethod
    def from_settings(cls, settings: Settings) -> "EntryPipeline":
        return cls(settings, SummarizerClient(settings), MinifluxAdapter(settings))

    def accept(self, body: bytes, signature: Optional[str]) -> WebhookEvent:
        """Authenticate and decode a raw webhook body. Nothing is parsed before the signature checks out."""
        if not verify_signature(self.settings.webhook_secret, body, signature):
            logger.warning("🚫 Rejected webhook with missing or invalid signature")
            raise AuthError("Invalid signature")
        try:
            event = WebhookEvent.model_validate_json(body)
        except ValidationError as e:
            logger.warning(f"⚠️ Rejected malformed webhook body: {e.error_count()} error(s)")
            raise DecodeError(str(e)) from e
        logger.info(f"📬 Accepted '{event.event_type}' webhook with {len(event.entries)} entries")
        return event

    async def process_event(self, event: WebhookEvent) -> BatchReport:
        if not event.is_new_entries:
            logger.info(f"⏭️ Ignoring '{event.event_type}' event")
            return BatchReport()
        return await self.process_entries(event.resolved_entries())

    async def sync_unread(self, limit: Optional[int] = None) -> BatchReport:
        """Periodic sweep: run every unread entry through the pipeline."""
        if limit is None:
            limit = self.settings.sync_limit
        if limit < 1:
            raise ValueError(f"limit must be a positive integer, got {limit}")
        entries = await asyncio.to_thread(self.miniflux.fetch_unread_entries, limit)
        return await self.process_entries(entries)

    async def process_entries(self, entries: List[Entry]) -> BatchReport:
        if not entries:
            logger.info("📭 No entries to process")
            return BatchReport()

        logger.info(f"⚙️ Processing {len(entries)} entries (max concurrency {self.settings.max_concurrency})")
        semaphore = asyncio.Semaphore(self.settings.max_concurrency)

        async def _process(entry: Entry) -> EntryOutcome:
            async with semaphore:
                return await self.process_entry(entry)

        results = await asyncio.gather(*[_process(entry) for entry in entries], return_exceptions=True)

        outcomes = []
        for entry, result in zip(entries, results):
            if isinstance(result, BaseException):
                if isinstance(result, asyncio.CancelledError):
                    raise result
                logger.error(f"❌ Unexpected error on entry {entry.id}: {result!r}", exc_info=result)
                result = EntryOutcome(entry_id=entry.id, status=EntryStatus.FAILED, detail=repr(result))
            outcomes.append(result)

        report = BatchReport(outcomes=outcomes)
        counts = report.counts()
        logger.info(
            f"🎉 Batch complete: {counts['summarized']} summarized, "
            f"{counts['skipped']} skipped, {counts['failed']} failed"
        )
        return report

    async def process_entry(self, entry: Entry) -> EntryOutcome:
        reason = check_eligibility(entry, self.settings.whitelist)
        if reason:
            logger.debug(f"⏭️ Skipping entry {entry.id} ({entry.site_url}): {reason}")
            return EntryOutcome(entry_id=entry.id, status=EntryStatus.SKIPPED, stage="filter", detail=reason)

        try:
            result = await asyncio.to_thread(self.summarizer.summarize, entry)
        except SummarizeError as e:
            logger.error(f"❌ Summarization failed for entry {entry.id}, leaving it unmodified: {e}")
            return EntryOutcome(entry_id=entry.id, status=EntryStatus.FAILED, stage="summarize", detail=str(e))

        try:
            await asyncio.to_thread(self.miniflux.update_entry, entry.id, entry.content, result.summary)
        except UpdateError as e:
            logger.error(f"❌ Update failed for entry {entry.id}, summary dropped: {e}")
            return EntryOutcome(entry_id=entry.id, status=EntryStatus.FAILED, stage="update", detail=str(e))

        return EntryOutcome(entry_id=entry.id, status=EntryStatus.SUMMARIZED)

    def close(self):
        self.summarizer.close()
        self.miniflux.close()
