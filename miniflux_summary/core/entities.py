"""
This file defines the core entities of the summary relay.

- Feed and Entry mirror the Miniflux objects delivered by webhooks and by the entries API. Unknown fields are kept as-is.
- WebhookEvent is one decoded webhook call; it only lives for the duration of the request.
- SummaryRequest / SummaryResult are the ephemeral input and output of the text-generation call.
- UpdatePayload is the body written back to Miniflux for one entry.
- EntryOutcome / BatchReport collect what happened to each entry of a batch.
"""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

NEW_ENTRIES_EVENT = "new_entries"


class Feed(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[int] = None
    title: Optional[str] = None
    site_url: Optional[str] = None
    feed_url: Optional[str] = None


class Entry(BaseModel):
    """A single Miniflux entry. Miniflux remains the system of record."""
    model_config = ConfigDict(extra="allow")

    id: int = Field(..., gt=0)
    title: str = ""
    url: Optional[str] = None
    content: str = ""
    feed: Optional[Feed] = None

    @property
    def site_url(self) -> Optional[str]:
        return self.feed.site_url if self.feed else None


class WebhookEvent(BaseModel):
    model_config = ConfigDict(extra="allow")

    event_type: str
    feed: Optional[Feed] = None
    entries: List[Entry] = Field(default_factory=list)

    @property
    def is_new_entries(self) -> bool:
        return self.event_type == NEW_ENTRIES_EVENT

    def resolved_entries(self) -> List[Entry]:
        """
        Miniflux sends the feed once at the top of a new_entries event, not on each entry.
        Attach it to every entry that has no feed of its own.
        """
        if self.feed is None:
            return list(self.entries)
        return [
            entry if entry.feed is not None else entry.model_copy(update={"feed": self.feed})
            for entry in self.entries
        ]


class SummaryRequest(BaseModel):
    entry_id: int
    title: str
    text: str
    truncated: bool = False


class SummaryResult(BaseModel):
    summary: str = Field(..., min_length=1)
    model: Optional[str] = None
    finish_reason: Optional[str] = None
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    truncated_input: bool = False


class UpdatePayload(BaseModel):
    entry_id: int
    content: str

    def to_request_body(self) -> Dict[str, str]:
        return {"content": self.content}


class EntryStatus(str, Enum):
    SUMMARIZED = "summarized"
    SKIPPED = "skipped"
    FAILED = "failed"


class EntryOutcome(BaseModel):
    entry_id: int
    status: EntryStatus
    stage: Optional[str] = Field(None, description="'filter', 'summarize' or 'update'")
    detail: Optional[str] = None


class BatchReport(BaseModel):
    outcomes: List[EntryOutcome] = Field(default_factory=list)

    def counts(self) -> Dict[str, int]:
        counts = {status.value: 0 for status in EntryStatus}
        for outcome in self.outcomes:
            counts[outcome.status.value] += 1
        return counts
