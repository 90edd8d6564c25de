"""
Error taxonomy for the summary relay.

Request-level errors (AuthError, DecodeError) reject a whole webhook call.
Entry-level errors (SummarizeError, UpdateError) are caught per entry by the pipeline and reported, never re-raised.
"""

from typing import Optional


class RelayError(Exception):
    """Base error for the relay."""
    pass


class ConfigurationError(RelayError):
    """Required settings are missing or invalid."""
    pass


class AuthError(RelayError):
    """Webhook signature missing or invalid."""
    pass


class DecodeError(RelayError):
    """Webhook body could not be decoded into an event."""
    pass


class SummarizeError(RelayError):
    """Summary generation failed for one entry."""
    pass


class SummarizeUpstreamError(SummarizeError):
    """The text-generation API answered with an error or could not be reached."""

    def __init__(self, status_code: Optional[int], message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"Summarization API error {status_code}: {message}")


class SummarizeTimeoutError(SummarizeError):
    pass


class InvalidSummaryResponse(SummarizeError):
    """The text-generation API answered 2xx but without a usable summary."""
    pass


class MinifluxError(RelayError):
    """Base error for calls to the Miniflux API."""
    pass


class UpdateError(MinifluxError):
    """Writing the summarized content back to Miniflux failed."""
    pass


class UpdateUpstreamError(UpdateError):
    def __init__(self, status_code: Optional[int], message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"Miniflux update error {status_code}: {message}")


class UpdateTimeoutError(UpdateError):
    pass


class FetchEntriesError(MinifluxError):
    def __init__(self, status_code: Optional[int], message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"Miniflux fetch error {status_code}: {message}")
