"""
This module serves as the adapter layer for interacting with the text-generation (LLM) API.
It turns a Miniflux entry into a prompt, calls an OpenAI-compatible chat completion endpoint once, and parses the answer into a SummaryResult.
Failures are translated into the relay's SummarizeError family so the pipeline never has to know about SDK exceptions.
No retries are made here: one entry, one request.
"""

from typing import Dict, List, Optional

import httpx
from bs4 import BeautifulSoup
from openai import APIConnectionError, APIError, APIStatusError, APITimeoutError, OpenAI

from miniflux_summary.config import Settings
from miniflux_summary.core.entities import Entry, SummaryRequest, SummaryResult
from miniflux_summary.core.exceptions import (
    InvalidSummaryResponse,
    SummarizeTimeoutError,
    SummarizeUpstreamError,
)

from miniflux_summary.utils.logging_setup import get_logger
logger = get_logger(__name__, log_file="adapters.log")

TEMPERATURE = 0.2  # LOW: we want consistent, factual summaries
MAX_TOKENS = 1000

USER_PROMPT = """The following is the input content:
---
Title: {title}

{text}"""


def html_to_text(content: str) -> str:
    """Plain text of an entry body, one block per line."""
    if not content:
        return ""
    soup = BeautifulSoup(content, "html.parser")
    lines = [line.strip() for line in soup.get_text("\n").splitlines()]
    return "\n".join(line for line in lines if line)


def build_summary_request(entry: Entry, max_input_chars: int) -> SummaryRequest:
    text = html_to_text(entry.content)
    truncated = len(text) > max_input_chars
    if truncated:
        text = text[:max_input_chars]
    return SummaryRequest(entry_id=entry.id, title=entry.title.strip(), text=text, truncated=truncated)


class SummarizerClient:
    def __init__(self, settings: Settings, http_client: Optional[httpx.Client] = None):
        self.model = settings.openai_model
        self.max_input_chars = settings.max_input_chars
        self.system_prompt = settings.render_summary_prompt()
        self.client = OpenAI(
            base_url=f"{settings.openai_url}/v1",
            api_key=settings.openai_token,
            timeout=settings.http_timeout,
            max_retries=0,
            http_client=http_client,
        )

    def build_messages(self, request: SummaryRequest) -> List[Dict[str, str]]:
        return [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": USER_PROMPT.format(title=request.title, text=request.text)},
        ]

    def summarize(self, entry: Entry) -> SummaryResult:
        """
        Generate a summary for one entry.

        Raises:
            SummarizeTimeoutError: the API did not answer within the configured timeout
            SummarizeUpstreamError: non-2xx status or connection failure
            InvalidSummaryResponse: 2xx answer without usable text
        """
        request = build_summary_request(entry, self.max_input_chars)
        if request.truncated:
            logger.debug(f"✂️ Entry {entry.id} truncated to {self.max_input_chars} chars for the prompt")

        logger.debug(f"🤖 Requesting summary for entry {entry.id} with model {self.model}")
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=self.build_messages(request),
                temperature=TEMPERATURE,
                max_tokens=MAX_TOKENS,
            )
        except APITimeoutError as e:
            raise SummarizeTimeoutError(f"Summarization timed out for entry {entry.id}") from e
        except APIStatusError as e:
            raise SummarizeUpstreamError(e.status_code, e.message) from e
        except APIConnectionError as e:
            raise SummarizeUpstreamError(None, str(e)) from e
        except (APIError, ValueError) as e:
            raise InvalidSummaryResponse(f"Unreadable summarization response: {e}") from e

        return self._parse_response(entry, request, response)

    def _parse_response(self, entry: Entry, request: SummaryRequest, response) -> SummaryResult:
        choices = getattr(response, "choices", None) or []
        if not choices:
            raise InvalidSummaryResponse(f"No choices returned for entry {entry.id}")

        choice = choices[0]
        message = getattr(choice, "message", None)
        text = getattr(message, "content", None) if message is not None else None
        if not isinstance(text, str) or not text.strip():
            raise InvalidSummaryResponse(f"Empty summary returned for entry {entry.id}")

        usage = getattr(response, "usage", None)
        result = SummaryResult(
            summary=text.strip(),
            model=getattr(response, "model", None),
            finish_reason=getattr(choice, "finish_reason", None),
            prompt_tokens=getattr(usage, "prompt_tokens", None),
            completion_tokens=getattr(usage, "completion_tokens", None),
            truncated_input=request.truncated,
        )
        logger.info(f"✅ Summary generated for entry {entry.id} ({len(result.summary)} chars)")
        return result

    def close(self):
        self.client.close()
