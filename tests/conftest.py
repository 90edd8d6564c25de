"""Shared fixtures: settings, entries, signed webhook bodies and fake downstream APIs."""

from __future__ import annotations

import json
import os
import tempfile

os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="miniflux-summary-logs-"))

import httpx
import pytest

from miniflux_summary.adapters.llm import SummarizerClient
from miniflux_summary.adapters.miniflux import MinifluxAdapter
from miniflux_summary.config import Settings
from miniflux_summary.core.eligibility import SiteWhitelist
from miniflux_summary.core.entities import Entry
from miniflux_summary.core.signature import compute_signature
from miniflux_summary.core.use_cases import EntryPipeline

SECRET = "webhook-secret"
WHITELISTED_SITE = "https://example.com/"
OTHER_SITE = "https://elsewhere.org/"


def completion_body(text: str | None, model: str = "test-model") -> dict:
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "created": 1700000000,
        "model": model,
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": text},
                "finish_reason": "stop",
            }
        ],
        "usage": {"prompt_tokens": 120, "completion_tokens": 12, "total_tokens": 132},
    }


class FakeUpstream:
    """Records calls to the text-generation API and to Miniflux, answering with canned responses."""

    def __init__(self) -> None:
        self.llm_requests: list[httpx.Request] = []
        self.miniflux_requests: list[httpx.Request] = []
        self.llm_handler = lambda request: httpx.Response(200, json=completion_body("A short summary."))
        self.miniflux_handler = lambda request: httpx.Response(201, json={})

    def _llm(self, request: httpx.Request) -> httpx.Response:
        self.llm_requests.append(request)
        return self.llm_handler(request)

    def _miniflux(self, request: httpx.Request) -> httpx.Response:
        self.miniflux_requests.append(request)
        return self.miniflux_handler(request)

    def llm_client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self._llm))

    def miniflux_client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self._miniflux))

    @property
    def updates(self) -> dict[int, str]:
        """Entry id -> content of every PUT sent to Miniflux."""
        return {
            int(request.url.path.rsplit("/", 1)[-1]): json.loads(request.content)["content"]
            for request in self.miniflux_requests
            if request.method == "PUT"
        }

    @property
    def total_calls(self) -> int:
        return len(self.llm_requests) + len(self.miniflux_requests)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        miniflux_url="http://miniflux.test",
        miniflux_username="admin",
        miniflux_password="secret",
        webhook_secret=SECRET,
        openai_url="http://llm.test",
        openai_token="sk-test",
        openai_model="test-model",
        whitelist=SiteWhitelist.parse(WHITELISTED_SITE),
        http_timeout=5,
    )


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def make_pipeline(upstream: FakeUpstream):
    created: list[EntryPipeline] = []

    def _make(settings: Settings) -> EntryPipeline:
        pipeline = EntryPipeline(
            settings,
            SummarizerClient(settings, http_client=upstream.llm_client()),
            MinifluxAdapter(settings, client=upstream.miniflux_client()),
        )
        created.append(pipeline)
        return pipeline

    yield _make
    for pipeline in created:
        pipeline.close()


@pytest.fixture
def pipeline(make_pipeline, settings: Settings) -> EntryPipeline:
    return make_pipeline(settings)


@pytest.fixture
def make_entry():
    def _make(
        entry_id: int = 1,
        site_url: str | None = WHITELISTED_SITE,
        content: str = "<p>Some article text.</p>",
        title: str = "An article",
    ) -> Entry:
        data = {"id": entry_id, "title": title, "content": content, "url": f"https://example.com/{entry_id}"}
        if site_url is not None:
            data["feed"] = {"id": 7, "title": "Feed", "site_url": site_url}
        return Entry.model_validate(data)

    return _make


@pytest.fixture
def webhook_body():
    def _make(entries: list[dict], event_type: str = "new_entries", site_url: str = WHITELISTED_SITE) -> bytes:
        payload = {
            "event_type": event_type,
            "feed": {"id": 7, "title": "Feed", "site_url": site_url, "feed_url": f"{site_url}feed.xml"},
            "entries": entries,
        }
        return json.dumps(payload).encode("utf-8")

    return _make


@pytest.fixture
def sign():
    def _sign(body: bytes, secret: str = SECRET) -> str:
        return compute_signature(secret, body)

    return _sign


@pytest.fixture
def completion():
    return completion_body
