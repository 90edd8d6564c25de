"""
Adapter for the Miniflux REST API.

- update_entry writes the summarized content back to an entry (PUT /v1/entries/{id}).
- fetch_unread_entries lists unread entries for the periodic sweep (GET /v1/entries?status=unread).

Authentication uses the X-Auth-Token header when an API token is configured, HTTP basic auth otherwise.
"""

from typing import List, Optional

import httpx

from miniflux_summary.config import Settings
from miniflux_summary.core.entities import Entry, UpdatePayload
from miniflux_summary.core.exceptions import FetchEntriesError, UpdateTimeoutError, UpdateUpstreamError
from miniflux_summary.core.formatting import build_updated_content

from miniflux_summary.utils.logging_setup import get_logger
logger = get_logger(__name__, log_file="adapters.log")


class MinifluxAdapter:
    def __init__(self, settings: Settings, client: Optional[httpx.Client] = None):
        self.base_url = settings.miniflux_url
        self.summary_heading = settings.summary_heading
        headers = {"Content-Type": "application/json"}
        auth = None
        if settings.uses_api_token:
            headers["X-Auth-Token"] = settings.miniflux_api_token
        else:
            auth = httpx.BasicAuth(settings.miniflux_username, settings.miniflux_password)

        if client is None:
            client = httpx.Client(timeout=settings.http_timeout)
        client.headers.update(headers)
        if auth is not None:
            client.auth = auth
        self.client = client

    def build_update(self, entry_id: int, original_content: str, summary: str) -> UpdatePayload:
        return UpdatePayload(
            entry_id=entry_id,
            content=build_updated_content(original_content, summary, self.summary_heading),
        )

    def update_entry(self, entry_id: int, original_content: str, summary: str) -> UpdatePayload:
        """
        Prepend the summary block to the original content and save it on the entry.
        Returns the payload that was sent.

        Raises:
            UpdateTimeoutError: Miniflux did not answer in time
            UpdateUpstreamError: non-2xx status or transport failure
        """
        payload = self.build_update(entry_id, original_content, summary)
        url = f"{self.base_url}/v1/entries/{entry_id}"
        logger.debug(f"Making PUT request to {url}")
        try:
            response = self.client.put(url, json=payload.to_request_body())
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise UpdateTimeoutError(f"Miniflux update timed out for entry {entry_id}") from e
        except httpx.HTTPStatusError as e:
            raise UpdateUpstreamError(e.response.status_code, e.response.text) from e
        except httpx.HTTPError as e:
            raise UpdateUpstreamError(None, str(e)) from e

        logger.info(f"📝 Updated entry {entry_id} with summary")
        return payload

    def fetch_unread_entries(self, limit: int = 100) -> List[Entry]:
        url = f"{self.base_url}/v1/entries"
        params = {"status": "unread", "limit": limit}
        logger.debug(f"Making GET request to {url} with params {params}")
        try:
            response = self.client.get(url, params=params)
            response.raise_for_status()
            data = response.json()
            entries = [Entry.model_validate(item) for item in data.get("entries") or []]
        except httpx.HTTPStatusError as e:
            raise FetchEntriesError(e.response.status_code, e.response.text) from e
        except httpx.HTTPError as e:
            raise FetchEntriesError(None, str(e)) from e
        except ValueError as e:
            raise FetchEntriesError(None, f"Invalid entries payload from Miniflux: {e}") from e

        logger.info(f"🔎 Fetched {len(entries)} unread entries from Miniflux (total: {data.get('total', len(entries))})")
        return entries

    def close(self):
        self.client.close()
