"""
Eligibility rules applied before spending a summarization call on an entry.

An entry qualifies when:
1. the host of its feed's site URL is in the configured whitelist (exact, case-insensitive host match), and
2. its content carries no code block marker.

An empty whitelist fails closed; "*" is the explicit allow-all value.
Everything here is pure: no network, no logging, no mutation.
"""

from typing import FrozenSet, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict

from miniflux_summary.core.entities import Entry

ALLOW_ALL = "*"
# The injected summary block is itself a <pre><code> block, so summarized entries never qualify again.
CODE_BLOCK_MARKERS = ("<pre", "<code", "```")

REASON_NO_SITE = "entry has no site URL"
REASON_NOT_WHITELISTED = "site not in whitelist"
REASON_CODE_BLOCK = "content contains a code block"


def normalize_host(value: Optional[str]) -> Optional[str]:
    """Reduce a URL or bare host ("Example.com/", "https://example.com/feed") to a lowercase host."""
    if not value:
        return None
    value = value.strip()
    if not value:
        return None
    if "://" not in value:
        value = f"//{value}"
    try:
        host = urlparse(value).hostname
    except ValueError:
        return None
    return host.lower() if host else None


class SiteWhitelist(BaseModel):
    model_config = ConfigDict(frozen=True)

    hosts: FrozenSet[str] = frozenset()
    allow_all: bool = False

    @classmethod
    def parse(cls, raw: Optional[str]) -> "SiteWhitelist":
        items = [item.strip() for item in (raw or "").split(",") if item.strip()]
        if ALLOW_ALL in items:
            return cls(allow_all=True)
        hosts = set()
        for item in items:
            host = normalize_host(item)
            if host is None:
                raise ValueError(f"Invalid whitelist entry: {item!r}")
            hosts.add(host)
        return cls(hosts=frozenset(hosts))

    def allows(self, site_url: Optional[str]) -> bool:
        if self.allow_all:
            return True
        host = normalize_host(site_url)
        return host is not None and host in self.hosts


def has_code_block(content: str) -> bool:
    lowered = (content or "").lower()
    return any(marker in lowered for marker in CODE_BLOCK_MARKERS)


def check_eligibility(entry: Entry, whitelist: SiteWhitelist) -> Optional[str]:
    """Returns the reason the entry is skipped, or None when it is eligible."""
    if not whitelist.allow_all and not entry.site_url:
        return REASON_NO_SITE
    if not whitelist.allows(entry.site_url):
        return REASON_NOT_WHITELISTED
    if has_code_block(entry.content):
        return REASON_CODE_BLOCK
    return None


def is_eligible(entry: Entry, whitelist: SiteWhitelist) -> bool:
    return check_eligibility(entry, whitelist) is None
