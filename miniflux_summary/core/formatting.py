"""
Rendering of the summary block written back into an entry.

The block is prepended to the untouched original content:

    <pre style="white-space: pre-wrap;"><code>
    {heading}
    {summary}</code></pre><hr><br />{original content}

This layout is a stable contract: the same summary and content always render to the same string.
"""

import html

DEFAULT_SUMMARY_HEADING = "💡AI Summary:"
SUMMARY_BLOCK_TEMPLATE = '<pre style="white-space: pre-wrap;"><code>\n{heading}\n{summary}</code></pre><hr><br />'


def render_summary_block(summary: str, heading: str = DEFAULT_SUMMARY_HEADING) -> str:
    return SUMMARY_BLOCK_TEMPLATE.format(
        heading=html.escape(heading, quote=False),
        summary=html.escape(summary.strip(), quote=False),
    )


def build_updated_content(original_content: str, summary: str, heading: str = DEFAULT_SUMMARY_HEADING) -> str:
    return render_summary_block(summary, heading) + (original_content or "")
