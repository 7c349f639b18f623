"""Citation extractor.

Pulls URL-shaped substrings out of an answer in appearance order. URLs are
never fetched or validated; hostname parsing happens only at aggregation time,
where malformed entries are skipped.
"""

from __future__ import annotations

import re
from urllib.parse import urlparse

from app.analysis.types import Citation

# Scheme up to the next whitespace
_URL_PATTERN = re.compile(r"(https?://[^\s]+)", re.IGNORECASE)


def extract_citations(text: str) -> list[Citation]:
    """Extract every URL in the text with a 1-based position and a placeholder title."""
    return [
        Citation(url=url, position=index, title=f"Citation {index}")
        for index, url in enumerate(_URL_PATTERN.findall(text), start=1)
    ]


def extract_hostname(url: str) -> str | None:
    """Hostname of *url* with a leading ``www.`` stripped, or None if it cannot be parsed."""
    if not isinstance(url, str) or not url:
        return None
    try:
        hostname = urlparse(url).hostname
    except ValueError:
        return None
    if not hostname:
        return None
    if hostname.startswith("www."):
        hostname = hostname[4:]
    return hostname or None
