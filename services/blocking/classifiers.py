"""
Resource classification for blocking task analysis.

Handles classification of:
- Target requests (ad-related XHR calls)
- Tag library scripts, which are never reported as blockers
- Display forms of attributed script URLs
"""

from typing import Optional, Union
from urllib.parse import ParseResult, urlparse

from .constants import (
    GOOGLE_ADS_HOST_RE,
    GPT_IMPL_PATH_RE,
    GPT_TAG_HOSTS,
    GPT_TAG_PATHS,
    TARGET_RESOURCE_TYPE,
)
from .models import NetworkRecord


def to_url(url: Union[str, ParseResult]) -> ParseResult:
    """
    Parse the given url, unless it is already parsed.

    Never raises: malformed input parses to an empty URL that matches
    nothing.
    """
    if isinstance(url, ParseResult):
        return url
    try:
        return urlparse(url or "")
    except (TypeError, ValueError):
        return urlparse("")


def _hostname(url: ParseResult) -> str:
    try:
        return url.hostname or ""
    except ValueError:
        return ""


def is_google_ads(url: Union[str, ParseResult]) -> bool:
    """Check if the url is from a Google ads host."""
    return bool(GOOGLE_ADS_HOST_RE.search(_hostname(to_url(url))))


def is_gpt_tag(url: Union[str, ParseResult]) -> bool:
    """Check if the url is loading gpt.js."""
    parsed = to_url(url)
    return _hostname(parsed) in GPT_TAG_HOSTS and parsed.path in GPT_TAG_PATHS


def is_gpt_impl_tag(url: Union[str, ParseResult]) -> bool:
    """Check if the url is the pubads implementation script."""
    parsed = to_url(url)
    return is_google_ads(parsed) and bool(GPT_IMPL_PATH_RE.match(parsed.path))


def is_gpt(url: Union[str, ParseResult]) -> bool:
    """
    Check if the url is loading gpt.js or pubads_impl_*.js.

    Work done by the tag library itself is what the analysis measures
    against, so it is never reported as blocking.
    """
    parsed = to_url(url)
    return is_gpt_tag(parsed) or is_gpt_impl_tag(parsed)


def is_target_request(record: NetworkRecord) -> bool:
    """Ad-related XHR requests are the ones whose blocking is measured."""
    return record.resource_type == TARGET_RESOURCE_TYPE and is_google_ads(record.url)


def get_display_url(url: Optional[str]) -> Optional[str]:
    """
    Shorten a script URL to host + path, dropping scheme and query string.

    Returns None for empty input.
    """
    if not url:
        return None
    parsed = to_url(url)
    if not parsed.netloc:
        return parsed.path or url
    return f"{parsed.netloc}{parsed.path}"


def get_script_host(url: Optional[str]) -> str:
    """Host used to group blocking time by party. Accepts full or display URLs."""
    if not url:
        return ""
    parsed = to_url(url)
    if parsed.netloc:
        return _hostname(parsed) or parsed.netloc
    # Display URLs have no scheme, so the host is the first path segment.
    return url.split("/", 1)[0]
