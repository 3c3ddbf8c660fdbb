from typing import Iterable, Optional
from urllib.parse import urlparse


def is_allowed_image_url(url: Optional[str], patterns: Iterable[str]) -> bool:
    """
    Check whether a remote image may be rendered.

    Only https URLs are accepted. A pattern is either an exact host
    ("i.scdn.co") or a wildcard suffix ("*.scdn.co") matching any subdomain.
    """
    if not url:
        return False

    parsed = urlparse(url)
    if parsed.scheme != "https" or not parsed.hostname:
        return False

    host = parsed.hostname.lower()
    for pattern in patterns:
        pattern = pattern.lower()
        if pattern.startswith("*."):
            if host.endswith(pattern[1:]):
                return True
        elif host == pattern:
            return True

    return False
