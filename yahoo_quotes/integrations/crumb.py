from __future__ import annotations

import re
from typing import Optional

CRUMB_PATTERNS = (
    re.compile(r'"crumb"\s*:\s*"([^"]+)"'),
    re.compile(r'"CrsrfToken"\s*:\s*"([^"]+)"'),
    re.compile(r"crumb=([a-zA-Z0-9_.~-]+)"),
)

_UNICODE_ESCAPE = re.compile(r"\\u([0-9a-fA-F]{4})")


def unescape_crumb(crumb: str) -> str:
    return _UNICODE_ESCAPE.sub(lambda m: chr(int(m.group(1), 16)), crumb)


def extract_crumb(html: str) -> Optional[str]:
    """Return the first crumb found in a homepage body, or None."""
    if not html:
        return None
    for pattern in CRUMB_PATTERNS:
        match = pattern.search(html)
        if match:
            return unescape_crumb(match.group(1))
    return None


def is_valid_crumb(crumb: Optional[str]) -> bool:
    return bool(crumb) and "<" not in crumb and "Unauthorized" not in crumb
