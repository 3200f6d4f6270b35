"""Recover storage keys from file URLs.

Category videos are stored as a bare URL, so the storage key has to be read
back out of it before the file can be deleted. Rules are tried in order and
the first match wins; when nothing matches the caller gets ``None`` and is
expected to skip cleanup.
"""
import logging
import re
from typing import Callable, Optional
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)

KeyRule = tuple[str, Callable[[str], Optional[str]]]


def _regex_rule(pattern: str) -> Callable[[str], Optional[str]]:
    compiled = re.compile(pattern)

    def _match(path: str) -> Optional[str]:
        m = compiled.search(path)
        return m.group(1) if m else None

    return _match


def _last_segment(path: str) -> Optional[str]:
    segments = [s for s in path.split("/") if s]
    return segments[-1] if segments else None


# Applied to the URL path only; query string and fragment are already stripped.
KEY_RULES: list[KeyRule] = [
    ("file-path", _regex_rule(r"/f/([^/]+)")),          # https://utfs.io/f/KEY
    ("app-scoped", _regex_rule(r"/a/[^/]+/([^/]+)")),   # https://APP.ufs.sh/a/APP_ID/KEY
    ("bare-suffix", _last_segment),                     # https://host/any/path/KEY
]


def extract_file_key(url: Optional[str]) -> Optional[str]:
    """Return the storage key embedded in ``url``, or ``None`` if no rule matches."""
    if not url or not url.strip():
        return None
    try:
        parts = urlsplit(url.strip())
    except ValueError:
        logger.warning("Could not parse file URL: %s", url)
        return None
    # Absolute URLs, or site-relative paths such as /static/uploads/KEY from local storage
    if not parts.netloc and not parts.path.startswith("/"):
        logger.warning("Could not extract file key from URL: %s", url)
        return None

    for name, rule in KEY_RULES:
        key = rule(parts.path)
        if key:
            logger.debug("Extracted file key %s from %s using %s rule", key, url, name)
            return key

    logger.warning("Could not extract file key from URL: %s", url)
    return None
