"""Locator classification and the slugs used to build document ids."""
import re
from urllib.parse import urlparse

from ..exceptions import InvalidInput
from ..models.document import DocumentKind

YOUTUBE_URL = re.compile(
    r"^(?:https?://)?(?:www\.|m\.)?(?:youtube\.com/watch\?v=|youtu\.be/)([A-Za-z0-9_-]{11})"
)
NON_ALNUM = re.compile(r"[^A-Za-z0-9]")
MAX_SLUG_LENGTH = 30


def validate_locator(locator: str | None) -> str:
    """
    Raises:
        InvalidInput: Missing locator, non-http(s) scheme or no host
    """
    if not locator or not locator.strip():
        raise InvalidInput("URL is required")
    locator = locator.strip()

    parsed = urlparse(locator)
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise InvalidInput(f"Not a valid http(s) URL: {locator}")
    return locator


def classify(locator: str) -> DocumentKind:
    return DocumentKind.TRANSCRIPT if YOUTUBE_URL.match(locator) else DocumentKind.WEBPAGE


def video_id(locator: str) -> str:
    match = YOUTUBE_URL.match(locator)
    if not match:
        raise InvalidInput(f"Not a valid YouTube URL: {locator}")
    return match.group(1)


def domain_of(locator: str) -> str:
    return urlparse(locator).hostname or ""


def path_slug(locator: str) -> str:
    """Last path segment reduced to ASCII alphanumerics, at most 30 chars, 'index' if nothing is left."""
    segments = [s for s in urlparse(locator).path.split("/") if s]
    slug = NON_ALNUM.sub("", segments[-1])[:MAX_SLUG_LENGTH] if segments else ""
    return slug or "index"


def webpage_ref(locator: str) -> str:
    """'{domain alphanumerics}_{slug}', the id suffix of archived webpages."""
    return f"{NON_ALNUM.sub('', domain_of(locator).lower())}_{path_slug(locator)}"
