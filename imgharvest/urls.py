"""Candidate URL parsing and liveness checks."""

from __future__ import annotations

import logging
from typing import Iterable, List
from urllib.parse import urlparse

from .transport import Transport, TransportError

logger = logging.getLogger("imgharvest")

URL_MARKER = "http"
ALLOWED_IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png")


def is_image_url(value: str, extensions: Iterable[str] = ALLOWED_IMAGE_EXTENSIONS) -> bool:
    """Check scheme, host and image extension of a parsed URL."""
    try:
        parsed = urlparse(value.strip())
    except ValueError:
        return False
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return False
    return parsed.path.lower().endswith(tuple(extensions))


def filter_candidate_lines(text: str, strict: bool = False) -> List[str]:
    """Split model output into lines and keep the ones that look like URLs.

    By default a line is kept verbatim when it contains ``"http"`` anywhere.
    ``strict`` additionally requires a well-formed http(s) image URL and
    returns it trimmed.
    """
    candidates: List[str] = []
    for line in text.split("\n"):
        if URL_MARKER not in line:
            continue
        if strict:
            if not is_image_url(line):
                logger.debug("Rejecting malformed candidate %r", line)
                continue
            line = line.strip()
        candidates.append(line)
    return candidates


def is_accessible(url: str, transport: Transport, timeout: float) -> bool:
    """Return True only when a bodyless probe answers exactly HTTP 200."""
    try:
        status = transport.head_status(url, timeout)
    except TransportError as exc:
        logger.debug("Probe failed for %s: %s", url, exc)
        return False
    if status != 200:
        logger.debug("Probe for %s returned HTTP %s", url, status)
        return False
    return True


class LivenessChecker:
    """Callable wrapper binding a transport and timeout to ``is_accessible``."""

    def __init__(self, transport: Transport, timeout: float) -> None:
        self.transport = transport
        self.timeout = timeout

    def __call__(self, url: str) -> bool:
        return is_accessible(url, self.transport, self.timeout)
