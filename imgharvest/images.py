"""Image downloading, format detection and grayscale conversion."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from filetype import guess
from PIL import Image

from .transport import Transport, TransportError

logger = logging.getLogger("imgharvest")

# Modes Pillow converts straight to "L"; anything else goes through RGB first.
_DIRECT_GRAY_MODES = {"1", "L", "RGB", "I", "I;16", "F"}


def detect_image_format(path: Path) -> Optional[str]:
    """Detect image type using filetype; returns lowercase extension."""
    try:
        kind = guess(str(path))
    except OSError as exc:
        logger.debug("Unable to sniff %s: %s", path, exc)
        return None
    if kind and kind.mime.startswith("image/"):
        ext = kind.extension.lower()
        if ext == "jpeg":
            return "jpg"
        return ext
    return None


def download_image(url: str, destination: Path, transport: Transport) -> bool:
    """Fetch ``url`` into ``destination``; True when the transfer completed."""
    try:
        transport.download_to(url, destination)
    except TransportError as exc:
        logger.warning("Failed to fetch image %s: %s", url, exc)
        return False
    except OSError as exc:
        logger.warning("Failed to write image %s: %s", destination, exc)
        return False
    logger.info("Downloaded %s -> %s", url, destination)
    return True


def convert_to_grayscale(source: Path, destination: Path) -> bool:
    """Write a single-channel luma copy of ``source`` to ``destination``.

    The output container follows the destination extension. Nothing is
    written when ``source`` cannot be decoded.
    """
    try:
        with Image.open(source) as image:
            if image.mode not in _DIRECT_GRAY_MODES:
                image = image.convert("RGB")
            gray = image.convert("L")
    except (OSError, Image.DecompressionBombError) as exc:
        logger.error("Error: unable to read %s: %s", source, exc)
        return False

    try:
        gray.save(destination)
    except (OSError, ValueError) as exc:
        logger.error("Error: unable to write %s: %s", destination, exc)
        return False
    logger.info("Saved grayscale image to %s", destination)
    return True
