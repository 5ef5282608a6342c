"""API key loading."""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger("imgharvest")


class CredentialError(FileNotFoundError):
    """Raised when the API key file cannot be read."""


def load_api_key(path: Path, strip: bool = False) -> str:
    """Return the first line of ``path`` without its line terminator.

    Trailing spaces and tabs are kept as written unless ``strip`` is set.
    """
    try:
        with open(path, "r", encoding="utf-8", newline="") as handle:
            line = handle.readline()
    except FileNotFoundError as exc:
        raise CredentialError(f"API key file is missing: {path}") from exc
    except OSError as exc:
        raise CredentialError(f"Unable to read API key file {path}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise CredentialError(f"API key file {path} is not valid UTF-8: {exc}") from exc

    key = line.rstrip("\r\n")
    if strip:
        key = key.strip()
    if not key:
        logger.warning("API key file %s is empty", path)
    return key
