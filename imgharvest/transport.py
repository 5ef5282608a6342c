"""Network access used by the harvester, liveness checker and downloader."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

import requests

logger = logging.getLogger("imgharvest")

DOWNLOAD_CHUNK_SIZE = 64 * 1024


class TransportError(Exception):
    """A request could not be completed at the transport layer."""


class Transport(Protocol):
    """Capabilities the pipeline needs from the network."""

    def post_json(
        self, url: str, payload: Dict[str, Any], timeout: Optional[float] = None
    ) -> str:
        ...

    def head_status(self, url: str, timeout: float) -> int:
        ...

    def download_to(self, url: str, destination: Path) -> None:
        ...


class RequestsTransport:
    """Transport backed by ``requests``; one connection per call."""

    def post_json(
        self, url: str, payload: Dict[str, Any], timeout: Optional[float] = None
    ) -> str:
        """POST ``payload`` as JSON and return the response body as text."""
        try:
            resp = requests.post(
                url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=timeout,
            )
        except requests.RequestException as exc:
            raise TransportError(str(exc)) from exc
        if not resp.ok:
            logger.debug("POST returned HTTP %s", resp.status_code)
        return resp.text

    def head_status(self, url: str, timeout: float) -> int:
        """Return the status code of a bodyless probe without following redirects.

        ``timeout`` bounds the whole exchange: a server that keeps every read
        under the socket timeout but overruns in total is treated as a failure.
        """
        start = time.monotonic()
        try:
            resp = requests.head(url, timeout=timeout, allow_redirects=False)
        except (requests.RequestException, ValueError) as exc:
            raise TransportError(str(exc)) from exc
        resp.close()
        elapsed = time.monotonic() - start
        if elapsed > timeout:
            raise TransportError(f"probe took {elapsed:.2f}s, over the {timeout}s limit")
        return resp.status_code

    def download_to(self, url: str, destination: Path) -> None:
        """Stream the body of ``url`` into ``destination``, following redirects.

        Bytes already written stay on disk if the transfer fails midway.
        """
        with open(destination, "wb") as handle:
            try:
                with requests.get(url, stream=True, allow_redirects=True) as resp:
                    for chunk in resp.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                        if chunk:
                            handle.write(chunk)
            except (requests.RequestException, ValueError) as exc:
                raise TransportError(str(exc)) from exc
