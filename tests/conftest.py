"""Shared fakes for exercising the pipeline without network access."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pytest

from imgharvest.config import HarvestConfig
from imgharvest.gemini import GeminiClient
from imgharvest.transport import TransportError


def gemini_response(text: str) -> str:
    return json.dumps(
        {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]}
    )


class FakeTransport:
    """In-memory transport with scripted replies."""

    def __init__(self) -> None:
        self.replies: List[Union[str, Exception]] = []
        self.statuses: Dict[str, Union[int, Exception]] = {}
        self.bodies: Dict[str, Union[bytes, Exception]] = {}
        self.posts: List[Dict[str, Any]] = []
        self.probes: List[str] = []
        self.probe_timeouts: List[float] = []
        self.downloads: List[str] = []

    def post_json(
        self, url: str, payload: Dict[str, Any], timeout: Optional[float] = None
    ) -> str:
        self.posts.append({"url": url, "payload": payload, "timeout": timeout})
        if not self.replies:
            return ""
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    def head_status(self, url: str, timeout: float) -> int:
        self.probes.append(url)
        self.probe_timeouts.append(timeout)
        status = self.statuses.get(url, TransportError("could not resolve host"))
        if isinstance(status, Exception):
            raise status
        return status

    def download_to(self, url: str, destination: Path) -> None:
        self.downloads.append(url)
        body = self.bodies.get(url, TransportError("connection refused"))
        with open(destination, "wb") as handle:
            if isinstance(body, Exception):
                raise body
            handle.write(body)

    def queue_text(self, text: str) -> None:
        self.replies.append(gemini_response(text))

    def queue_cycle(self, generated: str, extracted: str) -> None:
        """Script one generate/extract cycle."""
        self.queue_text(generated)
        self.queue_text(extracted)

    @property
    def network_calls(self) -> int:
        return len(self.posts) + len(self.probes) + len(self.downloads)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def client(transport: FakeTransport) -> GeminiClient:
    return GeminiClient("test-key", transport)


@pytest.fixture
def config(tmp_path: Path) -> HarvestConfig:
    return HarvestConfig(output_root=tmp_path, key_file=tmp_path / "googleai.key")


@pytest.fixture
def png_bytes() -> bytes:
    from io import BytesIO

    from PIL import Image

    buffer = BytesIO()
    Image.new("RGB", (8, 6), (255, 0, 0)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def jpeg_bytes() -> bytes:
    from io import BytesIO

    from PIL import Image

    buffer = BytesIO()
    Image.new("RGB", (8, 6), (0, 128, 255)).save(buffer, format="JPEG")
    return buffer.getvalue()
