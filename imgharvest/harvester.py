"""Two-phase URL harvesting against a text-generation model."""

from __future__ import annotations

import logging
import time
from typing import Callable

from .config import HarvestConfig
from .gemini import GeminiClient
from .models import HarvestResult
from .urls import filter_candidate_lines

logger = logging.getLogger("imgharvest")


def build_generation_prompt(count: int) -> str:
    """Ask the model for ``count`` public-domain image URLs."""
    return (
        f"Generate {count} public domain image URLs (either JPEG or PNG format)"
        " from trusted public domain image repositories. Exclude"
        " Wikimedia Commons and related sites. The URL must directly"
        " point to a valid image file ending with .jpg or .png, and"
        " the file size must be less than 200 KB. Provide the final"
        " image URLs in plain text."
    )


def build_extraction_prompt(generated_text: str) -> str:
    """Ask the model to reduce free-form text to one URL per line."""
    return (
        "Extract all URLs from the following contents into a plain text "
        "list. Each URL must be on a new line. These are the contents: "
        + generated_text
    )


def _budget_exhausted(result: HarvestResult, config: HarvestConfig, start: float) -> bool:
    if config.max_cycles and result.cycles >= config.max_cycles:
        return True
    if config.max_seconds is not None:
        return time.monotonic() - start >= config.max_seconds
    return False


def harvest_urls(
    client: GeminiClient,
    is_alive: Callable[[str], bool],
    count: int,
    config: HarvestConfig,
) -> HarvestResult:
    """Collect up to ``count`` reachable image URLs.

    Each cycle sends a generation prompt, then an extraction prompt over the
    generated text, filters the reply line by line and probes every candidate.
    Accepted URLs accumulate across cycles until ``count`` is reached or the
    cycle/time budget in ``config`` runs out.
    """
    result = HarvestResult(requested=max(count, 0))
    start = time.monotonic()

    while len(result.urls) < result.requested:
        if _budget_exhausted(result, config, start):
            logger.warning(
                "Stopping after %d cycle(s): found %d of %d URL(s), %d short",
                result.cycles,
                len(result.urls),
                result.requested,
                result.shortfall,
            )
            break

        result.cycles += 1
        logger.info(
            "Harvest cycle %d (%d/%d accepted)",
            result.cycles,
            len(result.urls),
            result.requested,
        )

        generated = client.generate(build_generation_prompt(result.requested))
        if not generated:
            logger.warning("Generation step returned empty text")
        extracted = client.generate(build_extraction_prompt(generated))
        if not extracted:
            logger.warning("Extraction step returned empty text")

        candidates = filter_candidate_lines(extracted, strict=config.strict_urls)
        result.candidates_seen += len(candidates)
        logger.debug("Cycle %d produced %d candidate(s)", result.cycles, len(candidates))

        for url in candidates:
            if not is_alive(url):
                continue
            result.urls.append(url)
            logger.info("Accepted %s", url)
            if len(result.urls) == result.requested:
                break

    return result
