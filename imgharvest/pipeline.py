"""High-level orchestration: harvest URLs, download them, convert to grayscale."""

from __future__ import annotations

import logging
import time
from typing import List, Optional

from .config import HarvestConfig
from .credentials import load_api_key
from .gemini import GeminiClient
from .harvester import harvest_urls
from .images import convert_to_grayscale, detect_image_format, download_image
from .models import ImageRecord, PipelineReport
from .transport import RequestsTransport, Transport
from .urls import LivenessChecker

logger = logging.getLogger("imgharvest")


def ensure_output_dirs(config: HarvestConfig) -> None:
    """Create the image and grayscale directories if they are missing."""
    for directory in (config.images_dir, config.grayscale_dir):
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.warning("Unable to create %s: %s", directory, exc)


def process_url(
    index: int,
    url: str,
    config: HarvestConfig,
    transport: Transport,
) -> ImageRecord:
    """Download one accepted URL and write its grayscale copy."""
    record = ImageRecord(
        index=index,
        url=url,
        image_path=config.image_path(index),
        grayscale_path=config.grayscale_path(index),
    )
    record.downloaded = download_image(url, record.image_path, transport)
    if not record.downloaded:
        logger.error("Failed to download: %s", url)
        if not config.convert_failed_downloads:
            return record
        if not record.image_path.exists():
            return record

    record.detected_format = detect_image_format(record.image_path)
    if record.detected_format is None:
        logger.warning("%s does not look like an image file", record.image_path)

    record.converted = convert_to_grayscale(record.image_path, record.grayscale_path)
    return record


def run_pipeline(
    config: HarvestConfig,
    count: int,
    client: Optional[GeminiClient] = None,
    transport: Optional[Transport] = None,
) -> PipelineReport:
    """Run the full acquisition pipeline for ``count`` images.

    Raises ``CredentialError`` before any network access when no client is
    supplied and the key file cannot be read.
    """
    overall_start = time.perf_counter()
    transport = transport or RequestsTransport()
    if client is None:
        api_key = load_api_key(config.key_file, strip=config.strip_api_key)
        client = GeminiClient(
            api_key,
            transport,
            model_id=config.model_id,
            endpoint=config.endpoint,
            timeout=config.generation_timeout,
        )

    ensure_output_dirs(config)

    checker = LivenessChecker(transport, config.probe_timeout)
    harvest = harvest_urls(client, checker, count, config)

    records: List[ImageRecord] = []
    for index, url in enumerate(harvest.urls, start=1):
        records.append(process_url(index, url, config, transport))

    report = PipelineReport(
        harvest=harvest,
        records=records,
        total_seconds=time.perf_counter() - overall_start,
    )
    logger.info(
        "Finished in %.2fs (%d/%d URL(s) harvested, %d downloaded, %d converted)",
        report.total_seconds,
        len(harvest.urls),
        harvest.requested,
        report.downloaded,
        report.converted,
    )
    return report
