"""Command-line entry point for the image harvester."""

from __future__ import annotations

import argparse
import logging
import re
import sys
from pathlib import Path
from typing import Optional, Sequence

from .config import (
    DEFAULT_ENDPOINT,
    DEFAULT_GRAYSCALE_DIR,
    DEFAULT_IMAGES_DIR,
    DEFAULT_KEY_FILE,
    DEFAULT_MAX_CYCLES,
    DEFAULT_MODEL_ID,
    DEFAULT_PROBE_TIMEOUT,
    HarvestConfig,
)
from .credentials import CredentialError
from .pipeline import run_pipeline

logger = logging.getLogger("imgharvest.cli")

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_count(value: str) -> int:
    """Read a leading integer like C ``atoi``; anything else counts as zero."""
    match = _LEADING_INT.match(value)
    if not match:
        return 0
    return int(match.group(1))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="imgharvest",
        description=(
            "Ask a Gemini model for public-domain image URLs, download them and "
            "write grayscale copies."
        ),
    )
    parser.add_argument(
        "count",
        nargs="?",
        help="Number of images to acquire",
    )
    parser.add_argument(
        "--key-file",
        default=DEFAULT_KEY_FILE,
        type=Path,
        help="File whose first line holds the Gemini API key",
    )
    parser.add_argument(
        "--output",
        default=".",
        type=Path,
        help="Directory under which the image folders are created",
    )
    parser.add_argument(
        "--images-dir",
        default=DEFAULT_IMAGES_DIR,
        help="Folder name for downloaded images",
    )
    parser.add_argument(
        "--grayscale-dir",
        default=DEFAULT_GRAYSCALE_DIR,
        help="Folder name for grayscale copies",
    )
    parser.add_argument(
        "--model",
        default=DEFAULT_MODEL_ID,
        help="Gemini model identifier to use",
    )
    parser.add_argument(
        "--endpoint",
        default=DEFAULT_ENDPOINT,
        help="Base URL of the generateContent models endpoint",
    )
    parser.add_argument(
        "--max-cycles",
        type=int,
        default=DEFAULT_MAX_CYCLES,
        help="Maximum generate/extract cycles before giving up (0 = no limit)",
    )
    parser.add_argument(
        "--max-seconds",
        type=float,
        default=None,
        help="Stop starting new cycles after this many seconds",
    )
    parser.add_argument(
        "--probe-timeout",
        type=float,
        default=DEFAULT_PROBE_TIMEOUT,
        help="Timeout in seconds for each URL liveness probe",
    )
    parser.add_argument(
        "--strict-urls",
        action="store_true",
        help="Only accept well-formed http(s) URLs ending in .jpg, .jpeg or .png",
    )
    parser.add_argument(
        "--strip-key",
        action="store_true",
        help="Strip surrounding whitespace from the API key",
    )
    parser.add_argument(
        "--convert-failed-downloads",
        action="store_true",
        help="Attempt grayscale conversion even when the download failed",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )

    if args.count is None:
        parser.print_usage(sys.stderr)
        logger.error("Error: the number of images to process is missing.")
        return 1

    config = HarvestConfig(
        output_root=args.output,
        key_file=args.key_file,
        endpoint=args.endpoint,
        model_id=args.model,
        images_dir_name=args.images_dir,
        grayscale_dir_name=args.grayscale_dir,
        probe_timeout=args.probe_timeout,
        max_cycles=args.max_cycles,
        max_seconds=args.max_seconds,
        strict_urls=args.strict_urls,
        strip_api_key=args.strip_key,
        convert_failed_downloads=args.convert_failed_downloads,
    )

    try:
        report = run_pipeline(config, parse_count(args.count))
    except CredentialError as exc:
        logger.error("%s", exc)
        return 1

    if not report.harvest.complete:
        logger.warning(
            "Harvest fell %d URL(s) short of the %d requested",
            report.harvest.shortfall,
            report.harvest.requested,
        )
    if args.verbose:
        for record in report.records:
            logger.debug(
                "#%d %s -> downloaded: %s | converted: %s | format: %s",
                record.index,
                record.url,
                record.downloaded,
                record.converted,
                record.detected_format or "unknown",
            )
    return 0


if __name__ == "__main__":
    sys.exit(main())
