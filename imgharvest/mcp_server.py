"""MCP server exposing the image harvesting pipeline."""

from __future__ import annotations

import logging
from functools import partial
from pathlib import Path

import anyio.to_thread
from mcp.server.fastmcp import FastMCP

from .config import DEFAULT_KEY_FILE, HarvestConfig
from .credentials import CredentialError
from .models import PipelineReport
from .pipeline import run_pipeline

logger = logging.getLogger("imgharvest.mcp")
logger.setLevel(logging.ERROR)

mcp = FastMCP(name="imgharvest")


def format_report(report: PipelineReport) -> str:
    """Render a pipeline report as plain text, one line per image."""
    harvest = report.harvest
    lines = [
        f"Harvested {len(harvest.urls)} of {harvest.requested} URL(s) "
        f"in {harvest.cycles} cycle(s)"
    ]
    for record in report.records:
        status = "converted" if record.converted else (
            "downloaded" if record.downloaded else "failed"
        )
        lines.append(f"{record.index}. {status} {record.url} -> {record.grayscale_path}")
    return "\n".join(lines)


@mcp.tool()
async def acquire_images(
    count: int,
    output: str = ".",
    key_file: str = DEFAULT_KEY_FILE,
) -> str:
    """Find, download and grayscale-convert public-domain images."""

    config = HarvestConfig(
        output_root=Path(output).expanduser(),
        key_file=Path(key_file).expanduser(),
    )
    try:
        report = await anyio.to_thread.run_sync(partial(run_pipeline, config, count))
    except CredentialError as exc:
        raise RuntimeError(str(exc)) from exc
    return format_report(report)


def main() -> None:
    """Entry point for running the MCP server."""
    logging.basicConfig(level=logging.ERROR)
    mcp.run()


if __name__ == "__main__":
    main()
