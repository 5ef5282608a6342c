"""Data models used throughout the harvesting pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


@dataclass
class HarvestResult:
    """URLs accepted by the harvester, in discovery order."""

    requested: int
    urls: List[str] = field(default_factory=list)
    cycles: int = 0
    candidates_seen: int = 0

    @property
    def shortfall(self) -> int:
        return max(self.requested - len(self.urls), 0)

    @property
    def complete(self) -> bool:
        return self.shortfall == 0


@dataclass
class ImageRecord:
    """Outcome of downloading and converting a single accepted URL."""

    index: int
    url: str
    image_path: Path
    grayscale_path: Path
    downloaded: bool = False
    converted: bool = False
    detected_format: Optional[str] = None


@dataclass
class PipelineReport:
    """Summary of a full pipeline run."""

    harvest: HarvestResult
    records: List[ImageRecord]
    total_seconds: float

    @property
    def downloaded(self) -> int:
        return sum(1 for record in self.records if record.downloaded)

    @property
    def converted(self) -> int:
        return sum(1 for record in self.records if record.converted)
