"""Configuration objects and constants for the image harvester."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models"
DEFAULT_MODEL_ID = "gemini-2.5-flash-lite"
DEFAULT_KEY_FILE = "googleai.key"
DEFAULT_IMAGES_DIR = "images"
DEFAULT_GRAYSCALE_DIR = "gs-images"
DEFAULT_IMAGE_EXTENSION = ".jpg"
DEFAULT_PROBE_TIMEOUT = 5.0
DEFAULT_MAX_CYCLES = 10


@dataclass
class HarvestConfig:
    """Top-level settings that control harvesting, downloading and conversion."""

    output_root: Path = Path(".")
    key_file: Path = Path(DEFAULT_KEY_FILE)
    endpoint: str = DEFAULT_ENDPOINT
    model_id: str = DEFAULT_MODEL_ID
    images_dir_name: str = DEFAULT_IMAGES_DIR
    grayscale_dir_name: str = DEFAULT_GRAYSCALE_DIR
    image_extension: str = DEFAULT_IMAGE_EXTENSION
    probe_timeout: float = DEFAULT_PROBE_TIMEOUT
    generation_timeout: Optional[float] = None
    max_cycles: int = DEFAULT_MAX_CYCLES
    max_seconds: Optional[float] = None
    strict_urls: bool = False
    strip_api_key: bool = False
    convert_failed_downloads: bool = False

    @property
    def images_dir(self) -> Path:
        return self.output_root / self.images_dir_name

    @property
    def grayscale_dir(self) -> Path:
        return self.output_root / self.grayscale_dir_name

    def image_path(self, index: int) -> Path:
        """Path of the downloaded image for a 1-based ordinal."""
        return self.images_dir / f"{index}{self.image_extension}"

    def grayscale_path(self, index: int) -> Path:
        """Path of the grayscale copy for a 1-based ordinal."""
        return self.grayscale_dir / f"{index}{self.image_extension}"
