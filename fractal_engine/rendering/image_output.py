"""
Image export for rendered fractal grids.

This module writes colorized grids to PNG, TIFF or JPEG through Pillow and
embeds the viewport that produced them so a render can be reproduced.
"""

import numpy as np
from typing import Any, Dict, Optional
from pathlib import Path
from dataclasses import dataclass, asdict, field
import json
import logging
from datetime import datetime

from PIL import Image, PngImagePlugin

from ..core.viewport import ViewportConfig

logger = logging.getLogger(__name__)

METADATA_KEY = "FractalMetadata"


@dataclass
class RenderMetadata:
    """Metadata for fractal renders."""

    viewport: Dict[str, Any]
    palette: str
    backend: str

    render_time_seconds: float = 0.0
    timestamp: str = ""
    software_version: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Set default timestamp and version if not provided."""
        if not self.timestamp:
            self.timestamp = datetime.now().isoformat()
        if not self.software_version:
            from .. import __version__
            self.software_version = __version__

    @classmethod
    def for_viewport(cls, config: ViewportConfig, palette: str, backend: str,
                     render_time_seconds: float = 0.0) -> 'RenderMetadata':
        return cls(viewport=config.to_dict(), palette=palette, backend=backend,
                   render_time_seconds=render_time_seconds)

    def to_viewport(self) -> ViewportConfig:
        """Rebuild the viewport configuration this render was made from."""
        return ViewportConfig.from_dict(self.viewport)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RenderMetadata':
        return cls(**data)

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, json_str: str) -> 'RenderMetadata':
        return cls.from_dict(json.loads(json_str))


class ImageExporter:
    """Image export with metadata support."""

    def __init__(self):
        self.supported_formats = {
            '.png': self._save_png,
            '.tiff': self._save_tiff,
            '.tif': self._save_tiff,
            '.jpg': self._save_jpeg,
            '.jpeg': self._save_jpeg,
        }

    def save_image(self, image_array: np.ndarray, filepath: Path,
                   metadata: Optional[RenderMetadata] = None, quality: int = 95) -> Path:
        """
        Save RGB image array to file with metadata.

        Args:
            image_array: RGB image array (height, width, 3), uint8 or floats in 0-1
            filepath: Output file path; the suffix selects the format
            metadata: Render metadata to embed
            quality: JPEG quality (1-100)

        Returns:
            The path written
        """
        filepath = Path(filepath)
        suffix = filepath.suffix.lower()

        if suffix not in self.supported_formats:
            supported = ', '.join(self.supported_formats.keys())
            raise ValueError(f"Unsupported format '{suffix}'. Supported: {supported}")

        image_array = self._prepare_image_array(image_array)
        pil_image = Image.fromarray(image_array)

        save_method = self.supported_formats[suffix]
        save_method(pil_image, filepath, metadata, quality)

        logger.info(f"Saved image: {filepath} ({pil_image.size[0]}x{pil_image.size[1]})")
        return filepath

    def _prepare_image_array(self, image_array: np.ndarray) -> np.ndarray:
        """Prepare and validate image array for export."""
        if len(image_array.shape) != 3 or image_array.shape[2] != 3:
            raise ValueError(f"Expected RGB image array (H, W, 3), got {image_array.shape}")

        if image_array.dtype != np.uint8:
            if np.issubdtype(image_array.dtype, np.floating):
                image_array = np.clip(image_array, 0.0, 1.0)
                image_array = (image_array * 255).astype(np.uint8)
            else:
                image_array = np.clip(image_array, 0, 255).astype(np.uint8)

        return image_array

    def _save_png(self, pil_image: Image.Image, filepath: Path,
                  metadata: Optional[RenderMetadata], quality: int) -> None:
        pnginfo = PngImagePlugin.PngInfo()

        if metadata:
            pnginfo.add_text("Software", f"fractal-engine v{metadata.software_version}")
            pnginfo.add_text("Creation Time", metadata.timestamp)
            pnginfo.add_text(METADATA_KEY, metadata.to_json())

        pil_image.save(filepath, "PNG", pnginfo=pnginfo)

    def _save_tiff(self, pil_image: Image.Image, filepath: Path,
                   metadata: Optional[RenderMetadata], quality: int) -> None:
        save_kwargs = {'format': 'TIFF', 'compression': 'tiff_lzw'}
        if metadata:
            # ImageDescription tag
            save_kwargs['description'] = metadata.to_json()
        pil_image.save(filepath, **save_kwargs)

    def _save_jpeg(self, pil_image: Image.Image, filepath: Path,
                   metadata: Optional[RenderMetadata], quality: int) -> None:
        pil_image.save(filepath, "JPEG", quality=quality, optimize=True)

        if metadata:
            # JPEG has no convenient text chunk; write a companion JSON file
            json_path = filepath.with_suffix('.json')
            json_path.write_text(metadata.to_json())
            logger.info(f"Saved metadata: {json_path}")

    def extract_metadata_from_image(self, filepath: Path) -> Optional[RenderMetadata]:
        """
        Extract fractal metadata from a saved image.

        Args:
            filepath: Path to image file

        Returns:
            Extracted metadata or None if the image carries none
        """
        filepath = Path(filepath)

        with Image.open(filepath) as img:
            text = getattr(img, 'text', None)
            if text and METADATA_KEY in text:
                return RenderMetadata.from_json(text[METADATA_KEY])

            tags = getattr(img, 'tag_v2', None)
            if tags is not None and 270 in tags:
                return RenderMetadata.from_json(tags[270])

        if filepath.suffix.lower() in ('.jpg', '.jpeg'):
            json_path = filepath.with_suffix('.json')
            if json_path.exists():
                return RenderMetadata.from_json(json_path.read_text())

        return None

    def get_image_info(self, filepath: Path) -> Dict[str, Any]:
        """Get format, size and fractal metadata of an image file."""
        filepath = Path(filepath)

        if not filepath.exists():
            raise FileNotFoundError(f"Image file not found: {filepath}")

        with Image.open(filepath) as img:
            info = {
                'filepath': str(filepath),
                'size_bytes': filepath.stat().st_size,
                'format': img.format,
                'dimensions': img.size,
                'mode': img.mode,
            }

        metadata = self.extract_metadata_from_image(filepath)
        info['fractal_metadata'] = metadata.to_dict() if metadata else None
        return info
