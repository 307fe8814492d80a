"""
Color encoding and image output.

Pixel colors are averaged over their samples, gamma corrected with
gamma 2 (square root), clamped to [0, 0.999] and quantized to 8 bits.
Images are written as plain-text PPM (P3); other extensions are handed
to Pillow.
"""

from __future__ import annotations
import logging
import math
import os
import tempfile
from pathlib import Path
from typing import Tuple, Union

import numpy as np

from .interval import Interval
from .vec3 import Color

logger = logging.getLogger(__name__)

INTENSITY = Interval(0.000, 0.999)


class OutputError(OSError):
    """Raised when an image cannot be written completely."""


def linear_to_gamma(linear_component: float) -> float:
    """Gamma 2 transform from linear space."""
    if linear_component > 0:
        return math.sqrt(linear_component)
    return 0.0


def to_rgb8(pixel_color: Color, samples: int = 1) -> Tuple[int, int, int]:
    """Convert an accumulated sample sum into an 8-bit RGB triple.

    Args:
        pixel_color: Sum of the color estimates for one pixel
        samples: Number of estimates in the sum

    Returns:
        (r, g, b) integers in [0, 255]
    """
    scale = 1.0 / samples
    return tuple(
        int(256 * INTENSITY.clamp(linear_to_gamma(c * scale)))
        for c in pixel_color
    )


def format_ppm(image: np.ndarray) -> str:
    """Return the P3 text for a (height, width, 3) uint8 image."""
    height, width = image.shape[:2]
    lines = ['P3', f'{width} {height}', '255']
    for row in image:
        lines.extend(f'{r} {g} {b}' for r, g, b in row.tolist())
    return '\n'.join(lines) + '\n'


def _atomic_write(path: Path, write) -> None:
    """Write through a sibling temporary file and move it into place.

    The target path never holds a partially written image.
    """
    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f'.{path.name}.', suffix='.tmp')
        os.close(fd)
        write(tmp_name)
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise OutputError(f"Could not write image to {path}: {e}") from e


def write_ppm(path: Union[str, Path], image: np.ndarray) -> None:
    """Write an 8-bit RGB image as plain-text PPM (P3).

    Args:
        path: Output filename
        image: uint8 array of shape (height, width, 3)

    Raises:
        OutputError: If the file cannot be created or written
    """
    path = Path(path)
    text = format_ppm(image)

    def write(filename: str) -> None:
        with open(filename, 'w', encoding='ascii') as f:
            f.write(text)

    _atomic_write(path, write)
    logger.info("Wrote %dx%d PPM to %s", image.shape[1], image.shape[0], path)


def save_image(image: np.ndarray, path: Union[str, Path]) -> None:
    """Save image to file.

    Args:
        image: uint8 array of shape (height, width, 3)
        path: Output filename (extension determines format)

    Raises:
        OutputError: If the file cannot be created or written
    """
    path = Path(path)
    if path.suffix.lower() == '.ppm':
        write_ppm(path, image)
        return

    from PIL import Image as PILImage

    pil_image = PILImage.fromarray(np.ascontiguousarray(image, dtype=np.uint8))
    image_format = PILImage.registered_extensions().get(path.suffix.lower())
    if image_format is None:
        raise OutputError(f"Unsupported image format: {path.suffix}")

    _atomic_write(path, lambda filename: pil_image.save(filename, format=image_format))
    logger.info("Wrote %dx%d %s to %s", image.shape[1], image.shape[0], image_format, path)
