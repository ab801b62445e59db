"""
Decode images into the raw pixel buffers consumed by color_analysis.

Screenshots are cover-fitted to a small fixed resolution before analysis.
"""

import io
import logging
from pathlib import Path
from typing import Union

from PIL import Image, ImageOps


logger = logging.getLogger(__name__)

ANALYSIS_SIZE = (200, 150)  # (width, height) of the analysis buffer

# Image size limits (security: prevent decompression bombs)
MAX_IMAGE_PIXELS = 50_000_000  # 50 megapixels
MAX_IMAGE_DIMENSION = 20_000  # Full-page screenshots run tall

ImageSource = Union[str, Path, bytes]


def open_image(source: ImageSource) -> Image.Image:
    """
    Open an image from a path or from encoded image bytes.

    Raises:
        FileNotFoundError: If the image path doesn't exist
        ValueError: If the data is not a valid image or exceeds size limits
    """
    try:
        if isinstance(source, (bytes, bytearray)):
            img = Image.open(io.BytesIO(source))
        else:
            img = Image.open(source)
    except FileNotFoundError:
        raise FileNotFoundError(f"Image not found: {source}")
    except Exception as e:
        raise ValueError(f"Could not open image: {e}")

    # Size checks run on the header only, before any pixel data is decoded
    width, height = img.size
    if width > MAX_IMAGE_DIMENSION or height > MAX_IMAGE_DIMENSION:
        img.close()
        raise ValueError(
            f"Image dimensions {width}x{height} exceed maximum "
            f"{MAX_IMAGE_DIMENSION}x{MAX_IMAGE_DIMENSION}"
        )
    if width * height > MAX_IMAGE_PIXELS:
        img.close()
        raise ValueError(
            f"Image has {width * height:,} pixels, exceeding maximum {MAX_IMAGE_PIXELS:,}"
        )

    try:
        img.load()
    except Exception as e:
        img.close()
        raise ValueError(f"Could not open image: {e}")

    return img


def has_alpha(img: Image.Image) -> bool:
    return img.mode in ('RGBA', 'LA', 'PA') or 'transparency' in img.info


def to_pixel_buffer(img: Image.Image, size: tuple = ANALYSIS_SIZE) -> bytes:
    """
    Resize to `size` (center crop, aspect preserved) and return raw bytes.

    Channels are interleaved RGB, or RGBA when the image has transparency.
    """
    mode = 'RGBA' if has_alpha(img) else 'RGB'
    fitted = ImageOps.fit(img.convert(mode), size, method=Image.Resampling.LANCZOS)
    logger.debug("Fitted %dx%d %s image to %dx%d %s",
                 img.width, img.height, img.mode, size[0], size[1], mode)
    return fitted.tobytes()


def load_pixel_buffer(source: ImageSource, size: tuple = ANALYSIS_SIZE) -> bytes:
    with open_image(source) as img:
        return to_pixel_buffer(img, size)
