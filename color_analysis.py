#!/usr/bin/env python3
"""
Dark/light balance and dominant colors of a raw pixel buffer.

Samples an interleaved-channel buffer, classifies each sample as dark or light
with an ordered rule cascade, and ranks quantized color buckets by how many
samples fall into them.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable

import numpy as np


logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

SAMPLING_STRIDE = 24  # Byte step between samples
BUCKET_SIZE = 10  # Channel quantization step for dominant colors
MAX_DOMINANT_COLORS = 20  # Maximum colors to include in output

# Dark/light classification
DARK_LUMINANCE_THRESHOLD = 0.15  # Relative luminance below this is dark
OLED_BLUE_MIN_BLUE = 200  # Vivid blue: blue channel above this...
OLED_BLUE_MAX_RED_GREEN = 120  # ...with red and green both below this
VIVID_MIN_SATURATION = 0.8
VIVID_MIN_VALUE = 0.6

# Rec. 709 / WCAG relative luminance weights
LUMINANCE_WEIGHTS = (0.2126, 0.7152, 0.0722)


# =============================================================================
# Color Conversion
# =============================================================================

def srgb_to_linear(values: np.ndarray) -> np.ndarray:
    """Gamma-expand sRGB channel values (0-255) to linear light (0-1)."""
    norm = np.asarray(values, dtype=np.float64) / 255.0
    return np.where(norm <= 0.04045, norm / 12.92, ((norm + 0.055) / 1.055) ** 2.4)


def relative_luminance(rgb: np.ndarray) -> np.ndarray:
    """Relative luminance (0-1) for an (n, 3) array of RGB values (0-255)."""
    linear = srgb_to_linear(rgb)
    wr, wg, wb = LUMINANCE_WEIGHTS
    return wr * linear[:, 0] + wg * linear[:, 1] + wb * linear[:, 2]


def luminance(r: int, g: int, b: int) -> float:
    """Relative luminance of a single RGB color."""
    return float(relative_luminance(np.array([[r, g, b]]))[0])


def hsv_saturation_value(rgb: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """HSV saturation and value (both 0-1) for an (n, 3) RGB array."""
    rgb = np.asarray(rgb, dtype=np.float64)
    value = rgb.max(axis=1) / 255
    low = rgb.min(axis=1) / 255
    saturation = np.divide(value - low, value, out=np.zeros_like(value), where=value != 0)
    return saturation, value


def to_hex(rgb: tuple) -> str:
    return f"#{rgb[0]:02x}{rgb[1]:02x}{rgb[2]:02x}"


# =============================================================================
# Dark/Light Classification
# =============================================================================

@dataclass(frozen=True)
class DarkRule:
    """One step of the dark/light cascade: where `predicate` holds, the verdict is `is_dark`."""
    name: str
    predicate: Callable[[np.ndarray], np.ndarray]
    is_dark: bool


def _is_oled_blue(rgb: np.ndarray) -> np.ndarray:
    r, g, b = rgb[:, 0], rgb[:, 1], rgb[:, 2]
    return ((b > OLED_BLUE_MIN_BLUE)
            & (r < OLED_BLUE_MAX_RED_GREEN)
            & (g < OLED_BLUE_MAX_RED_GREEN))


def _is_vivid(rgb: np.ndarray) -> np.ndarray:
    saturation, value = hsv_saturation_value(rgb)
    return (saturation > VIVID_MIN_SATURATION) & (value > VIVID_MIN_VALUE)


# Evaluated in order, first match wins. Colors no rule matches fall through to
# the luminance threshold.
DARK_RULES = (
    # Pure vivid blues read as bright on screen whatever their luminance
    DarkRule('oled_blue', _is_oled_blue, False),
    # Highly saturated, bright hues read as light
    DarkRule('vivid_saturated', _is_vivid, False),
)
LUMINANCE_RULE = 'luminance'


def _as_rgb_array(rgb) -> np.ndarray:
    return np.asarray(rgb, dtype=np.int64).reshape(-1, 3)


def classify_dark(rgb: np.ndarray) -> np.ndarray:
    """
    Classify each color of an (n, 3) RGB array as dark (True) or light (False).

    Rules in DARK_RULES are applied in priority order; np.select picks the
    first matching condition per row, so an earlier rule shadows later ones.
    """
    rgb = _as_rgb_array(rgb)
    conditions = [rule.predicate(rgb) for rule in DARK_RULES]
    verdicts = [np.full(len(rgb), rule.is_dark) for rule in DARK_RULES]
    default = relative_luminance(rgb) < DARK_LUMINANCE_THRESHOLD
    return np.select(conditions, verdicts, default=default).astype(bool)


def is_dark(r: int, g: int, b: int) -> bool:
    return bool(classify_dark([r, g, b])[0])


def matching_rule(r: int, g: int, b: int) -> str:
    """Name of the rule that decides the classification of a single color."""
    rgb = _as_rgb_array([r, g, b])
    for rule in DARK_RULES:
        if rule.predicate(rgb)[0]:
            return rule.name
    return LUMINANCE_RULE


# =============================================================================
# Sampling & Aggregation
# =============================================================================

@dataclass
class DominantColor:
    """A quantized color bucket and its share of the sampled pixels."""
    rgb: tuple  # (r, g, b) bucket representative
    hex: str
    percentage: float  # 0-100, of sampled pixels
    brightness: float  # luminance * 255, kept for display consumers
    luminance: float
    is_dark: bool

    def to_dict(self) -> dict:
        r, g, b = self.rgb
        return {
            'rgb': {'r': r, 'g': g, 'b': b},
            'hex': self.hex,
            'percentage': self.percentage,
            'brightness': self.brightness,
            'luminance': self.luminance,
            'isDark': self.is_dark,
        }


@dataclass
class AnalysisResult:
    """Color composition of one pixel buffer."""
    dominant_colors: list = field(default_factory=list)  # DominantColor, by percentage descending
    dark_percentage: float = 0.0
    light_percentage: float = 0.0
    total_colors: int = 0  # Distinct buckets observed, not only those listed

    @classmethod
    def empty(cls) -> 'AnalysisResult':
        return cls()

    def to_dict(self) -> dict:
        return {
            'dominantColors': [c.to_dict() for c in self.dominant_colors],
            'darkPercentage': self.dark_percentage,
            'lightPercentage': self.light_percentage,
            'totalColors': self.total_colors,
        }


def sample_pixels(pixel_buffer, sampling_stride: int = SAMPLING_STRIDE) -> np.ndarray:
    """
    Read one RGB sample every `sampling_stride` bytes.

    Samples start at byte 0, 24, 48, ... regardless of the channel count, so a
    stride that is not a multiple of the pixel width drifts across channels.
    Channel bytes past the end of the buffer read as 0. Numpy arrays are read
    by value and must hold integers in 0-255.

    Returns:
        int64 array of shape (n_samples, 3)

    Raises:
        ValueError: If a numpy array holds values that are not bytes
    """
    if isinstance(pixel_buffer, np.ndarray):
        data = pixel_buffer.ravel()
        if data.dtype != np.uint8:
            if not np.issubdtype(data.dtype, np.integer):
                raise ValueError(f"Pixel array must hold integers, got {data.dtype}")
            if data.size and (data.min() < 0 or data.max() > 255):
                raise ValueError("Pixel array values must be in 0-255")
            data = data.astype(np.uint8)
    else:
        data = np.frombuffer(pixel_buffer, dtype=np.uint8)
    starts = np.arange(0, len(data), sampling_stride)
    padded = np.concatenate([data, np.zeros(2, dtype=np.uint8)]).astype(np.int64)
    return np.column_stack([padded[starts], padded[starts + 1], padded[starts + 2]])


def quantize(rgb: np.ndarray, bucket_size: int = BUCKET_SIZE) -> np.ndarray:
    """Floor each channel to a multiple of bucket_size."""
    return (np.asarray(rgb, dtype=np.int64) // bucket_size) * bucket_size


def count_buckets(rgb: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Frequency map of color buckets: (unique buckets, sample counts)."""
    buckets = quantize(rgb)
    unique_buckets, counts = np.unique(buckets, axis=0, return_counts=True)
    return unique_buckets, counts


def rank_dominant_colors(buckets: np.ndarray, counts: np.ndarray, total: int,
                         limit: int = MAX_DOMINANT_COLORS) -> list:
    """
    Build DominantColor entries for the `limit` most frequent buckets.

    Each bucket is classified from its own representative color, not from the
    samples that fell into it.
    """
    # Stable sort keeps equal counts in bucket order
    order = np.argsort(-counts, kind='stable')[:limit]
    top = buckets[order]
    lum = relative_luminance(top)
    dark = classify_dark(top)

    colors = []
    for bucket, count, bucket_lum, bucket_dark in zip(top, counts[order], lum, dark):
        rgb = (int(bucket[0]), int(bucket[1]), int(bucket[2]))
        colors.append(DominantColor(
            rgb=rgb,
            hex=to_hex(rgb),
            percentage=float(count / total * 100),
            brightness=float(bucket_lum * 255),
            luminance=float(bucket_lum),
            is_dark=bool(bucket_dark),
        ))
    return colors


def _analyze(pixel_buffer) -> AnalysisResult:
    samples = sample_pixels(pixel_buffer)
    dark = classify_dark(samples)
    dark_pixels = int(dark.sum())
    light_pixels = len(samples) - dark_pixels
    total = dark_pixels + light_pixels

    if total == 0:
        return AnalysisResult.empty()

    buckets, counts = count_buckets(samples)
    logger.debug("Sampled %d pixels into %d color buckets", total, len(buckets))

    return AnalysisResult(
        dominant_colors=rank_dominant_colors(buckets, counts, total),
        dark_percentage=dark_pixels / total * 100,
        light_percentage=light_pixels / total * 100,
        total_colors=len(buckets),
    )


def analyze(pixel_buffer) -> AnalysisResult:
    """
    Analyze the color composition of a raw interleaved pixel buffer.

    Args:
        pixel_buffer: bytes-like object (or uint8 numpy array) with at least
            3 channels per pixel; any 4th channel is ignored

    Returns:
        AnalysisResult. Empty input and processing failures both produce the
        zeroed result; failures are logged, never raised.
    """
    try:
        return _analyze(pixel_buffer)
    except Exception:
        logger.exception("Color analysis failed")
        return AnalysisResult.empty()
