"""
Image processor producing the stored photo variants.

Decodes the upload once with OpenCV and derives:
- original:  fit within 1920x1080 (never upscaled), JPEG q90
- medium:    fit within 800x600 (never upscaled), JPEG q85
- thumbnail: exactly 200x200, center crop-to-fill, JPEG q80
"""
import logging
import math
from dataclasses import dataclass
from typing import Dict, Iterator, Tuple

import cv2
import numpy as np

from src.core.exceptions import DecodeError
from src.models.enums import PhotoVariant

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VariantSpec:
    """Size policy for one stored variant."""
    variant: PhotoVariant
    width: int
    height: int
    quality: int
    crop: bool = False


VARIANT_SPECS: Tuple[VariantSpec, ...] = (
    VariantSpec(PhotoVariant.original, 1920, 1080, 90),
    VariantSpec(PhotoVariant.medium, 800, 600, 85),
    VariantSpec(PhotoVariant.thumbnail, 200, 200, 80, crop=True),
)


@dataclass(frozen=True)
class ProcessedImages:
    """JPEG bytes for every variant of one upload."""
    original: bytes
    medium: bytes
    thumbnail: bytes

    def get(self, variant: PhotoVariant) -> bytes:
        return getattr(self, variant.value)

    def items(self) -> Iterator[Tuple[PhotoVariant, bytes]]:
        """Yield (variant, bytes) in upload order."""
        for spec in VARIANT_SPECS:
            yield spec.variant, self.get(spec.variant)


def fit_within(width: int, height: int, max_width: int, max_height: int) -> Tuple[int, int]:
    """
    Scale dimensions down to fit a bounding box, preserving aspect ratio.

    Dimensions already inside the box are returned unchanged.
    """
    if width <= max_width and height <= max_height:
        return width, height

    ratio = min(max_width / width, max_height / height)
    return max(1, int(width * ratio)), max(1, int(height * ratio))


class ImageProcessor:
    """Turns uploaded image bytes into the three stored JPEG variants."""

    def __init__(self, specs: Tuple[VariantSpec, ...] = VARIANT_SPECS):
        self.specs = specs

    def process(self, contents: bytes) -> ProcessedImages:
        """
        Decode an upload and encode every variant.

        Args:
            contents: Raw JPEG/PNG/WebP bytes

        Returns:
            ProcessedImages with all variants

        Raises:
            DecodeError: If the bytes are not a decodable image or a variant
                cannot be encoded (no partial result is returned)
        """
        image = self._decode(contents)
        height, width = image.shape[:2]

        encoded: Dict[str, bytes] = {}
        for spec in self.specs:
            if spec.crop:
                resized = self._crop_to_fill(image, spec.width, spec.height)
            else:
                resized = self._fit(image, spec.width, spec.height)
            encoded[spec.variant.value] = self._encode_jpeg(resized, spec.quality)

        logger.debug(
            f"Processed {width}x{height} image into variants: "
            + ", ".join(f"{name}={len(data)}B" for name, data in encoded.items())
        )
        return ProcessedImages(**encoded)

    def _decode(self, contents: bytes) -> np.ndarray:
        if not contents:
            raise DecodeError("Empty image file")

        try:
            np_buffer = np.frombuffer(contents, dtype=np.uint8)
            image = cv2.imdecode(np_buffer, cv2.IMREAD_COLOR)
        except cv2.error as e:
            raise DecodeError(f"Invalid or corrupted image: {e}") from e

        if image is None:
            raise DecodeError("Invalid or corrupted image")
        return image

    def _fit(self, image: np.ndarray, max_width: int, max_height: int) -> np.ndarray:
        height, width = image.shape[:2]
        new_width, new_height = fit_within(width, height, max_width, max_height)
        if (new_width, new_height) == (width, height):
            return image
        return cv2.resize(image, (new_width, new_height), interpolation=cv2.INTER_LANCZOS4)

    def _crop_to_fill(self, image: np.ndarray, target_width: int, target_height: int) -> np.ndarray:
        """Scale to cover the target box, then center-crop to it exactly."""
        height, width = image.shape[:2]
        scale = max(target_width / width, target_height / height)
        scaled_width = max(target_width, math.ceil(width * scale))
        scaled_height = max(target_height, math.ceil(height * scale))

        scaled = cv2.resize(image, (scaled_width, scaled_height), interpolation=cv2.INTER_LANCZOS4)

        left = (scaled_width - target_width) // 2
        top = (scaled_height - target_height) // 2
        return scaled[top:top + target_height, left:left + target_width]

    def _encode_jpeg(self, image: np.ndarray, quality: int) -> bytes:
        try:
            success, buffer = cv2.imencode('.jpg', image, [cv2.IMWRITE_JPEG_QUALITY, quality])
        except cv2.error as e:
            raise DecodeError(f"Failed to encode JPEG: {e}") from e

        if not success:
            raise DecodeError("Failed to encode JPEG")
        return buffer.tobytes()
