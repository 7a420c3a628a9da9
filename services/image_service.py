"""
Service layer for image compression operations
"""
from dataclasses import dataclass
from io import BytesIO
import logging

from PIL import Image, ImageOps

logger = logging.getLogger(__name__)

OUTPUT_FORMAT = "webp"
FALLBACK_QUALITY_FLOOR = 10


class CompressionError(Exception):
    """Base class for codec failures during compression"""


class DecodeError(CompressionError):
    """The input bytes could not be read as an image"""


class EncodeError(CompressionError):
    """The encoder failed while writing an attempt"""


@dataclass(frozen=True)
class CompressionSettings:
    target_bytes: int = 100 * 1024
    min_quality: int = 20
    start_quality: int = 90
    step: int = 8

    def validate(self):
        if self.target_bytes <= 0:
            raise ValueError("target_bytes must be positive")
        if self.step <= 0:
            raise ValueError("step must be positive")
        for name in ("min_quality", "start_quality"):
            value = getattr(self, name)
            if not 0 <= value <= 100:
                raise ValueError(f"{name} must be between 0 and 100, got {value}")

    @property
    def fallback_quality(self):
        return max(self.min_quality - 5, FALLBACK_QUALITY_FLOOR)


@dataclass(frozen=True)
class CompressionAttempt:
    quality: int
    buffer: bytes

    @property
    def size(self):
        return len(self.buffer)


@dataclass(frozen=True)
class CompressionResult:
    buffer: bytes
    quality_used: int
    target_reached: bool
    attempts: int

    @property
    def size(self):
        return len(self.buffer)


def encode_webp(image, quality):
    """Encode a decoded image as lossy WebP at the given quality"""
    output = BytesIO()
    image.save(output, format="WEBP", quality=quality, lossless=False)
    return output.getvalue()


def decode_image(image_bytes):
    """Decode raw bytes and apply the EXIF orientation without resizing"""
    try:
        image = Image.open(BytesIO(image_bytes))
        image.load()
        image = ImageOps.exif_transpose(image)
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise DecodeError(f"Cannot decode input image: {e}") from e

    if image.mode not in ("RGB", "RGBA"):
        has_alpha = image.mode in ("LA", "PA") or "transparency" in image.info
        image = image.convert("RGBA" if has_alpha else "RGB")
    return image


class ImageService:
    def __init__(self, encoder=encode_webp):
        self.encoder = encoder

    def _attempt(self, image, quality):
        try:
            buffer = self.encoder(image, quality)
        except (OSError, ValueError, KeyError) as e:
            raise EncodeError(f"Encoding failed at quality {quality}: {e}") from e
        logger.debug(f"Encoded attempt at quality {quality}: {len(buffer)} bytes")
        return CompressionAttempt(quality=quality, buffer=buffer)

    def compress(self, image_bytes, settings=None):
        """Re-encode image bytes, lowering quality until the target size is met"""
        settings = settings or CompressionSettings()
        settings.validate()

        image = decode_image(image_bytes)
        attempts = 0
        last_attempt = None

        quality = settings.start_quality
        while quality >= settings.min_quality:
            last_attempt = self._attempt(image, quality)
            attempts += 1

            if last_attempt.size <= settings.target_bytes:
                logger.info(
                    f"Target {settings.target_bytes} bytes reached at quality {quality} "
                    f"({last_attempt.size} bytes, {attempts} attempts)"
                )
                return CompressionResult(
                    buffer=last_attempt.buffer,
                    quality_used=quality,
                    target_reached=True,
                    attempts=attempts,
                )

            quality -= settings.step

        final = self._attempt(image, settings.fallback_quality)
        attempts += 1

        if last_attempt is not None:
            logger.info(
                f"Fallback at quality {final.quality}: {final.size} bytes "
                f"(last loop attempt at quality {last_attempt.quality}: {last_attempt.size} bytes)"
            )
        else:
            logger.info(f"Fallback at quality {final.quality}: {final.size} bytes (no loop attempts)")

        return CompressionResult(
            buffer=final.buffer,
            quality_used=final.quality,
            target_reached=final.size <= settings.target_bytes,
            attempts=attempts,
        )
