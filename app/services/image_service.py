"""
Card image preprocessing: HEIC/HEIF detection and JPEG conversion, base64 data URLs
"""
import base64
import binascii
import io
import logging
from dataclasses import dataclass
from typing import Optional

import pillow_heif
from PIL import Image, UnidentifiedImageError

from app import config
from app.errors import ImageProcessingError

logger = logging.getLogger(__name__)

pillow_heif.register_heif_opener()

# ISO-BMFF major brands of HEIC/HEIF stills and sequences
HEIF_BRANDS = {
    b"heic", b"heix", b"hevc", b"hevx",
    b"heim", b"heis", b"hevm", b"hevs",
    b"mif1", b"msf1",
}
# mif1/msf1 are shared with AVIF, which browsers display natively
AVIF_BRANDS = {b"avif", b"avis"}

JPEG_MIME_TYPE = "image/jpeg"
DATA_URL_PREFIX = "data:"


@dataclass
class CardUpload:
    """One file chosen in the upload step"""
    filename: str
    content_type: Optional[str]
    data: bytes


@dataclass
class PreparedImage:
    data: bytes
    mime_type: str
    converted: bool = False

    @property
    def data_url(self) -> str:
        return to_data_url(self.data, self.mime_type)

    @property
    def payload(self) -> str:
        """Raw base64 sent to the interpretation API"""
        return strip_data_url_prefix(self.data_url)


def is_heic(data: bytes) -> bool:
    """Check the major brand of the leading ftyp box; compatible brands only rule AVIF out."""
    if len(data) < 12 or data[4:8] != b"ftyp":
        return False

    major_brand = data[8:12]
    if major_brand not in HEIF_BRANDS:
        return False

    box_size = int.from_bytes(data[0:4], "big")
    if box_size < 16 or box_size > len(data):
        box_size = min(len(data), 64)
    # minor_version sits at 12:16, compatible brands follow in 4-byte slots
    compatible = {data[offset:offset + 4] for offset in range(16, box_size - 3, 4)}
    return not (compatible & AVIF_BRANDS)


def convert_heic_to_jpeg(data: bytes, quality: int = None) -> bytes:
    quality = quality or config.get_heic_jpeg_quality()
    try:
        with Image.open(io.BytesIO(data)) as img:
            buffer = io.BytesIO()
            img.convert("RGB").save(buffer, format="JPEG", quality=quality)
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError, RuntimeError) as e:
        raise ImageProcessingError(f"Could not convert HEIC image: {e}") from e

    converted = buffer.getvalue()
    logger.info(f"Converted HEIC image to JPEG ({len(data)} -> {len(converted)} bytes)")
    return converted


def detect_mime_type(data: bytes) -> str:
    """Verify the bytes decode as an image and return its MIME type."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            image_format = img.format
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
        raise ImageProcessingError("The uploaded file is not a readable image.") from e

    mime_type = Image.MIME.get(image_format or "")
    if not mime_type:
        raise ImageProcessingError(f"Unsupported image format: {image_format}")
    return mime_type


def to_data_url(data: bytes, mime_type: str) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def strip_data_url_prefix(data_url: str) -> str:
    if not data_url.startswith(DATA_URL_PREFIX) or "," not in data_url:
        raise ValueError("Not a base64 data URL")
    return data_url.split(",", 1)[1]


def data_url_to_bytes(data_url: str) -> bytes:
    try:
        return base64.b64decode(strip_data_url_prefix(data_url), validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 data: {e}") from e


def prepare_card_image(upload: CardUpload, quality: int = None) -> PreparedImage:
    """
    Normalize an uploaded card photo for transmission.

    HEIC/HEIF is transcoded to JPEG; every other image keeps its original
    bytes untouched.
    """
    if not upload.data:
        raise ImageProcessingError("The uploaded file is empty.")

    if is_heic(upload.data):
        logger.info(f"HEIC upload detected: {upload.filename}")
        prepared = PreparedImage(
            data=convert_heic_to_jpeg(upload.data, quality),
            mime_type=JPEG_MIME_TYPE,
            converted=True,
        )
    else:
        prepared = PreparedImage(data=upload.data, mime_type=detect_mime_type(upload.data))

    # conversion can grow the file; the reading API only accepts a photo up to the upload limit
    max_bytes = config.get_max_body_bytes()
    if len(prepared.data) > max_bytes:
        raise ImageProcessingError(
            f"The card photo is too large ({len(prepared.data)} bytes, limit {max_bytes} bytes)."
        )
    return prepared
