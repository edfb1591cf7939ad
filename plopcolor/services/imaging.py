"""
PlopColor Imaging Utilities
Upload validation and decoding. Decoding happens here, on the collaborator
side; the palette engine only ever sees decoded pixel arrays.
"""
import io

import numpy as np
from fastapi import HTTPException, UploadFile
from PIL import Image, UnidentifiedImageError

from plopcolor.config import config

# Leading bytes of the formats Pillow is asked to decode
MAGIC_BYTES = (
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"BM", "image/bmp"),
    (b"II*\x00", "image/tiff"),
    (b"MM\x00*", "image/tiff"),
)


def validate_file_upload(file: UploadFile) -> None:
    """
    Validate declared content type and size before reading the body.

    Raises:
        HTTPException: 400 for oversized files, 415 for unsupported formats
    """
    if file.size and file.size > config.MAX_FILE_MB * 1024 * 1024:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Maximum size: {config.MAX_FILE_MB}MB"
        )

    if file.content_type not in config.SUPPORTED_MIME_TYPES:
        raise HTTPException(
            status_code=415,
            detail=f"Unsupported media type. Supported: {', '.join(config.SUPPORTED_MIME_TYPES)}"
        )


def validate_magic_bytes(file_bytes: bytes) -> str:
    """
    Check the file signature so only real images reach the decoder.

    Returns:
        Detected MIME type

    Raises:
        HTTPException: 400 for empty, truncated or unrecognized files
    """
    if len(file_bytes) < 8:
        raise HTTPException(status_code=400, detail="File too small or corrupt")

    for signature, mime_type in MAGIC_BYTES:
        if file_bytes.startswith(signature):
            return mime_type

    # WEBP is a RIFF container with a format tag at offset 8
    if file_bytes[:4] == b"RIFF" and file_bytes[8:12] == b"WEBP":
        return "image/webp"

    raise HTTPException(
        status_code=400,
        detail="Invalid image file. Magic bytes don't match supported formats."
    )


def decode_image_bytes(file_bytes: bytes) -> np.ndarray:
    """
    Decode image bytes into an ``(h, w, 4)`` uint8 RGBA array.

    Raises:
        HTTPException: 400 if Pillow cannot decode the data
    """
    validate_magic_bytes(file_bytes)

    try:
        with Image.open(io.BytesIO(file_bytes)) as pil_image:
            pil_image.load()
            rgba = np.array(pil_image.convert("RGBA"), dtype=np.uint8)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as e:
        raise HTTPException(status_code=400, detail=f"Failed to decode image: {str(e)}")

    return rgba


async def read_image(file: UploadFile) -> np.ndarray:
    """
    Read an uploaded file and decode it to an RGBA array.

    Raises:
        HTTPException: 400 for read/decode errors or oversized bodies,
            415 for unsupported content types
    """
    validate_file_upload(file)

    file_bytes = await file.read()

    # Size header may be missing, so check again after reading
    if len(file_bytes) > config.MAX_FILE_MB * 1024 * 1024:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Maximum size: {config.MAX_FILE_MB}MB"
        )

    return decode_image_bytes(file_bytes)
