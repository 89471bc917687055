"""Validation helpers for uploaded multimedia content and data URIs."""

import base64
import binascii
from typing import Tuple

from fastapi import HTTPException, UploadFile

ALLOWED_AUDIO_TYPES = {
    "audio/wav",
    "audio/x-wav",
    "audio/webm",
    "audio/mpeg",
    "audio/mp3",
    "audio/mp4",
    "audio/aac",
    "audio/ogg",
    "audio/opus",
    "audio/flac",
}

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/webp", "image/gif"}

AUDIO_EXTENSIONS = (".wav", ".webm", ".mp3", ".mp4", ".m4a", ".ogg", ".flac")


def normalize_mime(mime_type: str | None) -> str:
    """Strip MIME parameters (``audio/webm;codecs=opus`` -> ``audio/webm``)."""
    return (mime_type or "").lower().split(";", 1)[0].strip()


def to_data_uri(data: bytes, mime_type: str) -> str:
    """Encode raw bytes as a self-describing ``data:<mime>;base64,`` reference."""
    encoded = base64.b64encode(data).decode("utf-8")
    return f"data:{normalize_mime(mime_type)};base64,{encoded}"


def parse_data_uri(reference: str) -> Tuple[str, bytes]:
    """Split a data URI into its MIME type and decoded bytes.

    Raises:
        ValueError: If the reference is not a base64 data URI.
    """
    if not reference or not reference.startswith("data:"):
        raise ValueError("Media reference must be a data URI.")
    header, sep, payload = reference.partition(",")
    if not sep or not header.endswith(";base64"):
        raise ValueError("Media reference must be base64 encoded.")
    mime_type = normalize_mime(header[len("data:"):-len(";base64")])
    try:
        raw = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("Media reference contains invalid base64 data.") from exc
    return mime_type, raw


def validate_audio_file(audio_file: UploadFile) -> str:
    """Validate an uploaded recording and return its normalized MIME type.

    Browsers record ``audio/webm`` by default, so any of the common container
    formats is accepted. When the content type is missing the filename
    extension must name a known type.
    """
    if audio_file.content_type:
        content_type = normalize_mime(audio_file.content_type)
        if content_type not in ALLOWED_AUDIO_TYPES:
            raise HTTPException(status_code=415, detail=f"Unsupported audio content type: {audio_file.content_type}")
        return content_type
    filename = (audio_file.filename or "").lower()
    if not filename.endswith(AUDIO_EXTENSIONS):
        raise HTTPException(status_code=415, detail="Unsupported or missing audio content type.")
    suffix = filename.rsplit(".", 1)[-1]
    return "audio/mp4" if suffix == "m4a" else f"audio/{suffix}"


async def read_audio_bytes(audio_file: UploadFile) -> Tuple[bytes, str]:
    """Read validated audio bytes, ensuring the upload is not empty."""
    mime_type = validate_audio_file(audio_file)
    audio_bytes = await audio_file.read()
    if not audio_bytes:
        raise HTTPException(status_code=400, detail="Uploaded audio file is empty.")
    return audio_bytes, mime_type


async def read_image_bytes(image_file: UploadFile) -> Tuple[bytes, str]:
    """Read an uploaded plant photo and return its bytes and MIME type."""
    mime_type = normalize_mime(image_file.content_type) or "image/jpeg"
    if mime_type not in ALLOWED_IMAGE_TYPES:
        raise HTTPException(status_code=415, detail=f"Unsupported image content type: {image_file.content_type}")
    image_bytes = await image_file.read()
    if not image_bytes:
        raise HTTPException(status_code=400, detail="Please select an image file to analyze.")
    return image_bytes, mime_type
