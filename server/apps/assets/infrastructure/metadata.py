"""Metadata utilities for assets."""

import hashlib
import json
import logging
import mimetypes
from collections.abc import Mapping
from pathlib import Path
from typing import BinaryIO, Final

logger = logging.getLogger(__name__)

_DEFAULT_MIME_TYPE: Final = 'application/octet-stream'
_CHUNK_SIZE: Final = 8192

# Compact separators keep '"key":"value"' adjacent, which search relies on
_COMPACT_SEPARATORS: Final = (',', ':')

_IMAGE_EXTENSIONS: Final = frozenset((
    '.jpg', '.jpeg', '.png', '.gif', '.bmp', '.webp', '.svg',
    '.tiff', '.tif', '.heic', '.heif', '.psd',
    '.arw', '.cr2', '.nef', '.dng', '.raw',
))

_VIDEO_EXTENSIONS: Final = frozenset((
    '.mp4', '.mov', '.avi', '.mkv', '.webm',
    '.flv', '.wmv', '.m4v', '.mpeg', '.mpg',
))

_AUDIO_EXTENSIONS: Final = frozenset((
    '.mp3', '.wav', '.flac', '.aac', '.ogg',
    '.m4a', '.wma', '.aiff',
))

_DOCUMENT_MIME_MARKERS: Final = ('pdf', 'word', 'document', 'sheet', 'excel')
_ARCHIVE_MIME_MARKERS: Final = ('zip', 'rar', '7z')


def calculate_checksum(file_obj: BinaryIO) -> str:
    """Calculate the SHA256 checksum of an uploaded file.

    Reads in chunks and leaves the file pointer at the start.

    Args:
        file_obj: File-like object opened in binary mode.

    Returns:
        Hex-encoded SHA256 digest.
    """
    digest = hashlib.sha256()
    file_obj.seek(0)
    for chunk in iter(lambda: file_obj.read(_CHUNK_SIZE), b''):
        digest.update(chunk)
    file_obj.seek(0)
    return digest.hexdigest()


def detect_mime_type(filename: str) -> str:
    """Detect MIME type from the filename extension.

    Args:
        filename: Filename with extension.

    Returns:
        MIME type string (e.g., 'image/jpeg', 'application/pdf').
        Returns 'application/octet-stream' if type cannot be determined.
    """
    mime_type, _ = mimetypes.guess_type(filename)
    if mime_type is None:
        return _DEFAULT_MIME_TYPE
    return mime_type


def classify_file_type(mime_type: str, filename: str = '') -> str:
    """Map a file to its catalog category.

    Known extensions win over the MIME type, since browsers often
    send a generic MIME type for camera RAW files.

    Args:
        mime_type: MIME type reported for the file.
        filename: Original filename.

    Returns:
        One of image, video, audio, document, archive, other.
    """
    extension = Path(filename).suffix.lower()
    if extension in _IMAGE_EXTENSIONS:
        return 'image'
    if extension in _VIDEO_EXTENSIONS:
        return 'video'
    if extension in _AUDIO_EXTENSIONS:
        return 'audio'

    mime_type = (mime_type or '').lower()
    for prefix in ('image', 'video', 'audio'):
        if mime_type.startswith(f'{prefix}/'):
            return prefix
    if any(marker in mime_type for marker in _DOCUMENT_MIME_MARKERS):
        return 'document'
    if any(marker in mime_type for marker in _ARCHIVE_MIME_MARKERS):
        return 'archive'
    return 'other'


def serialize_metadata(values: Mapping[str, str]) -> str | None:
    """Encode metadata as a compact JSON object.

    Args:
        values: Metadata mapping.

    Returns:
        JSON text like '{"camera":"X100"}', or None for an empty mapping.
    """
    if not values:
        return None
    return json.dumps(
        {str(key): str(value) for key, value in values.items()},
        separators=_COMPACT_SEPARATORS,
        ensure_ascii=False,
    )


def deserialize_metadata(blob: str | None) -> dict[str, str]:
    """Decode a metadata blob.

    Args:
        blob: Stored metadata text.

    Returns:
        Metadata mapping. Empty if the blob is missing or malformed.
    """
    if not blob:
        return {}
    try:
        decoded = json.loads(blob)
    except ValueError:
        logger.warning('Malformed metadata blob ignored: %.80s', blob)
        return {}
    if not isinstance(decoded, dict):
        logger.warning('Metadata blob is not an object: %.80s', blob)
        return {}
    return {str(key): str(value) for key, value in decoded.items()}


def metadata_value_marker(key: str) -> str:
    """Text that precedes a string value of ``key`` in a blob."""
    return f'"{key}":"'


def extract_metadata_value(blob: str | None, key: str) -> str | None:
    """Read the value of one key straight from the blob text.

    Mirrors the substring extraction used for database-side sorting,
    so escaped quotes inside values end the value early.

    Args:
        blob: Stored metadata text.
        key: Metadata key.

    Returns:
        Raw value text, or None if the key marker is absent.
    """
    if not blob:
        return None
    marker = metadata_value_marker(key)
    start = blob.find(marker)
    if start < 0:
        return None
    start += len(marker)
    end = blob.find('"', start)
    if end < 0:
        return blob[start:]
    return blob[start:end]
