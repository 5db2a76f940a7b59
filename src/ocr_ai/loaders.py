"""
Document Loaders
================

Turn a local path, URL, byte buffer or base64 string into a FileInfo,
and write extraction results back to disk.

The document category comes from the file extension for local sources
and from the HTTP Content-Type header (falling back to the extension)
for URLs.
"""

import base64
import logging
import re
from pathlib import Path
from urllib.parse import unquote, urlparse

import requests

from ocr_ai.errors import FileLoadError, PersistenceError, UnsupportedFileTypeError
from ocr_ai.models import FileCategory, FileInfo

logger = logging.getLogger(__name__)

DEFAULT_URL_TIMEOUT = 60

MIME_TYPES: dict[str, str] = {
    # PDF
    ".pdf": "application/pdf",
    # Images
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".bmp": "image/bmp",
    ".tiff": "image/tiff",
    ".tif": "image/tiff",
    # Text
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".csv": "text/csv",
    ".json": "application/json",
    ".xml": "application/xml",
    ".html": "text/html",
    ".htm": "text/html",
}

MIME_TO_CATEGORY: dict[str, FileCategory] = {
    "application/pdf": FileCategory.PDF,
    "image/jpeg": FileCategory.IMAGE,
    "image/png": FileCategory.IMAGE,
    "image/gif": FileCategory.IMAGE,
    "image/webp": FileCategory.IMAGE,
    "image/bmp": FileCategory.IMAGE,
    "image/tiff": FileCategory.IMAGE,
    "text/plain": FileCategory.TEXT,
    "text/markdown": FileCategory.TEXT,
    "text/csv": FileCategory.TEXT,
    "application/json": FileCategory.TEXT,
    "application/xml": FileCategory.TEXT,
    "text/html": FileCategory.TEXT,
}

_FILENAME_PATTERN = re.compile(r"filename[^;=\n]*=((['\"]).*?\2|[^;\n]*)")


def get_supported_extensions() -> list[str]:
    """Return list of supported file extensions (e.g., ['.pdf', '.png'])."""
    return list(MIME_TYPES)


def is_extension_supported(ext: str) -> bool:
    """Check if a file extension is supported, with or without the dot."""
    normalized = ext.lower() if ext.startswith(".") else f".{ext.lower()}"
    return normalized in MIME_TYPES


def is_url(source: str) -> bool:
    """Check if a source string is an HTTP(S) URL."""
    return source.startswith(("http://", "https://"))


def detect_file_type(file_name: str, mime_type: str | None = None) -> tuple[str, FileCategory]:
    """
    Determine MIME type and category from a file name.

    Args:
        file_name: Name used for extension lookup
        mime_type: Optional MIME type override

    Returns:
        Tuple of (mime_type, category)

    Raises:
        UnsupportedFileTypeError: If the extension is not recognized
    """
    ext = Path(file_name).suffix.lower()
    category = _extension_category(ext)
    detected_mime = mime_type or MIME_TYPES.get(ext)

    if category is None or detected_mime is None:
        raise UnsupportedFileTypeError(
            f"Unsupported file type: {ext or file_name}. "
            f"Supported types: {', '.join(MIME_TYPES)}"
        )
    return detected_mime, category


def _extension_category(ext: str) -> FileCategory | None:
    mime = MIME_TYPES.get(ext)
    return MIME_TO_CATEGORY.get(mime) if mime else None


def _build_file_info(
    path: str,
    name: str,
    content: bytes,
    mime_type: str,
    category: FileCategory,
    encoded: str | None = None,
) -> FileInfo:
    if category != FileCategory.TEXT and encoded is None:
        encoded = base64.b64encode(content).decode("ascii")

    return FileInfo(
        path=path,
        name=name,
        category=category,
        mime_type=mime_type,
        size=len(content),
        content=content,
        base64=encoded if category != FileCategory.TEXT else None,
    )


def load_file(file_path: str | Path) -> FileInfo:
    """
    Load a document from disk.

    Raises:
        FileLoadError: If the path does not exist or is not a file
        UnsupportedFileTypeError: If the extension is not recognized
    """
    path = Path(file_path).resolve()

    if not path.exists():
        raise FileLoadError(f"File not found: {path}")
    if not path.is_file():
        raise FileLoadError(f"Path is not a file: {path}")

    mime_type, category = detect_file_type(path.name)
    content = path.read_bytes()

    logger.debug("Loaded %s (%s, %d bytes)", path.name, mime_type, len(content))
    return _build_file_info(str(path), path.name, content, mime_type, category)


def load_file_from_buffer(
    data: bytes,
    file_name: str,
    mime_type: str | None = None,
) -> FileInfo:
    """Load a document from an in-memory buffer."""
    detected_mime, category = detect_file_type(file_name, mime_type)
    return _build_file_info("", file_name, bytes(data), detected_mime, category)


def load_file_from_base64(
    encoded: str,
    file_name: str,
    mime_type: str | None = None,
) -> FileInfo:
    """
    Load a document from a base64 string.

    A data URL prefix ("data:application/pdf;base64,") is stripped.
    """
    detected_mime, category = detect_file_type(file_name, mime_type)

    payload = encoded.split(",", 1)[1] if "," in encoded else encoded
    try:
        content = base64.b64decode(payload)
    except ValueError as e:
        raise FileLoadError(f"Invalid base64 data for {file_name}: {e}") from e

    return _build_file_info("", file_name, content, detected_mime, category, encoded=payload)


def _filename_from_response(url: str, response: requests.Response) -> str:
    disposition = response.headers.get("content-disposition")
    if disposition:
        match = _FILENAME_PATTERN.search(disposition)
        if match:
            name = match.group(1).replace('"', "").replace("'", "").strip()
            if name:
                return name

    return Path(unquote(urlparse(url).path)).name or "download"


def load_file_from_url(url: str, timeout: int = DEFAULT_URL_TIMEOUT) -> FileInfo:
    """
    Download a document over HTTP(S).

    Raises:
        FileLoadError: On network errors or non-2xx responses
        UnsupportedFileTypeError: If neither Content-Type nor extension is recognized
    """
    try:
        response = requests.get(url, timeout=timeout)
    except requests.RequestException as e:
        raise FileLoadError(f"Failed to fetch URL: {e}") from e

    if not response.ok:
        raise FileLoadError(f"Failed to fetch URL: {response.status_code} {response.reason}")

    content_type = response.headers.get("content-type", "").split(";")[0].strip().lower()
    file_name = _filename_from_response(url, response)

    category = MIME_TO_CATEGORY.get(content_type)
    mime_type = content_type
    if category is None:
        ext = Path(file_name).suffix.lower()
        category = _extension_category(ext)
        mime_type = MIME_TYPES.get(ext, "")

    if category is None or not mime_type:
        raise UnsupportedFileTypeError(
            f"Unsupported file type from URL. Content-Type: {content_type}, "
            f"Filename: {file_name}"
        )

    logger.debug("Fetched %s (%s, %d bytes)", url, mime_type, len(response.content))
    return _build_file_info(url, file_name, response.content, mime_type, category)


def save_to_file(file_path: str | Path, content: str | bytes) -> None:
    """
    Write content to disk, creating parent directories and overwriting.

    Raises:
        PersistenceError: If the file cannot be written
    """
    path = Path(file_path).resolve()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, str):
            path.write_text(content, encoding="utf-8")
        else:
            path.write_bytes(content)
    except OSError as e:
        raise PersistenceError(f"Failed to write {path}: {e}") from e

    logger.info("Saved extraction result to %s", path)
