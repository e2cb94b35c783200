"""Utility functions for vault document handling."""

import re
from pathlib import Path

DEFAULT_FILE_TYPE = "application/octet-stream"
MIME_TYPE_RE = re.compile(r"^[\w.+-]+/[\w.+-]+$")


def sanitize_filename(filename: str) -> str:
    """Sanitize an uploaded filename for use as a display and download name.

    Strips path components and leading dots, replaces characters outside word
    characters, spaces, dots and hyphens, and limits length to 100 characters
    while keeping the extension.
    """
    # Remove path components to prevent traversal attacks
    filename = Path(filename.replace("\\", "/")).name

    filename = filename.lstrip(".")

    sanitized = re.sub(r"[^\w\s.-]", "_", filename)
    sanitized = re.sub(r"_+", "_", sanitized)
    sanitized = re.sub(r"\s+", " ", sanitized).strip()

    if len(sanitized) > 100:
        parts = sanitized.rsplit(".", 1)
        if len(parts) == 2:
            name, ext = parts
            max_name_len = 96 - len(ext)
            sanitized = f"{name[:max_name_len]}.{ext}" if max_name_len > 0 else f"document.{ext[:90]}"
        else:
            sanitized = sanitized[:100]

    # Nothing meaningful left: only whitespace/underscores/dots/hyphens
    if not sanitized or not re.sub(r"[\s._-]", "", sanitized):
        sanitized = "unnamed_document"

    return sanitized


def normalize_file_type(file_type: str | None) -> str:
    """Lowercase a declared MIME type, falling back to octet-stream when missing or malformed."""
    if not file_type:
        return DEFAULT_FILE_TYPE
    file_type = file_type.split(";", 1)[0].strip().lower()
    if not MIME_TYPE_RE.fullmatch(file_type):
        return DEFAULT_FILE_TYPE
    return file_type

