"""File storage operations for vault document payloads."""

from pathlib import Path
from uuid import UUID


def get_payload_ref(owner_id: UUID, document_id: UUID) -> str:
    """Payload location relative to the documents directory: one folder per owner."""
    return f"{owner_id}/{document_id}"


def get_payload_file_path(documents_path: str, payload_ref: str) -> Path:
    """Get absolute path to a payload file.

    Raises:
        ValueError: If the reference escapes the documents directory
    """
    base = Path(documents_path).resolve()
    file_path = (base / payload_ref).resolve()
    if not file_path.is_relative_to(base):
        raise ValueError(f"Payload reference outside documents directory: {payload_ref}")
    return file_path


def write_payload_file(documents_path: str, payload_ref: str, content: bytes) -> Path:
    """Write payload bytes to disk and return the absolute path."""
    file_path = get_payload_file_path(documents_path, payload_ref)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_bytes(content)
    return file_path


def delete_payload_file(documents_path: str, payload_ref: str) -> bool:
    """Remove a payload file; returns False when it was already gone."""
    file_path = get_payload_file_path(documents_path, payload_ref)
    if not file_path.exists():
        return False
    file_path.unlink()
    return True
