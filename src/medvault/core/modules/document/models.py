from datetime import datetime
from pathlib import Path
from uuid import UUID

from pydantic import BaseModel, Field

from medvault.core.db import MongoModel
from medvault.utils import now


class Document(MongoModel):
    """Medical document stored in an owner's vault. Immutable once created."""

    owner_id: UUID
    name: str  # Sanitized display name
    file_type: str  # Declared content type (e.g., "application/pdf")
    size: int  # Payload size in bytes
    payload_ref: str  # Payload location relative to the documents directory
    uploaded_at: datetime = Field(default_factory=now)


class DocumentFileInfo(BaseModel):
    """Information about a document payload for download."""

    file_path: Path = Field(..., description="Absolute path to payload on disk")
    filename: str = Field(..., description="Document display name")
    mime_type: str = Field(..., description="MIME type")
