from datetime import datetime

from pydantic import BaseModel, Field


class IssueReceipt(BaseModel):
    """Outcome of a successful access request. The code itself is never included outside debug mode."""

    expires_at: datetime = Field(..., description="When the issued code stops being accepted")
    code: str | None = Field(None, description="Issued code, only present when debug echo is enabled")


class VerifiedAccess(BaseModel):
    """Reference to a verified vault session, passed with every document call."""

    session_ref: str = Field(..., description="Vault session reference for document operations")
    expires_at: datetime = Field(..., description="When the vault locks again")
