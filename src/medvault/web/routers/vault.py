from uuid import UUID

from fastapi import APIRouter, UploadFile
from fastapi.responses import FileResponse
from pydantic import BaseModel, Field

from medvault.core.modules.document.models import Document
from medvault.core.modules.otp.models import IssueReceipt, VerifiedAccess
from medvault.core.modules.vault_session.models import VaultStatus
from medvault.web.deps import AppDep, AuthTokenDep, VaultSessionDep
from medvault.web.openapi import ErrorResponse

router = APIRouter(tags=["vault"])

LOCKED_RESPONSE = {"model": ErrorResponse, "description": "Vault locked: no valid verified vault session"}
UNAUTHENTICATED_RESPONSE = {"model": ErrorResponse, "description": "Not authenticated"}


class VerifyAccessRequest(BaseModel):
    """One-time code submitted to unlock the vault."""

    code: str = Field(..., description="Six-digit code from the verification email")


@router.post(
    "/vault/access",
    summary="Request vault access",
    description="Email a one-time code to the current user. The code is valid for 10 minutes.",
    operation_id="requestVaultAccess",
    responses={
        200: {"description": "Code sent"},
        401: UNAUTHENTICATED_RESPONSE,
        429: {"model": ErrorResponse, "description": "Too many pending codes"},
        502: {"model": ErrorResponse, "description": "Code could not be sent"},
    },
)
async def request_access(app: AppDep, auth_token: AuthTokenDep) -> IssueReceipt:
    return await app.request_vault_access(auth_token)


@router.post(
    "/vault/access/verify",
    summary="Verify vault access code",
    description=(
        "Exchange a one-time code for a vault session reference. "
        "Send the reference in the `X-Vault-Session` header with every document request."
    ),
    operation_id="verifyVaultAccess",
    responses={
        200: {"description": "Vault unlocked"},
        400: {"model": ErrorResponse, "description": "Code malformed, incorrect or expired"},
        401: UNAUTHENTICATED_RESPONSE,
    },
)
async def verify_access(request: VerifyAccessRequest, app: AppDep, auth_token: AuthTokenDep) -> VerifiedAccess:
    return await app.verify_vault_access(auth_token, request.code)


@router.get(
    "/vault/status",
    summary="Vault status",
    description="Whether the supplied vault session reference currently unlocks the vault.",
    operation_id="getVaultStatus",
    responses={200: {"description": "Vault status"}, 401: UNAUTHENTICATED_RESPONSE},
)
async def get_status(app: AppDep, auth_token: AuthTokenDep, session_ref: VaultSessionDep) -> VaultStatus:
    return await app.get_vault_status(auth_token, session_ref)


@router.get(
    "/vault/documents",
    summary="List vault documents",
    description="List the current user's vault documents, newest first.",
    operation_id="listVaultDocuments",
    responses={200: {"description": "List of documents"}, 401: UNAUTHENTICATED_RESPONSE, 423: LOCKED_RESPONSE},
)
async def list_documents(app: AppDep, auth_token: AuthTokenDep, session_ref: VaultSessionDep) -> list[Document]:
    return await app.list_documents(auth_token, session_ref)


@router.post(
    "/vault/documents",
    summary="Upload vault document",
    description="Upload a document into the vault. Documents are never modified; replace by delete and upload.",
    operation_id="createVaultDocument",
    status_code=201,
    responses={
        201: {"description": "Document stored"},
        400: {"model": ErrorResponse, "description": "Empty, too large, or vault full"},
        401: UNAUTHENTICATED_RESPONSE,
        423: LOCKED_RESPONSE,
    },
)
async def create_document(
    file: UploadFile, app: AppDep, auth_token: AuthTokenDep, session_ref: VaultSessionDep
) -> Document:
    content = await file.read()
    filename = file.filename or "unnamed"
    return await app.create_document(auth_token, session_ref, filename, file.content_type, content)


@router.get(
    "/vault/documents/{document_id}/content",
    summary="Download vault document",
    description="Download the stored payload of a vault document.",
    operation_id="downloadVaultDocument",
    response_model=None,
    responses={
        200: {"description": "Document payload"},
        401: UNAUTHENTICATED_RESPONSE,
        404: {"model": ErrorResponse, "description": "Document not found"},
        423: LOCKED_RESPONSE,
    },
)
async def download_document(
    document_id: UUID, app: AppDep, auth_token: AuthTokenDep, session_ref: VaultSessionDep
) -> FileResponse:
    file_info = await app.get_document_file_info(auth_token, session_ref, document_id)
    return FileResponse(path=file_info.file_path, media_type=file_info.mime_type, filename=file_info.filename)


@router.delete(
    "/vault/documents/{document_id}",
    summary="Delete vault document",
    description="Permanently delete a vault document.",
    operation_id="deleteVaultDocument",
    status_code=204,
    responses={
        204: {"description": "Document deleted"},
        401: UNAUTHENTICATED_RESPONSE,
        404: {"model": ErrorResponse, "description": "Document not found"},
        423: LOCKED_RESPONSE,
    },
)
async def delete_document(
    document_id: UUID, app: AppDep, auth_token: AuthTokenDep, session_ref: VaultSessionDep
) -> None:
    await app.delete_document(auth_token, session_ref, document_id)
