from typing import Any
from uuid import UUID, uuid4

import structlog
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import PyMongoError

from medvault.core.core import Service
from medvault.core.locks import OwnerLocks
from medvault.core.modules.document.models import Document, DocumentFileInfo
from medvault.core.modules.document.storage import (
    delete_payload_file,
    get_payload_file_path,
    get_payload_ref,
    write_payload_file,
)
from medvault.core.modules.document.utils import normalize_file_type, sanitize_filename
from medvault.core.result import Result
from medvault.errors import NotFoundError, StorageError, ValidationError

logger = structlog.get_logger(__name__)


class DocumentService(Service):
    """Owner-scoped vault document repository.

    Every operation passes the access gate with the caller's vault session
    reference first and only ever touches documents of that owner.
    """

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("vault_documents")
        self._owner_locks = OwnerLocks()

    async def on_start(self) -> None:
        """Create indexes for owner-scoped lookup."""
        await self._collection.create_index([("owner_id", 1), ("uploaded_at", -1)])

    async def list_documents(self, owner_id: UUID, session_ref: str | None) -> Result[list[Document]]:
        """List the owner's documents, newest uploaded_at first."""
        access = await self.core.services.access.check_vault_access(owner_id, session_ref)
        if access.error is not None:
            return Result.failure(access.error)

        cursor = self._collection.find({"owner_id": owner_id}).sort("uploaded_at", -1)
        return Result.success(await Document.list_cursor(cursor))

    async def create_document(
        self, owner_id: UUID, session_ref: str | None, name: str, file_type: str | None, content: bytes
    ) -> Result[Document]:
        """Store a new document: payload on disk first, then its metadata.

        Uploads of one owner are serialized so the count ceiling holds. A payload
        whose metadata could not be inserted is removed again.

        Args:
            owner_id: Owner of the vault
            session_ref: Verified vault session reference
            name: Original filename (will be sanitized)
            file_type: Declared MIME type, octet-stream when missing
            content: Payload bytes, at most max_document_size
        """
        access = await self.core.services.access.check_vault_access(owner_id, session_ref)
        if access.error is not None:
            return Result.failure(access.error)

        config = self.core.config
        if not content:
            return Result.failure(ValidationError("Document is empty"))
        if len(content) > config.max_document_size:
            return Result.failure(
                ValidationError(f"Document exceeds the maximum size of {config.max_document_size} bytes")
            )

        async with self._owner_locks.hold(owner_id):
            count = await self._collection.count_documents({"owner_id": owner_id})
            if count >= config.max_documents_per_owner:
                return Result.failure(
                    ValidationError(f"Vault is full: at most {config.max_documents_per_owner} documents are allowed")
                )
            return await self._store_document(owner_id, name, file_type, content)

    async def _store_document(self, owner_id: UUID, name: str, file_type: str | None, content: bytes) -> Result[Document]:
        documents_path = self.core.config.documents_path
        document_id = uuid4()
        document = Document(
            id=document_id,
            owner_id=owner_id,
            name=sanitize_filename(name),
            file_type=normalize_file_type(file_type),
            size=len(content),
            payload_ref=get_payload_ref(owner_id, document_id),
            uploaded_at=self.core.now(),
        )

        try:
            write_payload_file(documents_path, document.payload_ref, content)
        except OSError:
            logger.exception("document_payload_write_failed", owner_id=owner_id, document_id=document_id)
            return Result.failure(StorageError())

        try:
            await self._collection.insert_one(document.to_mongo())
        except PyMongoError:
            logger.exception("document_metadata_insert_failed", owner_id=owner_id, document_id=document_id)
            delete_payload_file(documents_path, document.payload_ref)
            return Result.failure(StorageError())

        logger.info("document_created", owner_id=owner_id, document_id=document.id, size=document.size)
        return Result.success(document)

    async def delete_document(self, owner_id: UUID, session_ref: str | None, document_id: UUID) -> Result[None]:
        """Delete one of the owner's documents, metadata first, then its payload."""
        access = await self.core.services.access.check_vault_access(owner_id, session_ref)
        if access.error is not None:
            return Result.failure(access.error)

        doc = await self._collection.find_one_and_delete({"_id": document_id, "owner_id": owner_id})
        if doc is None:
            return Result.failure(NotFoundError(f"Document not found: {document_id}"))

        document = Document.model_validate(doc)
        if not delete_payload_file(self.core.config.documents_path, document.payload_ref):
            logger.warning("document_payload_missing", document_id=document_id, payload_ref=document.payload_ref)
        logger.info("document_deleted", owner_id=owner_id, document_id=document_id)
        return Result.success(None)

    async def get_document_file_info(
        self, owner_id: UUID, session_ref: str | None, document_id: UUID
    ) -> Result[DocumentFileInfo]:
        """Locate a document payload for download."""
        access = await self.core.services.access.check_vault_access(owner_id, session_ref)
        if access.error is not None:
            return Result.failure(access.error)

        doc = await self._collection.find_one({"_id": document_id, "owner_id": owner_id})
        if doc is None:
            return Result.failure(NotFoundError(f"Document not found: {document_id}"))

        document = Document.model_validate(doc)
        file_path = get_payload_file_path(self.core.config.documents_path, document.payload_ref)
        if not file_path.exists():
            return Result.failure(NotFoundError(f"Document payload not found: {document_id}"))

        return Result.success(DocumentFileInfo(file_path=file_path, filename=document.name, mime_type=document.file_type))
