import logging
from typing import List
from docchat.core.exceptions import DocumentNotFound
from docchat.core.pipeline.worker import IngestionWorker
from docchat.models.document import DocumentRecord, DocumentStatus
from docchat.storage.base import DocumentRepository, FileStore, VectorIndex

logger = logging.getLogger(__name__)


class DocumentService:
    """
    Upload, listing and deletion of documents.
    Uploads return immediately in the 'uploading' state; ingestion runs on
    the worker pool.
    """

    def __init__(self,
                 repository: DocumentRepository,
                 file_store: FileStore,
                 vector_index: VectorIndex,
                 worker: IngestionWorker):
        self.repository = repository
        self.file_store = file_store
        self.vector_index = vector_index
        self.worker = worker

    def upload(self, filename: str, data: bytes, mime_type: str) -> DocumentRecord:
        document = self.repository.create_document(
            name=filename,
            original_name=filename,
            mime_type=mime_type,
            file_size=len(data),
            status=DocumentStatus.uploading
        )
        try:
            self.file_store.save(document.id, data, mime_type)
        except Exception:
            logger.error(f"Could not store upload for document {document.id}, discarding record")
            self.repository.delete_document(document.id)
            raise
        logger.info(f"Uploaded '{filename}' as document {document.id} ({len(data)} bytes)")

        self.worker.submit(document.id)
        return document

    def get(self, document_id: int) -> DocumentRecord:
        document = self.repository.get_document(document_id)
        if document is None:
            raise DocumentNotFound(document_id)
        return document

    def list_documents(self) -> List[DocumentRecord]:
        return self.repository.list_documents()

    def delete(self, document_id: int) -> None:
        """
        Removes a document everywhere:
        1. index records, so retrieval stops returning its chunks
        2. repository record and chunks
        3. stored upload bytes
        4. the worker's future for it
        An ingestion still running notices the missing record and discards
        whatever it stores afterwards.
        """
        self.get(document_id)
        logger.info(f"Deleting document {document_id}")

        self.vector_index.remove_by_document(document_id)
        self.repository.delete_document(document_id)
        self.file_store.delete(document_id)
        self.worker.forget(document_id)
