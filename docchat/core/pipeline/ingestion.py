import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional
from docchat.core.parse.extractor import TextExtractor
from docchat.core.chunk.chunker import Chunker
from docchat.core.chunk.metadata_builder import MetadataBuilder
from docchat.core.embed.embedder import Embedder
from docchat.core.exceptions import ChunkEmbeddingFailure, DocumentNotFound, IngestionError, ExtractionFailure
from docchat.models.chunk import IndexRecord
from docchat.models.document import DocumentRecord, DocumentStatus, ProcessingResult
from docchat.storage.base import DocumentRepository, FileStore, VectorIndex

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class ChunkOutcome:
    position: int                            # fragment position from the chunker
    chunk_index: Optional[int] = None        # assigned index when stored
    error: Optional[ChunkEmbeddingFailure] = None

    @property
    def ok(self) -> bool:
        return self.error is None

class IngestionPipeline:
    """
    Orchestrates the ingestion process for one document:
    load bytes -> extract -> chunk -> (embed -> persist -> index) per fragment

    Drives the document through uploading -> processing -> completed | error.
    A failing fragment is logged and skipped; only a document that yields no
    usable text at all ends in the error state.
    """

    def __init__(self,
                 repository: DocumentRepository,
                 file_store: FileStore,
                 vector_index: VectorIndex,
                 embedder: Embedder,
                 extractor: Optional[TextExtractor] = None,
                 chunker: Optional[Chunker] = None,
                 metadata_builder: Optional[MetadataBuilder] = None):
        self.repository = repository
        self.file_store = file_store
        self.vector_index = vector_index
        self.embedder = embedder

        # Initialize components
        self.extractor = extractor or TextExtractor()
        self.chunker = chunker or Chunker()
        self.metadata_builder = metadata_builder or MetadataBuilder()

    def ingest(self, document_id: int) -> ProcessingResult:
        """
        Runs the full ingestion pipeline for a single uploaded document.
        Not safe to run twice concurrently for the same document.
        """
        document = self.repository.get_document(document_id)
        if document is None:
            logger.warning(f"[{document_id}] Ingestion requested for unknown document")
            return ProcessingResult(success=False, chunks_created=0, error=f"Document {document_id} not found")

        if document.status != DocumentStatus.uploading:
            logger.warning(f"[{document_id}] Refusing to ingest document in state '{document.status.value}'")
            return ProcessingResult(
                success=False,
                chunks_created=0,
                error=f"Document {document_id} is '{document.status.value}', expected 'uploading'"
            )

        if self.repository.update_document(document_id, status=DocumentStatus.processing) is None:
            return self._abandon(document_id)
        logger.info(f"[{document_id}] Processing '{document.original_name}' ({document.mime_type})")

        try:
            fragments = self._extract_fragments(document)
        except IngestionError as e:
            logger.error(f"[{document_id}] Ingestion failed: {e}")
            return self._fail(document_id, e)
        except Exception as e:
            logger.exception(f"[{document_id}] Unexpected error while reading document")
            return self._fail(document_id, e)

        outcomes = self._store_fragments(document, fragments)
        if outcomes is None:
            return self._abandon(document_id)
        chunks_created = sum(1 for o in outcomes if o.ok)
        failed = len(outcomes) - chunks_created

        updated = self.repository.update_document(
            document_id,
            status=DocumentStatus.completed,
            chunk_count=chunks_created,
            processed_at=datetime.now(timezone.utc)
        )
        if updated is None:
            # Deleted after the last fragment was stored
            return self._abandon(document_id)
        logger.info(
            f"[{document_id}] Completed: {chunks_created}/{len(fragments)} chunks stored"
            + (f", {failed} skipped" if failed else "")
        )
        return ProcessingResult(success=True, chunks_created=chunks_created)

    def _fail(self, document_id: int, error: Exception) -> ProcessingResult:
        self.repository.update_document(document_id, status=DocumentStatus.error)
        return ProcessingResult(success=False, chunks_created=0, error=str(error))

    def _abandon(self, document_id: int) -> ProcessingResult:
        """
        The document was deleted while being ingested. Anything stored for it
        after the delete cascade ran is removed here.
        """
        removed = self.vector_index.remove_by_document(document_id)
        for chunk in self.repository.get_chunks_for_document(document_id):
            self.repository.delete_chunk(chunk.id)
        logger.warning(f"[{document_id}] Document deleted during ingestion, discarded {removed} index records")
        return ProcessingResult(
            success=False,
            chunks_created=0,
            error=str(DocumentNotFound(document_id))
        )

    def _extract_fragments(self, document: DocumentRecord) -> List[str]:
        try:
            stored = self.file_store.load(document.id)
        except FileNotFoundError as e:
            raise ExtractionFailure(str(e)) from e

        # The document record is authoritative for the declared type
        text = self.extractor.extract(stored.data, document.mime_type or stored.mime_type)
        fragments = self.chunker.chunk(text)
        logger.info(f"[{document.id}] Extracted {len(text)} characters into {len(fragments)} fragments")
        return fragments

    def _store_fragments(self, document: DocumentRecord, fragments: List[str]) -> Optional[List[ChunkOutcome]]:
        """
        Sequential so chunk_index follows fragment order. Indexes are taken
        from the count of stored chunks, keeping them contiguous when a
        fragment is skipped.
        Returns None when the document disappears part way through.
        """
        outcomes = []
        next_index = 0
        for position, fragment in enumerate(fragments):
            if self.repository.get_document(document.id) is None:
                return None
            outcome = self._store_fragment(document, position, fragment, next_index)
            if outcome.ok:
                next_index += 1
            else:
                logger.warning(f"[{document.id}] {outcome.error}", exc_info=outcome.error.__cause__)
            outcomes.append(outcome)
        return outcomes

    def _store_fragment(self, document: DocumentRecord, position: int, fragment: str, chunk_index: int) -> ChunkOutcome:
        try:
            embedding = self.embedder.embed(fragment)
        except Exception as e:
            return self._failed(position, e)

        try:
            chunk = self.repository.create_chunk(
                document_id=document.id,
                content=fragment,
                embedding=embedding,
                chunk_index=chunk_index,
                metadata=self.metadata_builder.build(fragment, document)
            )
        except Exception as e:
            return self._failed(position, e)

        try:
            self.vector_index.insert(IndexRecord(
                chunk_id=chunk.id,
                document_id=document.id,
                chunk_index=chunk_index,
                embedding=embedding
            ))
        except Exception as e:
            # Never leave a stored chunk that retrieval cannot reach
            try:
                self.repository.delete_chunk(chunk.id)
            except Exception:
                logger.exception(f"[{document.id}] Could not remove unindexed chunk {chunk.id}")
            return self._failed(position, e)

        return ChunkOutcome(position=position, chunk_index=chunk_index)

    @staticmethod
    def _failed(position: int, cause: Exception) -> ChunkOutcome:
        error = ChunkEmbeddingFailure(position, str(cause))
        error.__cause__ = cause
        return ChunkOutcome(position=position, error=error)
