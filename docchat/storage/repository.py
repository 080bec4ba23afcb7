import itertools
import logging
import threading
from datetime import datetime, timezone
from typing import Dict, List, Optional
from docchat.core.exceptions import InvalidStatusTransition
from docchat.models.chunk import DocumentChunk
from docchat.models.document import DocumentRecord, DocumentStatus, can_transition
from docchat.models.query import ChatExchange
from docchat.storage.base import DocumentRepository

logger = logging.getLogger(__name__)


class InMemoryDocumentRepository(DocumentRepository):
    """
    Process-local document, chunk and chat-history store.
    Ids are auto-incremented per entity; every method takes the same lock.
    Status updates are validated against the document lifecycle.
    """

    def __init__(self):
        self._documents: Dict[int, DocumentRecord] = {}
        self._chunks: Dict[int, DocumentChunk] = {}
        self._exchanges: Dict[int, ChatExchange] = {}
        self._document_ids = itertools.count(1)
        self._chunk_ids = itertools.count(1)
        self._exchange_ids = itertools.count(1)
        self._lock = threading.RLock()

    # Documents
    def get_document(self, document_id: int) -> Optional[DocumentRecord]:
        with self._lock:
            document = self._documents.get(document_id)
            return document.model_copy() if document else None

    def list_documents(self) -> List[DocumentRecord]:
        with self._lock:
            documents = [d.model_copy() for d in self._documents.values()]
        return sorted(documents, key=lambda d: (d.uploaded_at, d.id), reverse=True)

    def create_document(self, **fields) -> DocumentRecord:
        with self._lock:
            document = DocumentRecord(
                id=next(self._document_ids),
                uploaded_at=datetime.now(timezone.utc),
                **fields
            )
            self._documents[document.id] = document
            return document.model_copy()

    def update_document(self, document_id: int, **updates) -> Optional[DocumentRecord]:
        with self._lock:
            document = self._documents.get(document_id)
            if document is None:
                return None

            if "status" in updates:
                target = DocumentStatus(updates["status"])
                if target != document.status and not can_transition(document.status, target):
                    raise InvalidStatusTransition(document_id, document.status.value, target.value)
                updates["status"] = target

            updated = document.model_copy(update=updates)
            self._documents[document_id] = updated
            return updated.model_copy()

    def delete_document(self, document_id: int) -> bool:
        with self._lock:
            removed = self._delete_chunks_for(document_id)
            existed = self._documents.pop(document_id, None) is not None
        if existed:
            logger.info(f"Deleted document {document_id} and {removed} chunks")
        return existed

    def _delete_chunks_for(self, document_id: int) -> int:
        doomed = [cid for cid, c in self._chunks.items() if c.document_id == document_id]
        for cid in doomed:
            del self._chunks[cid]
        return len(doomed)

    # Chunks
    def create_chunk(self, **fields) -> DocumentChunk:
        with self._lock:
            chunk = DocumentChunk(id=next(self._chunk_ids), **fields)
            self._chunks[chunk.id] = chunk
            return chunk.model_copy()

    def get_chunk(self, chunk_id: int) -> Optional[DocumentChunk]:
        with self._lock:
            chunk = self._chunks.get(chunk_id)
            return chunk.model_copy() if chunk else None

    def delete_chunk(self, chunk_id: int) -> bool:
        with self._lock:
            return self._chunks.pop(chunk_id, None) is not None

    def get_chunks_for_document(self, document_id: int) -> List[DocumentChunk]:
        with self._lock:
            chunks = [c.model_copy() for c in self._chunks.values() if c.document_id == document_id]
        return sorted(chunks, key=lambda c: c.chunk_index)

    # Chat history
    def create_chat_exchange(self, **fields) -> ChatExchange:
        with self._lock:
            exchange = ChatExchange(
                id=next(self._exchange_ids),
                timestamp=datetime.now(timezone.utc),
                **fields
            )
            self._exchanges[exchange.id] = exchange
            return exchange

    def list_chat_exchanges(self) -> List[ChatExchange]:
        with self._lock:
            return sorted(self._exchanges.values(), key=lambda e: (e.timestamp, e.id))

    def clear_chat_exchanges(self) -> None:
        with self._lock:
            self._exchanges.clear()
