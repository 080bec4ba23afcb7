from abc import ABC, abstractmethod
from typing import List, Optional
from docchat.models.chunk import DocumentChunk, IndexRecord
from docchat.models.document import DocumentRecord, StoredFile
from docchat.models.query import ChatExchange

class VectorIndex(ABC):
    @abstractmethod
    def insert(self, record: IndexRecord) -> None:
        pass

    @abstractmethod
    def query(self, vector: List[float], k: int) -> List[IndexRecord]:
        """Up to k records, most similar first. Empty index -> []."""
        pass

    @abstractmethod
    def remove_by_document(self, document_id: int) -> int:
        """Deletes every record of a document, returns how many were removed."""
        pass

    @abstractmethod
    def __len__(self) -> int:
        pass

    def close(self) -> None:
        pass

class DocumentRepository(ABC):
    # Documents
    @abstractmethod
    def get_document(self, document_id: int) -> Optional[DocumentRecord]:
        pass

    @abstractmethod
    def list_documents(self) -> List[DocumentRecord]:
        """Newest upload first."""
        pass

    @abstractmethod
    def create_document(self, **fields) -> DocumentRecord:
        pass

    @abstractmethod
    def update_document(self, document_id: int, **updates) -> Optional[DocumentRecord]:
        pass

    @abstractmethod
    def delete_document(self, document_id: int) -> bool:
        """Deletes the document and all of its chunks."""
        pass

    # Chunks
    @abstractmethod
    def create_chunk(self, **fields) -> DocumentChunk:
        pass

    @abstractmethod
    def get_chunk(self, chunk_id: int) -> Optional[DocumentChunk]:
        pass

    @abstractmethod
    def delete_chunk(self, chunk_id: int) -> bool:
        pass

    @abstractmethod
    def get_chunks_for_document(self, document_id: int) -> List[DocumentChunk]:
        """Ordered by chunk_index."""
        pass

    # Chat history
    @abstractmethod
    def create_chat_exchange(self, **fields) -> ChatExchange:
        pass

    @abstractmethod
    def list_chat_exchanges(self) -> List[ChatExchange]:
        """Oldest first."""
        pass

    @abstractmethod
    def clear_chat_exchanges(self) -> None:
        pass

class FileStore(ABC):
    @abstractmethod
    def save(self, document_id: int, data: bytes, mime_type: str) -> str:
        pass

    @abstractmethod
    def load(self, document_id: int) -> StoredFile:
        """Raises FileNotFoundError when nothing is stored for the document."""
        pass

    @abstractmethod
    def delete(self, document_id: int) -> None:
        pass
