"""Exceptions raised across the ingestion and retrieval pipelines."""


class DocChatError(Exception):
    """Base class for all docchat errors."""

    pass


class IngestionError(DocChatError):
    """Raised when a document cannot yield any usable text."""

    pass


class UnsupportedFormat(IngestionError):
    """Raised when a mime type has no registered extractor."""

    def __init__(self, mime_type: str):
        super().__init__(f"Unsupported file type: {mime_type}")
        self.mime_type = mime_type


class ExtractionFailure(IngestionError):
    """Raised when bytes are malformed for their declared mime type."""

    pass


class ChunkEmbeddingFailure(DocChatError):
    """Raised when a single fragment cannot be embedded or stored."""

    def __init__(self, position: int, reason: str):
        super().__init__(f"Failed to process fragment {position}: {reason}")
        self.position = position


class IndexQueryFailure(DocChatError):
    """Raised when a similarity search fails unexpectedly."""

    pass


class DocumentNotFound(DocChatError, LookupError):
    """Raised when a document id does not resolve."""

    def __init__(self, document_id: int):
        super().__init__(f"Document {document_id} not found")
        self.document_id = document_id


class InvalidStatusTransition(DocChatError):
    """Raised on a document status change outside the lifecycle."""

    def __init__(self, document_id: int, current: str, target: str):
        super().__init__(
            f"Document {document_id} cannot move from '{current}' to '{target}'"
        )
        self.document_id = document_id
        self.current = current
        self.target = target


class InvalidQuery(DocChatError, ValueError):
    """Raised when a chat query is empty."""

    pass


class GenerationError(DocChatError):
    """Raised when the text-generation service cannot produce a response."""

    pass
