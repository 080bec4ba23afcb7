from datetime import datetime
from enum import Enum
from pydantic import BaseModel

class DocumentStatus(str, Enum):
    uploading = "uploading"
    processing = "processing"
    completed = "completed"
    error = "error"

# uploading -> processing -> completed | error; terminal states have no exits
ALLOWED_TRANSITIONS: dict[DocumentStatus, set[DocumentStatus]] = {
    DocumentStatus.uploading: {DocumentStatus.processing},
    DocumentStatus.processing: {DocumentStatus.completed, DocumentStatus.error},
    DocumentStatus.completed: set(),
    DocumentStatus.error: set(),
}

def can_transition(current: DocumentStatus, target: DocumentStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]

class DocumentRecord(BaseModel):
    id: int
    name: str
    original_name: str
    mime_type: str
    file_size: int = 0
    status: DocumentStatus = DocumentStatus.uploading
    chunk_count: int = 0
    uploaded_at: datetime
    processed_at: datetime | None = None

class ProcessingResult(BaseModel):
    success: bool
    chunks_created: int
    error: str | None = None

class StoredFile(BaseModel):
    data: bytes
    mime_type: str
