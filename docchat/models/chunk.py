from pydantic import BaseModel, field_validator

class ChunkMetadata(BaseModel):
    tokens: int                      # rough estimate: ceil(len(content) / 4)
    original_document: str

class DocumentChunk(BaseModel):
    id: int
    document_id: int
    content: str
    embedding: list[float]
    chunk_index: int                 # 0-based, contiguous per document
    metadata: ChunkMetadata | None = None

    @field_validator("content")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("chunk content must not be empty")
        return value

class IndexRecord(BaseModel):
    chunk_id: int
    document_id: int
    chunk_index: int
    embedding: list[float]
