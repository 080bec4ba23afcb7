from datetime import datetime
from pydantic import BaseModel, Field

class Source(BaseModel):
    document_name: str
    chunk_index: int

class RetrievalResult(BaseModel):
    contexts: list[str] = Field(default_factory=list)
    sources: list[Source] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.contexts

class ChatExchange(BaseModel):
    id: int
    query: str
    response: str
    sources: list[Source] = Field(default_factory=list)
    timestamp: datetime
