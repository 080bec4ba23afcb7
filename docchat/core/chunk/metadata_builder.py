import math
from docchat.models.chunk import ChunkMetadata
from docchat.models.document import DocumentRecord

class MetadataBuilder:
    """
    Builds the ChunkMetadata attached to each stored fragment.
    """

    CHARS_PER_TOKEN = 4

    def build(self, content: str, document: DocumentRecord) -> ChunkMetadata:
        return ChunkMetadata(
            tokens=self.estimate_tokens(content),
            original_document=document.original_name
        )

    @classmethod
    def estimate_tokens(cls, content: str) -> int:
        # Rough estimate, no tokenizer involved
        return math.ceil(len(content) / cls.CHARS_PER_TOKEN)
