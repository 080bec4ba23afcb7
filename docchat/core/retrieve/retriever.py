import logging
from typing import Optional
from docchat.config.settings import settings, RetrievalConfig
from docchat.core.embed.embedder import Embedder
from docchat.core.exceptions import DocumentNotFound, IndexQueryFailure
from docchat.models.query import RetrievalResult, Source
from docchat.storage.base import DocumentRepository, VectorIndex

logger = logging.getLogger(__name__)


class RetrievalOrchestrator:
    """
    Query flow: embed -> top-k similarity search -> provenance join.
    Never raises: a failed search yields an empty RetrievalResult so the
    generation step always receives a well-formed context set.
    """

    def __init__(self,
                 repository: DocumentRepository,
                 vector_index: VectorIndex,
                 embedder: Embedder,
                 config: Optional[RetrievalConfig] = None):
        self.repository = repository
        self.vector_index = vector_index
        self.embedder = embedder
        self.config = config or settings.retrieval

    def retrieve(self, query: str, k: Optional[int] = None) -> RetrievalResult:
        k = self.config.top_k if k is None else k

        try:
            records = self._search(query, k)
        except IndexQueryFailure as e:
            logger.error(f"{e}; returning empty context", exc_info=e.__cause__)
            return RetrievalResult()

        result = RetrievalResult()
        for record in records:
            try:
                content, document_name = self._resolve(record.chunk_id, record.document_id)
            except DocumentNotFound as e:
                # Typically deleted while the query was running
                logger.debug(f"Skipping chunk {record.chunk_id}: {e}")
                continue
            except Exception:
                logger.warning(f"Lookup failed for chunk {record.chunk_id}, skipping", exc_info=True)
                continue
            result.contexts.append(content)
            result.sources.append(Source(document_name=document_name, chunk_index=record.chunk_index))

        logger.info(f"Retrieved {len(result.contexts)} contexts for query ({len(records)} index hits)")
        return result

    def _search(self, query: str, k: int):
        try:
            query_vector = self.embedder.embed_query(query)
            return self.vector_index.query(query_vector, k)
        except Exception as e:
            raise IndexQueryFailure(f"Similarity search failed: {e}") from e

    def _resolve(self, chunk_id: int, document_id: int) -> tuple[str, str]:
        document = self.repository.get_document(document_id)
        chunk = self.repository.get_chunk(chunk_id)
        if document is None or chunk is None:
            raise DocumentNotFound(document_id)
        return chunk.content, document.original_name
