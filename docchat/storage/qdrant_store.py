import logging
import threading
from typing import List
from qdrant_client import QdrantClient
from qdrant_client.http import models as rest
from docchat.models.chunk import IndexRecord
from docchat.storage.base import VectorIndex
from docchat.config.settings import IndexConfig

logger = logging.getLogger(__name__)


def _document_filter(document_id: int) -> rest.Filter:
    return rest.Filter(
        must=[rest.FieldCondition(key="document_id", match=rest.MatchValue(value=document_id))]
    )


class QdrantVectorIndex(VectorIndex):
    """
    Implements VectorIndex on Qdrant (embedded local mode or in-memory).
    Approximate search for corpora too large for the linear scan.
    Ties are ordered by Qdrant, not by insertion order, and returned
    embeddings are the unit-normalised vectors Qdrant stores for cosine.
    """

    def __init__(self, config: IndexConfig, dimensions: int):
        self.config = config
        self.collection = config.collection_name
        self.dimensions = dimensions
        if config.qdrant_path:
            self.client = QdrantClient(path=config.qdrant_path)
        else:
            self.client = QdrantClient(location=config.qdrant_location)
        # Local-mode Qdrant is not safe for concurrent writers
        self._lock = threading.RLock()
        self._create_collection_if_missing()

    def _create_collection_if_missing(self):
        if self.client.collection_exists(self.collection):
            return
        logger.info(f"Creating Qdrant collection '{self.collection}' ({self.dimensions} dims, cosine)")
        self.client.create_collection(
            collection_name=self.collection,
            vectors_config=rest.VectorParams(size=self.dimensions, distance=rest.Distance.COSINE)
        )

    def __len__(self) -> int:
        with self._lock:
            return self.client.count(self.collection, exact=True).count

    def insert(self, record: IndexRecord) -> None:
        # chunk_id doubles as the point id
        point = rest.PointStruct(
            id=record.chunk_id,
            vector=record.embedding,
            payload={"document_id": record.document_id, "chunk_index": record.chunk_index}
        )
        with self._lock:
            self.client.upsert(collection_name=self.collection, points=[point])

    def query(self, vector: List[float], k: int) -> List[IndexRecord]:
        if k <= 0:
            return []
        with self._lock:
            hits = self.client.query_points(
                collection_name=self.collection,
                query=vector,
                limit=k,
                with_payload=True,
                with_vectors=True
            ).points

        return [
            IndexRecord(
                chunk_id=int(hit.id),
                document_id=hit.payload["document_id"],
                chunk_index=hit.payload["chunk_index"],
                embedding=list(hit.vector)
            )
            for hit in hits
        ]

    def remove_by_document(self, document_id: int) -> int:
        doc_filter = _document_filter(document_id)
        with self._lock:
            removed = self.client.count(self.collection, count_filter=doc_filter, exact=True).count
            if removed:
                self.client.delete(
                    collection_name=self.collection,
                    points_selector=rest.FilterSelector(filter=doc_filter)
                )
        logger.info(f"Removed {removed} Qdrant points for document {document_id}")
        return removed

    def close(self) -> None:
        self.client.close()
