import logging
from docchat.config.settings import settings, IndexConfig
from docchat.storage.base import VectorIndex
from docchat.storage.memory_index import InMemoryVectorIndex

logger = logging.getLogger(__name__)


def build_vector_index(config: IndexConfig | None = None, dimensions: int | None = None) -> VectorIndex:
    """
    Picks the VectorIndex implementation named by index.backend:
    "memory" (exact linear scan) or "qdrant" (approximate search).
    """
    config = config or settings.index
    backend = config.backend.lower()

    if backend == "memory":
        logger.info("Creating in-memory vector index (linear scan)")
        return InMemoryVectorIndex()

    if backend == "qdrant":
        from docchat.storage.qdrant_store import QdrantVectorIndex

        logger.info(f"Creating Qdrant vector index: {config.collection_name}")
        return QdrantVectorIndex(config, dimensions or settings.embedding.dimensions)

    raise ValueError(f"Invalid index backend: {config.backend}. Must be 'memory' or 'qdrant'.")
