import pytest
from docchat.config.settings import ChunkingConfig, IngestionConfig
from docchat.core.chunk.chunker import Chunker
from docchat.core.embed.embedder import HashingEmbedder
from docchat.core.pipeline.ingestion import IngestionPipeline
from docchat.core.pipeline.worker import IngestionWorker
from docchat.storage.file_store import LocalFileStore
from docchat.storage.memory_index import InMemoryVectorIndex
from docchat.storage.repository import InMemoryDocumentRepository

@pytest.fixture
def repository():
    return InMemoryDocumentRepository()

@pytest.fixture
def file_store(tmp_path):
    return LocalFileStore(str(tmp_path / "uploads"))

@pytest.fixture
def vector_index():
    return InMemoryVectorIndex()

@pytest.fixture(scope="session")
def embedder():
    return HashingEmbedder(dimensions=1536)

@pytest.fixture
def pipeline(repository, file_store, vector_index, embedder):
    return IngestionPipeline(
        repository=repository,
        file_store=file_store,
        vector_index=vector_index,
        embedder=embedder,
        chunker=Chunker(ChunkingConfig(chunk_size=1000, chunk_overlap=200))
    )

@pytest.fixture
def worker(pipeline):
    w = IngestionWorker(pipeline, IngestionConfig(max_workers=4))
    yield w
    w.shutdown(wait=True)
