import logging
from typing import Optional
from docchat.config.settings import settings as default_settings, AppSettings, LoggingConfig
from docchat.core.chunk.chunker import Chunker
from docchat.core.embed.embedder import Embedder, build_embedder
from docchat.core.generate.llm_client import LLMClient, TextGenerator
from docchat.core.pipeline.chat import ChatService
from docchat.core.pipeline.documents import DocumentService
from docchat.core.pipeline.ingestion import IngestionPipeline
from docchat.core.pipeline.worker import IngestionWorker
from docchat.core.retrieve.retriever import RetrievalOrchestrator
from docchat.storage.base import DocumentRepository, FileStore, VectorIndex
from docchat.storage.file_store import LocalFileStore
from docchat.storage.index_factory import build_vector_index
from docchat.storage.repository import InMemoryDocumentRepository

logger = logging.getLogger(__name__)


def configure_logging(config: Optional[LoggingConfig] = None) -> None:
    config = config or default_settings.logging
    logging.basicConfig(level=config.level.upper(), format=config.format)


class DocChatApp:
    """
    Builds every store, pipeline and service once for the process.
    Any collaborator can be injected (tests pass in-memory or mocked ones).

        with DocChatApp() as app:
            doc = app.documents.upload("notes.txt", data, "text/plain")
            app.worker.wait(doc.id)
            app.chat.ask("What do the notes say?")
    """

    def __init__(self,
                 config: Optional[AppSettings] = None,
                 repository: Optional[DocumentRepository] = None,
                 file_store: Optional[FileStore] = None,
                 vector_index: Optional[VectorIndex] = None,
                 embedder: Optional[Embedder] = None,
                 generator: Optional[TextGenerator] = None):
        self.config = config or default_settings
        logger.info("Initializing docchat storage and pipelines...")

        # 1. Storage
        self.repository = repository or InMemoryDocumentRepository()
        self.file_store = file_store or LocalFileStore(self.config.storage.uploads_path)
        self.embedder = embedder or build_embedder(self.config.embedding)
        # An empty index is falsy (__len__), so compare against None
        if vector_index is None:
            vector_index = build_vector_index(self.config.index, self.embedder.dimensions)
        self.vector_index = vector_index

        # 2. Pipelines
        self.ingestion = IngestionPipeline(
            repository=self.repository,
            file_store=self.file_store,
            vector_index=self.vector_index,
            embedder=self.embedder,
            chunker=Chunker(self.config.chunking)
        )
        self.worker = IngestionWorker(self.ingestion, self.config.ingestion)
        self.retriever = RetrievalOrchestrator(
            repository=self.repository,
            vector_index=self.vector_index,
            embedder=self.embedder,
            config=self.config.retrieval
        )

        # 3. Services
        self.generator = generator or LLMClient(self.config.llm, self.config.openrouter_api_key)
        self.documents = DocumentService(self.repository, self.file_store, self.vector_index, self.worker)
        self.chat = ChatService(self.retriever, self.generator, self.repository)

        self._closed = False
        logger.info("Initialization complete. All systems ready.")

    def close(self, wait: bool = True) -> None:
        if self._closed:
            return
        logger.info("Shutting down docchat...")
        self.worker.shutdown(wait=wait)
        self.vector_index.close()
        self._closed = True

    def __enter__(self) -> "DocChatApp":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
