import logging
from typing import List, Optional
from docchat.core.exceptions import InvalidQuery
from docchat.core.generate.llm_client import TextGenerator
from docchat.core.retrieve.retriever import RetrievalOrchestrator
from docchat.models.query import ChatExchange
from docchat.storage.base import DocumentRepository

logger = logging.getLogger(__name__)


class ChatService:
    """
    Answers a question against the uploaded documents and records the
    exchange with its provenance.
    Sequence: validate -> retrieve -> generate -> persist
    """

    def __init__(self,
                 retriever: RetrievalOrchestrator,
                 generator: TextGenerator,
                 repository: DocumentRepository):
        self.retriever = retriever
        self.generator = generator
        self.repository = repository

    def ask(self, query: str, k: Optional[int] = None) -> ChatExchange:
        if not isinstance(query, str) or not query.strip():
            raise InvalidQuery("Query is required")
        query = query.strip()

        logger.info(f"Answering query: '{query}'")
        retrieval = self.retriever.retrieve(query, k)

        # GenerationError propagates; nothing is recorded for a failed answer
        response = self.generator.generate(query, retrieval.contexts)

        return self.repository.create_chat_exchange(
            query=query,
            response=response,
            sources=retrieval.sources
        )

    def history(self) -> List[ChatExchange]:
        return self.repository.list_chat_exchanges()

    def clear_history(self) -> None:
        self.repository.clear_chat_exchanges()
