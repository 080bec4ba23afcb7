import logging
from unittest.mock import MagicMock
import pytest
from create_sample_pdf import create_sample_pdf
from docchat.app import DocChatApp, configure_logging
from docchat.config.settings import AppSettings, IndexConfig, LoggingConfig, StorageConfig
from docchat.models.document import DocumentStatus

logger = logging.getLogger("e2e_test")

HANDBOOK = (
    "Employees receive twenty vacation days every year. "
    "Unused vacation days roll over until the end of March."
)
EXPENSES = "Travel expenses are reimbursed within thirty days of submitting receipts."

@pytest.fixture
def app(tmp_path):
    configure_logging(LoggingConfig(level="DEBUG"))
    config = AppSettings(storage=StorageConfig(uploads_path=str(tmp_path / "uploads")))
    generator = MagicMock()
    generator.generate.side_effect = lambda query, contexts: f"{len(contexts)} contexts for: {query}"

    with DocChatApp(config=config, generator=generator) as app:
        yield app

def test_e2e_flow(app):
    print("=" * 60)
    print("DOCCHAT END-TO-END VERIFICATION")
    print("=" * 60)

    # 1. Upload
    handbook = app.documents.upload("handbook.txt", HANDBOOK.encode("utf-8"), "text/plain")
    expenses = app.documents.upload("expenses.txt", EXPENSES.encode("utf-8"), "text/plain")
    guide = app.documents.upload("guide.pdf", create_sample_pdf(), "application/pdf")
    logger.info("Uploaded 3 documents")

    # 2. Wait for background ingestion
    assert app.worker.wait_all(timeout=60)
    for doc in (handbook, expenses, guide):
        stored = app.documents.get(doc.id)
        print(f"{stored.original_name}: {stored.status.value} ({stored.chunk_count} chunks)")
        assert stored.status == DocumentStatus.completed
        assert stored.chunk_count == 1
    assert len(app.vector_index) == 3

    # 3. Retrieve an exact passage
    result = app.retriever.retrieve(EXPENSES, k=1)
    assert result.contexts == [EXPENSES]
    assert result.sources[0].document_name == "expenses.txt"
    assert result.sources[0].chunk_index == 0

    # 4. Chat
    exchange = app.chat.ask("How many vacation days do I get?")
    print(f"Response: {exchange.response}")
    assert exchange.response == "3 contexts for: How many vacation days do I get?"
    assert {s.document_name for s in exchange.sources} == {"handbook.txt", "expenses.txt", "guide.pdf"}
    assert len(app.chat.history()) == 1

    # 5. Delete
    app.documents.delete(expenses.id)
    assert len(app.vector_index) == 2
    result = app.retriever.retrieve(EXPENSES, k=5)
    assert "expenses.txt" not in {s.document_name for s in result.sources}
    assert [d.id for d in app.documents.list_documents()] == [guide.id, handbook.id]

    print("END-TO-END TEST PASSED")

def test_e2e_unsupported_upload(app):
    doc = app.documents.upload("sheet.csv", b"a,b\n1,2", "text/csv")
    result = app.worker.wait(doc.id, timeout=30)

    assert result.success is False
    assert app.documents.get(doc.id).status == DocumentStatus.error
    # Nothing to retrieve, the chat still answers
    assert app.chat.ask("anything?").response == "0 contexts for: anything?"

def test_e2e_qdrant_backend(tmp_path):
    config = AppSettings(
        storage=StorageConfig(uploads_path=str(tmp_path / "uploads")),
        index=IndexConfig(backend="qdrant", qdrant_location=":memory:", collection_name="e2e_chunks")
    )
    generator = MagicMock()
    generator.generate.return_value = "ok"

    with DocChatApp(config=config, generator=generator) as app:
        doc = app.documents.upload("handbook.txt", HANDBOOK.encode("utf-8"), "text/plain")
        assert app.worker.wait(doc.id, timeout=60).chunks_created == 1

        result = app.retriever.retrieve(HANDBOOK, k=1)
        assert result.contexts == [HANDBOOK]
        assert result.sources[0].document_name == "handbook.txt"

if __name__ == "__main__":
    print("Run with: pytest docchat/tests/test_e2e_flow.py")
