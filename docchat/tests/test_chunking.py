import pytest
from pydantic import ValidationError
from docchat.config.settings import ChunkingConfig
from docchat.core.chunk.chunker import Chunker
from docchat.core.chunk.metadata_builder import MetadataBuilder
from docchat.models.document import DocumentRecord
from datetime import datetime, timezone

def make_words(n: int) -> list[str]:
    return [f"w{i}" for i in range(n)]

def test_chunking_flow():
    print("--- Testing Chunking Flow ---")
    words = make_words(1500)
    chunker = Chunker(ChunkingConfig(chunk_size=1000, chunk_overlap=200))

    fragments = chunker.chunk(" ".join(words))
    print(f"Created {len(fragments)} fragments")

    assert len(fragments) == 2
    assert fragments[0] == " ".join(words[0:1000])
    assert fragments[1] == " ".join(words[800:1500])

def test_overlap_is_shared():
    words = make_words(2000)
    fragments = Chunker(ChunkingConfig(chunk_size=1000, chunk_overlap=200)).chunk(" ".join(words))

    assert len(fragments) == 3
    for prev, nxt in zip(fragments, fragments[1:]):
        assert prev.split()[-200:] == nxt.split()[:200]

def test_exact_window_still_emits_tail():
    # Starts at 0 and 800; the second window is covered by the first
    fragments = Chunker(ChunkingConfig(chunk_size=1000, chunk_overlap=200)).chunk(" ".join(make_words(1000)))
    assert len(fragments) == 2
    assert fragments[1] == " ".join(make_words(1000)[800:])

def test_empty_and_whitespace_text():
    chunker = Chunker(ChunkingConfig())
    assert chunker.chunk("") == []
    assert chunker.chunk("   \n\t  ") == []

def test_short_text_single_fragment():
    fragments = Chunker(ChunkingConfig()).chunk("  a short\n\nnote   about   things ")
    assert fragments == ["a short note about things"]

def test_whitespace_is_normalised():
    fragments = Chunker(ChunkingConfig(chunk_size=3, chunk_overlap=1)).chunk("a\tb\nc  d e")
    assert fragments == ["a b c", "c d e", "e"]

def test_every_word_is_covered():
    words = make_words(2345)
    fragments = Chunker(ChunkingConfig(chunk_size=100, chunk_overlap=30)).chunk(" ".join(words))
    covered = set()
    for fragment in fragments:
        covered.update(fragment.split())
    assert covered == set(words)

def test_invalid_config():
    with pytest.raises(ValidationError):
        ChunkingConfig(chunk_size=100, chunk_overlap=100)
    with pytest.raises(ValidationError):
        ChunkingConfig(chunk_size=0, chunk_overlap=0)
    with pytest.raises(ValidationError):
        ChunkingConfig(chunk_size=10, chunk_overlap=-1)

def test_metadata_builder():
    document = DocumentRecord(
        id=1,
        name="handbook.txt",
        original_name="handbook.txt",
        mime_type="text/plain",
        uploaded_at=datetime.now(timezone.utc)
    )
    metadata = MetadataBuilder().build("x" * 10, document)
    assert metadata.tokens == 3
    assert metadata.original_document == "handbook.txt"
    assert MetadataBuilder.estimate_tokens("abcd") == 1

if __name__ == "__main__":
    test_chunking_flow()
