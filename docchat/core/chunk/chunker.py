from typing import List, Tuple
from docchat.config.settings import settings, ChunkingConfig

class Chunker:
    """
    Implements fixed-size word-window chunking.
    - Splits text on whitespace.
    - Emits windows of chunk_size words, each starting chunk_overlap words
      before the previous one ended.
    - Windows keep starting until the start offset passes the end of the text,
      so the last fragment may be shorter (or fully covered by the previous one).
    """

    def __init__(self, config: ChunkingConfig | None = None):
        self.config = config or settings.chunking

    def chunk(self, text: str) -> List[str]:
        """
        Main entry point for chunking extracted document text.
        """
        words = text.split()
        fragments = []
        for start, end in self._get_word_ranges(len(words)):
            fragment = " ".join(words[start:end]).strip()
            if fragment:
                fragments.append(fragment)
        return fragments

    def _get_word_ranges(self, total_words: int) -> List[Tuple[int, int]]:
        """Helper to compute word index ranges (start, end)."""
        size = self.config.chunk_size
        return [
            (start, min(start + size, total_words))
            for start in range(0, total_words, self.config.stride)
        ]
