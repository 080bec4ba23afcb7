import logging
import math
import re
from abc import ABC, abstractmethod
from collections import Counter
from typing import Dict, List
import numpy as np
from docchat.config.settings import settings, EmbeddingConfig

logger = logging.getLogger(__name__)

_MASK_32 = 0xFFFFFFFF
# ASCII word class: anything else (accents included) becomes a separator
_NON_WORD = re.compile(r"[^\w\s]", re.ASCII)


def _utf16_units(text: str) -> List[int]:
    raw = text.encode("utf-16-le", errors="surrogatepass")
    return [int.from_bytes(raw[i:i + 2], "little") for i in range(0, len(raw), 2)]


def _utf16_length(text: str) -> int:
    return len(text.encode("utf-16-le", errors="surrogatepass")) // 2


def _to_signed_32(value: int) -> int:
    return value - (1 << 32) if value >= (1 << 31) else value


def _rolling_hash_unsigned(text: str) -> int:
    h = 0
    for unit in _utf16_units(text):
        h = (h * 31 + unit) & _MASK_32
    return h


def simple_hash(text: str) -> int:
    """
    Polynomial rolling hash (multiplier 31) over UTF-16 code units,
    wrapped to a signed 32-bit integer. Stable across processes.
    """
    return _to_signed_32(_rolling_hash_unsigned(text))


class Embedder(ABC):
    """
    Maps text to a fixed-length vector. Callers only depend on this interface,
    so a learned model can replace the hashing fingerprint.
    """

    @property
    @abstractmethod
    def dimensions(self) -> int:
        pass

    @abstractmethod
    def embed(self, text: str) -> List[float]:
        pass

    def embed_query(self, query: str) -> List[float]:
        """Query-side embedding; symmetric embedders reuse embed()."""
        return self.embed(query)


class HashingEmbedder(Embedder):
    """
    Deterministic bag-of-words fingerprint built from sine/cosine features of
    word hashes. It is self-consistent (same text, same vector, bit for bit)
    but carries no semantic understanding: texts only score as similar when
    they share words of three or more characters.
    """

    def __init__(self, dimensions: int = 1536):
        if dimensions <= 0:
            raise ValueError("dimensions must be positive")
        self._dimensions = dimensions
        self._idx = np.arange(dimensions, dtype=np.float64)
        self._idx_int = np.arange(dimensions, dtype=np.int64)
        self._suffix_pow, self._suffix_hash = self._precompute_suffixes(dimensions)

    @property
    def dimensions(self) -> int:
        return self._dimensions

    @staticmethod
    def _precompute_suffixes(dimensions: int):
        """
        hash(word + "_" + str(i)) == hash(word) * 31**len(suffix) + hash(suffix)
        (mod 2**32), so the per-dimension part is computed once.
        """
        powers = np.empty(dimensions, dtype=np.uint64)
        hashes = np.empty(dimensions, dtype=np.uint64)
        for i in range(dimensions):
            suffix = f"_{i}"
            powers[i] = pow(31, len(suffix), 1 << 32)
            hashes[i] = _rolling_hash_unsigned(suffix)
        return powers, hashes

    @staticmethod
    def tokenize(text: str) -> List[str]:
        normalised = _NON_WORD.sub(" ", text.lower())
        return [w for w in normalised.split() if len(w) > 2]

    def _dimension_hashes(self, word_hash: int) -> np.ndarray:
        unsigned = np.uint64(word_hash & _MASK_32)
        combined = (unsigned * self._suffix_pow + self._suffix_hash) & np.uint64(_MASK_32)
        signed = combined.astype(np.int64)
        return np.where(signed >= (1 << 31), signed - (1 << 32), signed)

    def embed(self, text: str) -> List[float]:
        words = self.tokenize(text)
        # Counter keeps first-occurrence order, which fixes the summation order
        word_freq: Dict[str, int] = Counter(words)

        idx = self._idx
        value = np.zeros(self._dimensions, dtype=np.float64)

        for word, freq in word_freq.items():
            word_hash = simple_hash(word)
            dim_hash = self._dimension_hashes(word_hash)

            value += np.sin(word_hash + idx) * freq * 0.1
            value += np.cos(dim_hash.astype(np.float64)) * math.log(freq + 1) * 0.05
            value += (len(word) / 10) * np.sin((word_hash * self._idx_int).astype(np.float64)) * 0.02

        # Text-level features
        text_length = _utf16_length(text)
        value += np.sin(text_length + idx) * 0.001
        value += np.cos(len(words) + idx) * 0.002

        magnitude = math.sqrt(float(np.dot(value, value)))
        if magnitude > 0:
            return (value / magnitude).tolist()

        logger.debug("Zero-magnitude embedding, using fallback vector")
        return (np.sin(idx) * 0.01).tolist()


def build_embedder(config: EmbeddingConfig | None = None) -> Embedder:
    config = config or settings.embedding
    if config.provider == "hashing":
        return HashingEmbedder(dimensions=config.dimensions)
    raise ValueError(f"Unknown embedding provider: {config.provider}")
