import logging
import threading
from typing import List, Optional, Sequence
import numpy as np
from docchat.models.chunk import IndexRecord
from docchat.storage.base import VectorIndex

logger = logging.getLogger(__name__)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """dot(a, b) / (|a| * |b|); 0.0 when either vector has zero length."""
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.shape != vb.shape:
        raise ValueError(f"Dimension mismatch: {va.shape} vs {vb.shape}")
    denom = float(np.linalg.norm(va)) * float(np.linalg.norm(vb))
    if denom == 0.0:
        return 0.0
    return float(np.dot(va, vb)) / denom


class InMemoryVectorIndex(VectorIndex):
    """
    Append-only list of IndexRecords searched by a full linear scan.
    One lock serialises inserts, removals and queries; a query holds it
    for exactly one scan.
    Fine for tens of thousands of chunks; beyond that use an ANN backend
    (see QdrantVectorIndex).
    """

    def __init__(self):
        self._records: List[IndexRecord] = []
        self._chunk_ids: set[int] = set()
        self._matrix: Optional[np.ndarray] = None
        self._norms: Optional[np.ndarray] = None
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def insert(self, record: IndexRecord) -> None:
        with self._lock:
            if record.chunk_id in self._chunk_ids:
                raise ValueError(f"Chunk {record.chunk_id} is already indexed")
            if self._records and len(record.embedding) != len(self._records[0].embedding):
                raise ValueError(
                    f"Expected {len(self._records[0].embedding)} dimensions, got {len(record.embedding)}"
                )
            self._records.append(record)
            self._chunk_ids.add(record.chunk_id)
            self._matrix = None

    def remove_by_document(self, document_id: int) -> int:
        with self._lock:
            kept = [r for r in self._records if r.document_id != document_id]
            removed = len(self._records) - len(kept)
            if removed:
                self._records = kept
                self._chunk_ids = {r.chunk_id for r in kept}
                self._matrix = None
                logger.info(f"Removed {removed} index records for document {document_id}")
            return removed

    def query(self, vector: List[float], k: int) -> List[IndexRecord]:
        with self._lock:
            if k <= 0 or not self._records:
                return []

            matrix, norms = self._ensure_matrix()
            q = np.asarray(vector, dtype=np.float64)
            if q.shape[0] != matrix.shape[1]:
                raise ValueError(f"Query has {q.shape[0]} dimensions, index has {matrix.shape[1]}")

            denom = norms * float(np.linalg.norm(q))
            dots = matrix @ q
            sims = np.divide(dots, denom, out=np.zeros_like(dots), where=denom != 0)

            # Stable sort: equal scores keep insertion order
            order = np.argsort(-sims, kind="stable")[:k]
            return [self._records[i] for i in order]

    def _ensure_matrix(self) -> tuple[np.ndarray, np.ndarray]:
        if self._matrix is None:
            self._matrix = np.array([r.embedding for r in self._records], dtype=np.float64)
            self._norms = np.linalg.norm(self._matrix, axis=1)
        return self._matrix, self._norms
