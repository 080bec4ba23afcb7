import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait as wait_futures
from typing import Dict, Optional
from docchat.config.settings import settings, IngestionConfig
from docchat.core.pipeline.ingestion import IngestionPipeline
from docchat.models.document import ProcessingResult

logger = logging.getLogger(__name__)


class IngestionWorker:
    """
    Runs IngestionPipeline.ingest on a thread pool.
    Each submitted document gets a Future so callers (and tests) can wait for
    the outcome instead of polling document status.
    """

    def __init__(self, pipeline: IngestionPipeline, config: Optional[IngestionConfig] = None):
        self.pipeline = pipeline
        self.config = config or settings.ingestion
        self._executor = ThreadPoolExecutor(
            max_workers=self.config.max_workers,
            thread_name_prefix="ingest"
        )
        self._futures: Dict[int, Future] = {}
        self._lock = threading.Lock()

    def submit(self, document_id: int) -> Future:
        with self._lock:
            future = self._executor.submit(self._run, document_id)
            self._futures[document_id] = future
        logger.info(f"Queued document {document_id} for ingestion")
        return future

    def _run(self, document_id: int) -> ProcessingResult:
        try:
            return self.pipeline.ingest(document_id)
        except Exception:
            logger.exception(f"Background ingestion crashed for document {document_id}")
            raise

    def future_for(self, document_id: int) -> Optional[Future]:
        with self._lock:
            return self._futures.get(document_id)

    def forget(self, document_id: int) -> Optional[Future]:
        """Drops the tracked future for a document; a running ingestion is not interrupted."""
        with self._lock:
            return self._futures.pop(document_id, None)

    def pending_count(self) -> int:
        with self._lock:
            return len(self._futures)

    def wait(self, document_id: int, timeout: Optional[float] = None) -> ProcessingResult:
        """
        Blocks until the document's ingestion finishes.
        Raises KeyError if it was never submitted, TimeoutError on timeout.
        """
        future = self.future_for(document_id)
        if future is None:
            raise KeyError(f"Document {document_id} was never submitted")
        return future.result(timeout=timeout)

    def wait_all(self, timeout: Optional[float] = None) -> bool:
        """True when every submitted ingestion finished within the timeout."""
        with self._lock:
            pending = list(self._futures.values())
        _, not_done = wait_futures(pending, timeout=timeout)
        return not not_done

    def shutdown(self, wait: bool = True) -> None:
        logger.info("Shutting down ingestion worker")
        self._executor.shutdown(wait=wait)
