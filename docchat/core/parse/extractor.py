import logging
from typing import Dict, Protocol
from docchat.core.exceptions import UnsupportedFormat
from docchat.core.parse.pdf_parser import PDFParser
from docchat.core.parse.docx_parser import DocxParser

logger = logging.getLogger(__name__)

PLAIN_TEXT = "text/plain"

class FormatParser(Protocol):
    mime_type: str

    def parse(self, data: bytes) -> str: ...

class PlainTextParser:
    mime_type = PLAIN_TEXT

    def parse(self, data: bytes) -> str:
        return data.decode("utf-8", errors="replace")

class TextExtractor:
    """
    Turns raw upload bytes into plain text, dispatching on mime type.
    Supported: text/plain, application/pdf and Word .docx.
    """

    def __init__(self, parsers: list[FormatParser] | None = None):
        parsers = parsers or [PlainTextParser(), PDFParser(), DocxParser()]
        self._parsers: Dict[str, FormatParser] = {p.mime_type: p for p in parsers}

    @property
    def supported_types(self) -> list[str]:
        return list(self._parsers)

    def supports(self, mime_type: str) -> bool:
        return self._normalise(mime_type) in self._parsers

    def extract(self, data: bytes, mime_type: str) -> str:
        """
        Raises UnsupportedFormat for unknown mime types and
        ExtractionFailure when the bytes cannot be read as the claimed type.
        """
        parser = self._parsers.get(self._normalise(mime_type))
        if parser is None:
            raise UnsupportedFormat(mime_type)

        text = parser.parse(data)
        logger.debug(f"Extracted {len(text)} characters from {mime_type} payload")
        return text

    @staticmethod
    def _normalise(mime_type: str) -> str:
        # "text/plain; charset=utf-8" -> "text/plain"
        return (mime_type or "").split(";", 1)[0].strip().lower()
