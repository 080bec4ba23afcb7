import fitz  # PyMuPDF
from typing import List
from docchat.core.exceptions import ExtractionFailure

class PDFParser:
    """
    Extracts plain text from PDF bytes with PyMuPDF.
    Words keep their order within a page; pages are separated by a newline.
    No attempt is made at column or layout reconstruction.
    """

    mime_type = "application/pdf"

    def parse(self, data: bytes) -> str:
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except Exception as e:
            raise ExtractionFailure(f"Failed to extract text from PDF file: {e}") from e

        try:
            # MuPDF repairs what it can; a repaired file with no pages is still unreadable
            if doc.page_count == 0:
                raise ExtractionFailure("Failed to extract text from PDF file: no pages found")
            pages = [self._page_text(page) for page in doc]
        except ExtractionFailure:
            raise
        except Exception as e:
            raise ExtractionFailure(f"Failed to extract text from PDF file: {e}") from e
        finally:
            doc.close()

        return "\n".join(pages).strip()

    def _page_text(self, page) -> str:
        # get_text("words") -> (x0, y0, x1, y1, word, block_no, line_no, word_no)
        words: List[str] = [w[4] for w in page.get_text("words")]
        return " ".join(words)
