import io
from typing import List
from docx import Document
from docx.table import Table
from docchat.core.exceptions import ExtractionFailure

class DocxParser:
    """
    Extracts the raw text of a Word (.docx) document.
    Paragraphs and table cells are emitted in body order, one per line.
    Formatting, images and headers/footers are dropped.
    """

    mime_type = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

    def parse(self, data: bytes) -> str:
        try:
            doc = Document(io.BytesIO(data))
        except Exception as e:
            raise ExtractionFailure(f"Failed to extract text from DOCX file: {e}") from e

        lines: List[str] = []
        for block in doc.iter_inner_content():
            if isinstance(block, Table):
                lines.extend(self._table_lines(block))
            else:
                lines.append(block.text)

        return "\n".join(lines).strip()

    def _table_lines(self, table: Table) -> List[str]:
        lines = []
        for row in table.rows:
            for cell in row.cells:
                lines.extend(p.text for p in cell.paragraphs)
        return lines
