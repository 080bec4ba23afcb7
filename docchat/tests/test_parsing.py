import pytest
from create_sample_pdf import create_sample_pdf, create_sample_docx
from docchat.core.exceptions import ExtractionFailure, IngestionError, UnsupportedFormat
from docchat.core.parse.docx_parser import DocxParser
from docchat.core.parse.extractor import TextExtractor
from docchat.core.parse.pdf_parser import PDFParser

DOCX = DocxParser.mime_type

def test_plain_text_extraction():
    extractor = TextExtractor()
    text = extractor.extract("hello world\nsecond line".encode("utf-8"), "text/plain")
    assert text == "hello world\nsecond line"

def test_plain_text_with_charset_parameter():
    extractor = TextExtractor()
    assert extractor.supports("text/plain; charset=utf-8")
    assert extractor.supports("TEXT/PLAIN")
    assert extractor.extract(b"caf\xc3\xa9", "text/plain; charset=utf-8") == "café"

def test_plain_text_invalid_utf8_is_replaced():
    text = TextExtractor().extract(b"ok \xff\xfe done", "text/plain")
    assert text.startswith("ok ")
    assert text.endswith(" done")
    assert "�" in text

def test_pdf_extraction():
    print("Testing PDF extraction...")
    text = TextExtractor().extract(create_sample_pdf(), "application/pdf")
    print(f"Extracted: {text!r}")

    assert "Introduction to retrieval" in text
    assert "twenty vacation days" in text
    # One line per page
    assert len(text.split("\n")) == 2
    assert text.index("Introduction") < text.index("Vacation")

def test_docx_extraction_keeps_body_order():
    print("Testing DOCX extraction...")
    text = TextExtractor().extract(create_sample_docx(), DOCX)
    lines = text.split("\n")

    assert lines[0] == "Quarterly onboarding guide"
    assert "New hires meet their mentor during the first week." in lines
    assert lines.index("Laptop") < lines.index("Badge") < lines.index("Questions go to the people team.")

def test_unsupported_type():
    extractor = TextExtractor()
    with pytest.raises(UnsupportedFormat) as exc_info:
        extractor.extract(b"<html></html>", "text/html")
    assert str(exc_info.value) == "Unsupported file type: text/html"
    assert exc_info.value.mime_type == "text/html"
    assert isinstance(exc_info.value, IngestionError)

def test_corrupt_pdf():
    with pytest.raises(ExtractionFailure):
        PDFParser().parse(b"this is definitely not a pdf")

def test_corrupt_docx():
    with pytest.raises(ExtractionFailure):
        DocxParser().parse(b"PK\x03\x04 truncated zip")

def test_supported_types():
    types = TextExtractor().supported_types
    assert set(types) == {"text/plain", "application/pdf", DOCX}

def test_custom_parser_registration():
    class Upper:
        mime_type = "text/markdown"

        def parse(self, data: bytes) -> str:
            return data.decode("utf-8").upper()

    extractor = TextExtractor(parsers=[Upper()])
    assert extractor.extract(b"# title", "text/markdown") == "# TITLE"
    assert not extractor.supports("text/plain")

if __name__ == "__main__":
    test_pdf_extraction()
    test_docx_extraction_keeps_body_order()
    print("Parsing tests PASSED")
