# pdfgate/extractor.py
"""
High-level document access: one gateway, one document, exceptions instead
of result codes.
"""

import logging
from enum import Enum
from typing import List, Optional

import numpy as np

from pdfgate import renderer, text, xfa
from pdfgate.bridge import ARGUMENT_ERROR, ENGINE_ERROR, OK, DiagnosticBuffer
from pdfgate.config import DEFAULT_DPI, DIAGNOSTIC_CAPACITY, MAX_DPI, MIN_DPI, PAGE_SEPARATOR
from pdfgate.document import count_pages, drop_document, open_document
from pdfgate.errors import InputError, InternalError, PdfError
from pdfgate.gateway import drop_context, new_context
from pdfgate.ocr import PageOCR
from pdfgate.utils import parse_page_range
from pdfgate.xfa_json import xfa_xml_to_json

logging.basicConfig(level=logging.INFO)


class ExtractionMode(str, Enum):
    HYBRID = "hybrid"  # MuPDF text, OCR for pages without text
    TEXT = "text"
    OCR = "ocr"


class PDFExtractor:

    def __init__(self, pdf_path: str, ocr: Optional[PageOCR] = None,
                 diag_capacity: int = DIAGNOSTIC_CAPACITY):
        self.pdf_path = str(pdf_path)
        self.diag_capacity = diag_capacity
        self._ocr = ocr
        self.doc = None
        self.gateway = new_context()
        if self.gateway is None:
            raise InternalError("Failed to create MuPDF context")
        diag = self._diag()
        code, self.doc = open_document(self.gateway, pdf_path, diag)
        if code != OK:
            drop_context(self.gateway)
            self.gateway = None
            self._fail(code, f"Failed to open document '{self.pdf_path}'", diag)

    def _diag(self) -> DiagnosticBuffer:
        return DiagnosticBuffer(self.diag_capacity)

    @staticmethod
    def _fail(code: int, what: str, diag: DiagnosticBuffer):
        if code == ARGUMENT_ERROR:
            logging.error(f"{what}: missing or closed handle")
            raise InputError(f"{what}: missing or closed handle")
        reason = diag.message or "engine error (no diagnostic)"
        logging.error(f"{what}: {reason}")
        raise PdfError(f"{what}: {reason}")

    def _ensure_open(self, what: str):
        if self.gateway is None or self.doc is None:
            logging.error(f"{what}: extractor is closed")
            raise InputError(f"{what}: extractor is closed")

    @property
    def ocr(self) -> PageOCR:
        if self._ocr is None:
            self._ocr = PageOCR()
        return self._ocr

    def page_count(self) -> int:
        diag = self._diag()
        code, count = count_pages(self.gateway, self.doc, diag)
        if code != OK:
            self._fail(code, "Failed to count pages", diag)
        return count

    def render_page(self, page_num: int, dpi: int = DEFAULT_DPI) -> np.ndarray:
        """Render a zero-based page to an RGB uint8 array of shape (h, w, 3)."""
        if not MIN_DPI <= dpi <= MAX_DPI:
            raise InputError(f"DPI must be between {MIN_DPI} and {MAX_DPI}. Got: {dpi}")
        diag = self._diag()
        code, pix = renderer.render_page(self.gateway, self.doc, page_num, dpi, diag)
        if code != OK:
            self._fail(code, f"Failed to render page {page_num}", diag)
        try:
            return pix.to_ndarray()
        finally:
            renderer.drop_pixmap(self.gateway, pix)

    def extract_text(self, page_num: int) -> str:
        self._ensure_open(f"Failed to extract text from page {page_num}")
        diag = self._diag()
        payload = text.extract_text(self.gateway, self.doc, page_num, diag)
        if payload is None:
            self._fail(ENGINE_ERROR, f"Failed to extract text from page {page_num}", diag)
        try:
            return payload.text
        finally:
            text.free_text(self.gateway, payload)

    def extract_xfa(self) -> Optional[str]:
        """Raw XFA XML of the document, or None when it carries no XFA data."""
        self._ensure_open("Failed to extract XFA data")
        diag = self._diag()
        payload, length = xfa.extract_xfa(self.gateway, self.doc, diag)
        if payload is None:
            if not diag.is_empty():
                self._fail(ENGINE_ERROR, "Failed to extract XFA data", diag)
            return None
        try:
            return payload.data[:length].decode("utf-8", errors="replace")
        finally:
            xfa.free_xfa(self.gateway, payload)

    def extract_xfa_json(self, data_only: bool = True) -> Optional[str]:
        xml = self.extract_xfa()
        if xml is None:
            return None
        return xfa_xml_to_json(xml, data_only=data_only)

    def _page_text(self, page_num: int, mode: ExtractionMode, dpi: int) -> str:
        if mode == ExtractionMode.OCR:
            return self.ocr.recognize(self.render_page(page_num, dpi), dpi)
        page_text = self.extract_text(page_num)
        if mode == ExtractionMode.HYBRID and not page_text.strip():
            return self.ocr.recognize(self.render_page(page_num, dpi), dpi)
        return page_text

    def extract_pages(self, mode: ExtractionMode = ExtractionMode.HYBRID,
                      pages: str = "all", dpi: int = DEFAULT_DPI) -> str:
        """
        Extract the selected pages and join them with a form-feed separator.

        pages uses 1-based ranges such as "1-3,5"; see parse_page_range.
        """
        mode = ExtractionMode(mode)
        try:
            indices: List[int] = parse_page_range(pages, self.page_count())
        except ValueError as e:
            raise InputError(f"Invalid page range '{pages}': {e}") from e
        results = [self._page_text(i, mode, dpi) for i in indices]
        logging.info(f"Extracted {len(results)} pages from '{self.pdf_path}' ({mode.value} mode)")
        return PAGE_SEPARATOR.join(results)

    def close(self):
        if self.gateway is None:
            return
        drop_document(self.gateway, self.doc)
        drop_context(self.gateway)
        self.doc = None
        self.gateway = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
