# pdfgate/errors.py
"""
Exceptions raised by the PDFExtractor facade.

The engine-level modules report failures as result codes; the facade turns
those codes into the exceptions below.
"""


class PdfGateError(Exception):
    """Base exception for all pdfgate errors."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    @property
    def default_message(self) -> str:
        return "An unknown pdfgate error occurred."


class InputError(PdfGateError):
    """Raised when arguments or input files are unusable."""

    @property
    def default_message(self) -> str:
        return "Invalid input."


class PdfError(PdfGateError):
    """Raised when the engine fails to open, render or extract."""

    @property
    def default_message(self) -> str:
        return "PDF processing failed."


class OcrError(PdfGateError):
    """Raised when Tesseract cannot be run or fails on a page."""

    @property
    def default_message(self) -> str:
        return "OCR failed."


class XfaParseError(PdfGateError):
    """Raised when XFA data cannot be converted to JSON."""

    @property
    def default_message(self) -> str:
        return "Could not parse XFA data."


class InternalError(PdfGateError):
    """Raised when the engine context cannot be created."""

    @property
    def default_message(self) -> str:
        return "Internal error."
