# pdfgate/document.py
"""
Document handles: open, count pages, drop.
"""

import os
from contextlib import contextmanager
from typing import Optional, Tuple, Union

import fitz  # PyMuPDF

from pdfgate.bridge import ARGUMENT_ERROR, DiagnosticBuffer, EngineError, guarded
from pdfgate.gateway import Gateway, usable

PathArg = Union[str, "os.PathLike[str]"]


class Document:
    """An opened document bound to the gateway that opened it."""

    def __init__(self, gateway: Gateway, handle: fitz.Document, path: str):
        self.gateway = gateway
        self.handle = handle
        self.path = path
        self.closed = False

    @property
    def is_pdf(self) -> bool:
        return bool(self.handle.is_pdf)

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"<Document {self.path!r} {state}>"


def bound(gateway: Optional[Gateway], document: Optional[Document]) -> bool:
    """True when both handles are live and the document belongs to the gateway."""
    return (
        usable(gateway)
        and document is not None
        and not document.closed
        and document.gateway is gateway
    )


def _open(gateway: Gateway, path: str) -> Document:
    # fitz.open("") creates a new empty PDF instead of failing
    if not path:
        raise FileNotFoundError(f"cannot open file '{path}'")
    handle = fitz.open(path)
    gateway.track("document")
    return Document(gateway, handle, path)


def open_document(
    gateway: Optional[Gateway],
    path: Optional[PathArg],
    diag: Optional[DiagnosticBuffer] = None,
) -> Tuple[int, Optional[Document]]:
    if not usable(gateway) or path is None:
        return ARGUMENT_ERROR, None
    return guarded(diag, _open, gateway, os.fspath(path))


def drop_document(gateway: Optional[Gateway], document: Optional[Document]) -> None:
    if gateway is None or document is None or document.closed:
        return
    if document.gateway is not gateway:
        raise ValueError("Document was opened by a different gateway.")
    document.closed = True
    try:
        document.handle.close()
    finally:
        gateway.release("document")


def count_pages(
    gateway: Optional[Gateway],
    document: Optional[Document],
    diag: Optional[DiagnosticBuffer] = None,
) -> Tuple[int, Optional[int]]:
    if not bound(gateway, document):
        return ARGUMENT_ERROR, None
    return guarded(diag, lambda: document.handle.page_count)


@contextmanager
def load_page(gateway: Gateway, document: Document, number: int):
    """Load a page by zero-based index and release it when the block exits."""
    count = document.handle.page_count
    # PyMuPDF counts negative indices from the end; MuPDF rejects them.
    if not 0 <= number < count:
        raise EngineError(f"invalid page number: {number} (document has {count} pages)")
    page = document.handle.load_page(number)
    with gateway.scoped("page", page):
        yield page
