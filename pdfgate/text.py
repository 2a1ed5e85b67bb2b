# pdfgate/text.py
"""
Plain-text extraction of a single page through MuPDF's structured text.
"""

from typing import Optional

from pdfgate.bridge import DiagnosticBuffer, guarded
from pdfgate.document import Document, bound, load_page
from pdfgate.gateway import Gateway
from pdfgate.payload import TEXT, Payload, release_payload

# Default structured-text options: no images, whitespace normalised,
# ligatures expanded, no clipping to the mediabox.
STEXT_FLAGS = 0


def _extract(gateway: Gateway, document: Document, page_number: int) -> Payload:
    with load_page(gateway, document, page_number) as page:
        with gateway.scoped("text page", page.get_textpage(flags=STEXT_FLAGS)) as textpage:
            text = textpage.extractText()
    return Payload(gateway, text.encode("utf-8"), TEXT)


def extract_text(
    gateway: Optional[Gateway],
    document: Optional[Document],
    page_number: int,
    diag: Optional[DiagnosticBuffer] = None,
) -> Optional[Payload]:
    """
    Extract the text of one page as a NUL-terminated UTF-8 payload.

    A page without text yields an empty payload, never None. None means a
    missing argument or an engine failure (the latter fills diag).
    """
    if not bound(gateway, document):
        return None
    _, payload = guarded(diag, _extract, gateway, document, page_number)
    return payload


def free_text(gateway: Optional[Gateway], payload: Optional[Payload]) -> None:
    release_payload(gateway, payload, TEXT)
