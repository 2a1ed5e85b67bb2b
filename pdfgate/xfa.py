# pdfgate/xfa.py
"""
XFA form data extraction.

The XFA entry of a PDF's AcroForm is either a single stream or an array of
(name, stream) pairs. The decoded streams are concatenated in array order
and returned as raw bytes; the XML itself is not interpreted here.
"""

from typing import List, NamedTuple, Optional, Tuple

import fitz  # PyMuPDF

from pdfgate.bridge import DiagnosticBuffer, EngineError, guarded
from pdfgate.document import Document, bound
from pdfgate.gateway import Gateway
from pdfgate.payload import XFA, Payload, release_payload

XFA_PATH = ("Root", "AcroForm", "XFA")

_WHITESPACE = " \t\r\n\f\0"
_DELIMITERS = "()<>[]{}/%"


class Reference(NamedTuple):
    xref: int
    generation: int


def _skip_space(text: str, i: int) -> int:
    while i < len(text):
        if text[i] in _WHITESPACE:
            i += 1
        elif text[i] == "%":
            while i < len(text) and text[i] not in "\r\n":
                i += 1
        else:
            break
    return i


def _read_literal(text: str, i: int) -> int:
    depth = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return i + 1
        i += 1
    raise EngineError("unterminated string in PDF object")


def _read_container(text: str, i: int, closer: str, out: Optional[List[str]] = None) -> int:
    while True:
        i = _skip_space(text, i)
        if i >= len(text):
            raise EngineError(f"missing '{closer}' in PDF object")
        if text.startswith(closer, i):
            return i + len(closer)
        end = _read_token(text, i)
        if out is not None:
            out.append(text[i:end])
        i = end


def _read_token(text: str, i: int) -> int:
    """Return the index just past the object starting at text[i]."""
    ch = text[i]
    if ch == "(":
        return _read_literal(text, i)
    if text.startswith("<<", i):
        return _read_container(text, i + 2, ">>")
    if ch == "<":
        end = text.find(">", i)
        if end < 0:
            raise EngineError("unterminated hex string in PDF object")
        return end + 1
    if ch == "[":
        return _read_container(text, i + 1, "]")
    start = i
    if ch == "/":
        i += 1
    while i < len(text) and text[i] not in _WHITESPACE and text[i] not in _DELIMITERS:
        i += 1
    if i == start:
        raise EngineError(f"unexpected {ch!r} in PDF object")
    return i


def array_items(source: str) -> list:
    """
    Split the source of a PDF array into its elements.

    Indirect references come back as Reference tuples; every other element
    is returned as its source text.
    """
    text = source.strip()
    if not text.startswith("["):
        raise EngineError(f"not a PDF array: {source[:40]!r}")
    tokens: List[str] = []
    _read_container(text, 1, "]", tokens)
    items: list = []
    for token in tokens:
        if (
            token == "R"
            and len(items) >= 2
            and isinstance(items[-1], str)
            and isinstance(items[-2], str)
            and items[-1].isdigit()
            and items[-2].isdigit()
        ):
            generation = int(items.pop())
            items.append(Reference(int(items.pop()), generation))
        else:
            items.append(token)
    return items


def _reference(value: str) -> Reference:
    items = array_items(f"[{value}]")
    if len(items) != 1 or not isinstance(items[0], Reference):
        raise EngineError(f"not an indirect reference: {value!r}")
    return items[0]


def _exists(handle: fitz.Document, xref: int) -> bool:
    return 0 < xref < handle.xref_length()


def _is_stream(handle: fitz.Document, xref: int) -> bool:
    return _exists(handle, xref) and bool(handle.xref_is_stream(xref))


def _xfa_node(handle: fitz.Document) -> Optional[Tuple[str, str]]:
    """Walk trailer -> Root -> AcroForm -> XFA; None if a link is missing."""
    path = ""
    for key in XFA_PATH:
        path = f"{path}/{key}" if path else key
        kind, value = handle.xref_get_key(-1, path)
        if kind == "null":
            return None
    return kind, value


def stream_parts(handle: fitz.Document, kind: str, value: str) -> List[int]:
    """xrefs of the streams making up an XFA node, in document order."""
    if kind == "xref":
        xref = _reference(value).xref
        if _is_stream(handle, xref):
            return [xref]
        if not _exists(handle, xref):
            return []
        value = handle.xref_object(xref, compressed=True)
        kind = "array" if value.lstrip().startswith("[") else "other"
    if kind != "array":
        return []
    # [name, stream, name, stream, ...]: only odd positions carry data
    return [
        item.xref
        for item in array_items(value)[1::2]
        if isinstance(item, Reference) and _is_stream(handle, item.xref)
    ]


def _extract(gateway: Gateway, document: Document) -> Optional[Payload]:
    handle = document.handle
    if not handle.is_pdf:
        return None
    node = _xfa_node(handle)
    if node is None:
        return None
    accumulator = bytearray()
    for xref in stream_parts(handle, *node):
        with gateway.scoped("stream buffer", handle.xref_stream(xref)) as data:
            accumulator += data or b""
    if not accumulator:
        return None
    return Payload(gateway, bytes(accumulator), XFA)


def extract_xfa(
    gateway: Optional[Gateway],
    document: Optional[Document],
    diag: Optional[DiagnosticBuffer] = None,
) -> Tuple[Optional[Payload], int]:
    """
    Return the concatenated XFA streams and their length.

    (None, 0) covers a missing argument, a non-PDF document, a PDF without
    AcroForm or XFA, and an engine failure; only the last one writes diag.
    """
    if not bound(gateway, document):
        return None, 0
    _, payload = guarded(diag, _extract, gateway, document)
    if payload is None:
        return None, 0
    return payload, len(payload)


def free_xfa(gateway: Optional[Gateway], payload: Optional[Payload]) -> None:
    release_payload(gateway, payload, XFA)
