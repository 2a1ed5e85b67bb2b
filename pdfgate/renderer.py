# pdfgate/renderer.py
"""
Page rasterization to RGB pixmaps using PyMuPDF.
"""

from typing import Optional, Tuple

import fitz  # PyMuPDF
import numpy as np

from pdfgate.bridge import ARGUMENT_ERROR, DiagnosticBuffer, guarded
from pdfgate.config import POINTS_PER_INCH
from pdfgate.document import Document, bound, load_page
from pdfgate.gateway import Gateway


class Pixmap:
    """
    Rendered page pixels owned by a gateway.

    samples is a view onto the engine buffer: row-major, top-down, n bytes
    per pixel, stride bytes per row. It is only meaningful until the pixmap
    is dropped.
    """

    def __init__(self, gateway: Gateway, handle: fitz.Pixmap):
        self.gateway = gateway
        self._handle: Optional[fitz.Pixmap] = handle
        gateway.track("pixmap")

    @property
    def handle(self) -> fitz.Pixmap:
        if self._handle is None:
            raise ValueError("Pixmap has been dropped.")
        return self._handle

    @property
    def dropped(self) -> bool:
        return self._handle is None

    @property
    def width(self) -> int:
        return self.handle.width

    @property
    def height(self) -> int:
        return self.handle.height

    @property
    def stride(self) -> int:
        return self.handle.stride

    @property
    def n(self) -> int:
        return self.handle.n

    @property
    def samples(self) -> memoryview:
        return self.handle.samples_mv

    def to_ndarray(self) -> np.ndarray:
        """Copy the pixels into a (height, width, n) uint8 array."""
        rows = np.frombuffer(self.samples, dtype=np.uint8).reshape(self.height, self.stride)
        img = rows[:, : self.width * self.n].reshape(self.height, self.width, self.n)
        # Must copy before the pixmap is dropped
        return img.copy()

    def __repr__(self) -> str:
        if self.dropped:
            return "<Pixmap dropped>"
        return f"<Pixmap {self.width}x{self.height} n={self.n} stride={self.stride}>"


def _render(gateway: Gateway, document: Document, page_number: int, dpi) -> Pixmap:
    with load_page(gateway, document, page_number) as page:
        scale = dpi / POINTS_PER_INCH
        matrix = fitz.Matrix(scale, scale)
        handle = page.get_pixmap(matrix=matrix, colorspace=fitz.csRGB, alpha=False)
    return Pixmap(gateway, handle)


def render_page(
    gateway: Optional[Gateway],
    document: Optional[Document],
    page_number: int,
    dpi,
    diag: Optional[DiagnosticBuffer] = None,
) -> Tuple[int, Optional[Pixmap]]:
    if not bound(gateway, document):
        return ARGUMENT_ERROR, None
    return guarded(diag, _render, gateway, document, page_number, dpi)


def drop_pixmap(gateway: Optional[Gateway], pixmap: Optional[Pixmap]) -> None:
    if gateway is None or pixmap is None or pixmap.dropped:
        return
    if pixmap.gateway is not gateway:
        raise ValueError("Pixmap was rendered by a different gateway.")
    pixmap._handle = None
    gateway.release("pixmap")


def pixmap_width(gateway: Gateway, pixmap: Pixmap) -> int:
    return pixmap.width


def pixmap_height(gateway: Gateway, pixmap: Pixmap) -> int:
    return pixmap.height


def pixmap_stride(gateway: Gateway, pixmap: Pixmap) -> int:
    return pixmap.stride


def pixmap_n(gateway: Gateway, pixmap: Pixmap) -> int:
    return pixmap.n


def pixmap_samples(gateway: Gateway, pixmap: Pixmap) -> memoryview:
    return pixmap.samples
