# pdfgate/gateway.py
"""
Engine context handle.

A Gateway stands for one MuPDF context. Every document, pixmap and payload
is produced through a gateway and has to be handed back to the same gateway
for disposal. The gateway keeps a ledger of live engine resources so a
caller can check that nothing was leaked once all handles are dropped.
"""

from collections import Counter
from contextlib import contextmanager
from typing import Dict, Optional

import fitz  # PyMuPDF


def _install_warning_sink():
    # Must run before any document is opened.
    fitz.TOOLS.mupdf_display_warnings(False)
    fitz.TOOLS.reset_mupdf_warnings()


class Gateway:

    def __init__(self):
        _install_warning_sink()
        self._live: Counter = Counter()
        self.closed = False

    def track(self, kind: str) -> None:
        """Record a newly acquired engine resource of the given kind."""
        self._live[kind] += 1

    def release(self, kind: str) -> None:
        if self._live[kind] <= 0:
            raise ValueError(f"No live '{kind}' resource to release.")
        self._live[kind] -= 1
        if not self._live[kind]:
            del self._live[kind]

    @contextmanager
    def scoped(self, kind: str, resource):
        """Track a resource for the duration of a block, on every exit path."""
        self.track(kind)
        try:
            yield resource
        finally:
            self.release(kind)

    def live_resources(self) -> Dict[str, int]:
        return dict(self._live)

    def close(self) -> None:
        self.closed = True

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"<Gateway {state} live={self.live_resources()}>"


def usable(gateway: Optional[Gateway]) -> bool:
    return gateway is not None and not gateway.closed


def new_context() -> Optional[Gateway]:
    try:
        return Gateway()
    except MemoryError:
        return None


def drop_context(gateway: Optional[Gateway]) -> None:
    if gateway is not None:
        gateway.close()
