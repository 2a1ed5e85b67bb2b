# pdfgate/payload.py
"""
NUL-terminated byte payloads produced by the extractors.
"""

from typing import Optional

from pdfgate.gateway import Gateway

TEXT = "text"
XFA = "xfa"


class Payload:
    """
    Bytes allocated on behalf of a gateway.

    The stored buffer always ends in a NUL byte; len() and data exclude it.
    A payload must be given back through the disposer matching its kind,
    on the gateway that produced it.
    """

    def __init__(self, gateway: Gateway, data: bytes, kind: str):
        self.gateway = gateway
        self.kind = kind
        self._buffer: Optional[bytes] = bytes(data) + b"\0"
        gateway.track(f"{kind} payload")

    @property
    def released(self) -> bool:
        return self._buffer is None

    @property
    def raw(self) -> bytes:
        if self._buffer is None:
            raise ValueError(f"{self.kind} payload has been released.")
        return self._buffer

    @property
    def data(self) -> bytes:
        return self.raw[:-1]

    @property
    def text(self) -> str:
        return self.data.decode("utf-8", errors="replace")

    def __len__(self) -> int:
        return len(self.raw) - 1

    def __repr__(self) -> str:
        if self.released:
            return f"<Payload {self.kind} released>"
        return f"<Payload {self.kind} {len(self)} bytes>"


def release_payload(gateway: Optional[Gateway], payload: Optional[Payload], kind: str) -> None:
    if gateway is None or payload is None or payload.released:
        return
    if payload.kind != kind:
        raise ValueError(f"Cannot free a {payload.kind} payload as {kind}.")
    if payload.gateway is not gateway:
        raise ValueError("Payload was produced by a different gateway.")
    payload._buffer = None
    gateway.release(f"{kind} payload")
