# pdfgate/bridge.py
"""
Conversion of engine exceptions into result codes.

Every fallible operation validates its arguments, then runs its body through
guarded(). An exception escaping the body is turned into ENGINE_ERROR and its
message is copied, truncated, into the caller's DiagnosticBuffer.
"""

from typing import Any, Callable, Optional, Tuple

ARGUMENT_ERROR = -1
OK = 0
ENGINE_ERROR = 1


class EngineError(RuntimeError):
    """Raised for conditions MuPDF rejects but PyMuPDF would let through."""


class DiagnosticBuffer:
    """
    Fixed-capacity byte buffer receiving engine error messages.

    A message is cut to capacity - 1 bytes and NUL-terminated. A buffer of
    capacity 0 is never written to.
    """

    def __init__(self, capacity: int = 256):
        if capacity < 0:
            raise ValueError("Diagnostic capacity must not be negative.")
        self.capacity = capacity
        self.raw = bytearray(capacity)

    def write(self, message: str) -> None:
        if self.capacity == 0:
            return
        data = message.encode("utf-8", errors="replace")[: self.capacity - 1]
        self.raw[: len(data)] = data
        self.raw[len(data)] = 0

    def clear(self) -> None:
        self.raw[:] = bytes(self.capacity)

    @property
    def value(self) -> bytes:
        end = self.raw.find(0)
        return bytes(self.raw if end < 0 else self.raw[:end])

    @property
    def message(self) -> str:
        return self.value.decode("utf-8", errors="replace")

    def is_empty(self) -> bool:
        return not self.value

    def __repr__(self) -> str:
        return f"DiagnosticBuffer(capacity={self.capacity}, message={self.message!r})"


def engine_message(exc: BaseException) -> str:
    message = str(exc).strip()
    return message or type(exc).__name__


def guarded(
    diag: Optional[DiagnosticBuffer],
    body: Callable[..., Any],
    *args: Any,
) -> Tuple[int, Any]:
    """Run body(*args); return (OK, result) or (ENGINE_ERROR, None)."""
    try:
        result = body(*args)
    except Exception as exc:
        if diag is not None:
            diag.write(engine_message(exc))
        return ENGINE_ERROR, None
    return OK, result
