# pdfgate/config.py
"""
Shared constants for rendering, diagnostics and OCR.
"""

# Rasterization
DEFAULT_DPI = 300
MIN_DPI = 72
MAX_DPI = 600
POINTS_PER_INCH = 72.0

# Size of the diagnostic buffer the facade hands to the engine bridge
DIAGNOSTIC_CAPACITY = 256

# OCR
OCR_LANGUAGE = "eng"
OCR_MIN_CONFIDENCE = 60

# Separator between pages in multi-page extraction output
PAGE_SEPARATOR = "\n\f\n"
