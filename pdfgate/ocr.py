# pdfgate/ocr.py
"""
OCR of rendered pages with Tesseract.
"""

import logging
import shutil
from typing import Optional

import cv2
import numpy as np
import pytesseract
from PIL import Image

from pdfgate.config import DEFAULT_DPI, OCR_LANGUAGE, OCR_MIN_CONFIDENCE
from pdfgate.errors import OcrError

logging.basicConfig(level=logging.INFO)

# Tesseract page segmentation modes
PSM_AUTO_OSD = 1
PSM_AUTO = 3
OEM_LSTM_ONLY = 1


class PageOCR:

    def __init__(self, lang: str = OCR_LANGUAGE, min_confidence: int = OCR_MIN_CONFIDENCE):
        self.lang = lang
        self.min_confidence = min_confidence
        try:
            available = pytesseract.get_languages(config="")
        except (pytesseract.TesseractNotFoundError, pytesseract.TesseractError) as e:
            logging.error(f"Tesseract is not available: {e}")
            raise OcrError(f"Failed to initialize Tesseract with lang '{lang}': {e}") from e
        missing = [code for code in lang.split("+") if code not in available]
        if missing:
            raise OcrError(f"Failed to initialize Tesseract with lang '{lang}' (missing: {', '.join(missing)})")
        if "osd" in available:
            self.psm = PSM_AUTO_OSD
        else:
            logging.warning("'osd' traineddata not found. Auto-rotation (OSD) disabled, falling back to PSM_AUTO.")
            self.psm = PSM_AUTO

    def _config(self, dpi: int) -> str:
        return (
            f"--oem {OEM_LSTM_ONLY} --psm {self.psm} --dpi {dpi} "
            "-c tessedit_enable_doc_dict=1 -c preserve_interword_spaces=0"
        )

    @staticmethod
    def _prepare(img: np.ndarray) -> Image.Image:
        if img.ndim == 3 and img.shape[2] == 3:
            img = cv2.cvtColor(img, cv2.COLOR_RGB2GRAY)
        return Image.fromarray(img)

    @staticmethod
    def mean_confidence(data: dict) -> float:
        scores = []
        for conf in data.get("conf", []):
            try:
                value = float(conf)
            except (TypeError, ValueError):
                continue
            if value >= 0:
                scores.append(value)
        return sum(scores) / len(scores) if scores else 0.0

    def recognize(self, img: np.ndarray, dpi: int = DEFAULT_DPI) -> str:
        """
        OCR an RGB (or greyscale) page image rendered at the given DPI.

        Returns an empty string when the mean word confidence falls below
        min_confidence.
        """
        image = self._prepare(img)
        config = self._config(dpi)
        try:
            data = pytesseract.image_to_data(
                image, lang=self.lang, config=config, output_type=pytesseract.Output.DICT
            )
            if self.mean_confidence(data) < self.min_confidence:
                return ""
            return pytesseract.image_to_string(image, lang=self.lang, config=config)
        except pytesseract.TesseractError as e:
            logging.error(f"OCR failed: {e}")
            raise OcrError(f"Error during recognition: {e}") from e


def find_tesseract() -> Optional[str]:
    """Path of the tesseract binary pytesseract will run, if installed."""
    return shutil.which(pytesseract.pytesseract.tesseract_cmd)
