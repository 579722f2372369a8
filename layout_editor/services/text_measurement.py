"""
Text measurement providers.

The engine never owns a measuring context: callers inject an object with a
``measure(text, font) -> float`` method, or ``None`` when no measurement is
available (validation then fails open). One instance per worker; instances
cache font objects and are not meant to be shared across threads.
"""

import logging
from typing import Dict, Protocol

import fitz  # PyMuPDF

from layout_editor.services.font_map import resolve_font_handle
from layout_editor.services.layout_models import FontDescriptor

logger = logging.getLogger(__name__)


class TextMeasurer(Protocol):
    def measure(self, text: str, font: FontDescriptor) -> float:
        ...


class FitzTextMeasurer:
    """Measures rendered width with PyMuPDF's base-14 font metrics."""

    def __init__(self):
        self._fonts: Dict[str, fitz.Font] = {}

    def _font(self, handle: str) -> fitz.Font:
        font = self._fonts.get(handle)
        if font is None:
            font = fitz.Font(handle)
            self._fonts[handle] = font
            logger.debug(f"[MEASURE] Loaded font handle {handle}")
        return font

    def measure(self, text: str, font: FontDescriptor) -> float:
        if not text:
            return 0.0
        handle = resolve_font_handle(font)
        return self._font(handle).text_length(text, fontsize=font.size)
