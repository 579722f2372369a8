"""
Font substitution table: declared family/weight → base-14 font handle.

PyMuPDF ships the 14 standard PDF fonts under short handles ("helv", "tibo",
...). Both the measurer and the renderer resolve fonts through this table so
measured widths match what ends up on the page.
"""

from typing import Dict, Optional, Tuple

from layout_editor.services.layout_models import FontDescriptor

# family keyword → (regular, bold, italic, bold-italic)
FONT_SUBSTITUTIONS: Dict[str, Tuple[str, str, str, str]] = {
    "Times": ("tiro", "tibo", "tiit", "tibi"),
    "Courier": ("cour", "cobo", "coit", "cobi"),
    "Helvetica": ("helv", "hebo", "heit", "hebi"),
    "Arial": ("helv", "hebo", "heit", "hebi"),
}

DEFAULT_FAMILY = "Helvetica"

_ITALIC_MARKERS = ("Italic", "Oblique")


def resolve_family(family: Optional[str]) -> str:
    """Return the table key whose keyword appears in ``family``."""
    if family:
        for key in FONT_SUBSTITUTIONS:
            if key in family:
                return key
    return DEFAULT_FAMILY


def resolve_font_handle(font: FontDescriptor) -> str:
    regular, bold, italic, bold_italic = FONT_SUBSTITUTIONS[resolve_family(font.family)]
    is_italic = any(m in (font.family or "") for m in _ITALIC_MARKERS)
    if font.is_bold:
        return bold_italic if is_italic else bold
    return italic if is_italic else regular
